import json
import re
from typing import Any, List

from api.engine.constants import USES_LABEL_ALIASES

REGEX_USES = re.compile(r"Uses\s\(\d+?\s(\w+?)\)")


def stable_json_dumps(obj: Any) -> str:
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False)


def split_multi_value(value: Any) -> List[str]:
    if not isinstance(value, str) or value == "":
        return []
    out: List[str] = []
    for part in value.split("."):
        token = part.strip()
        if token != "":
            out.append(token)
    return out


def capitalize(value: Any) -> str:
    token = str(value)
    if token == "":
        return token
    return token[0].upper() + token[1:]


def card_level(card: Any) -> int | None:
    customization_xp = getattr(card, "customization_xp", None)
    if customization_xp is not None:
        return customization_xp // 2
    return getattr(card, "xp", None)


def card_uses(card: Any) -> str | None:
    text = getattr(card, "real_text", None)
    if not isinstance(text, str) or text == "":
        return None
    first_line = text.split("\n")[0]
    match = REGEX_USES.search(first_line)
    if match is None:
        return None
    label = match.group(1)
    return USES_LABEL_ALIASES.get(label, label)
