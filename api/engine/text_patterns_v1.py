from __future__ import annotations

from typing import Any, Iterable

VERSION = "text_patterns_v1"

PARLEY_OPTION_PHRASE = "Parley"
SEAL_TEXT_PHRASES = (" seal ", "Seal (")


def _text_lines(values: Any) -> Iterable[str]:
    if not isinstance(values, (list, tuple)):
        return []
    return [value for value in values if isinstance(value, str)]


def option_mentions_parley(option: Any) -> bool:
    return any(PARLEY_OPTION_PHRASE in line for line in _text_lines(getattr(option, "text", None)))


def card_text_mentions_seal(card: Any) -> bool:
    text = getattr(card, "real_text", None)
    if not isinstance(text, str):
        return False
    return any(phrase in text for phrase in SEAL_TEXT_PHRASES)
