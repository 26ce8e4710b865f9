from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from api.engine.access_models_v1 import DeckOption, LevelRange
from api.engine.constants import PLAYER_FACTIONS

VERSION = "special_cases_v1"

SUZI_CODE = "89001"

# Gloria only has replacement signatures; they are treated as required cards.
REQUIRED_OVER_REPLACEMENT_CODES = frozenset({"98020", "98021"})

# investigator code -> [(insert position, option)]
# Investigators whose printed deck options under-describe their actual access.
SYNTHETIC_DECK_OPTIONS: Dict[str, Tuple[Tuple[int, DeckOption], ...]] = {
    SUZI_CODE: (
        (
            1,
            DeckOption(
                level=LevelRange(min=0, max=5),
                faction=list(PLAYER_FACTIONS),
            ),
        ),
    ),
}


def apply_deck_option_overrides(investigator_code: str, options: Sequence[DeckOption]) -> List[DeckOption]:
    out = list(options)
    for position, option in SYNTHETIC_DECK_OPTIONS.get(investigator_code, ()):
        out.insert(position, option)
    return out


def prefers_required_over_replacement(card_code: str) -> bool:
    return card_code in REQUIRED_OVER_REPLACEMENT_CODES
