from __future__ import annotations

from typing import Any, Iterable, List, Sequence

from api.engine.access_models_v1 import Card
from api.engine.constants import FACTION_MULTICLASS, TAG_SEAL
from api.engine.filter_combinators_v1 import Filter, and_filters, not_filter, or_filters
from api.engine.text_patterns_v1 import card_text_mentions_seal
from api.engine.utils import card_level, card_uses, split_multi_value

VERSION = "card_filters_v1"


def _customization_options(card: Card) -> List[Any]:
    return list(card.customization_options or [])


def filter_multiclass(card: Card) -> bool:
    return bool(card.faction2_code)


def filter_faction(faction: str) -> Filter:
    def _faction(card: Card) -> bool:
        return (
            card.faction_code == faction
            or (bool(card.faction2_code) and card.faction2_code == faction)
            or (bool(card.faction3_code) and card.faction3_code == faction)
        )

    return _faction


def filter_factions(factions: Iterable[str]) -> Filter:
    ands: List[Filter] = []
    ors: List[Filter] = []

    for faction in factions:
        if faction == FACTION_MULTICLASS:
            ands.append(filter_multiclass)
        else:
            ors.append(filter_faction(faction))

    return and_filters([or_filters(ors), *ands])


def filter_card_level(level_min: int, level_max: int, check_customizable: bool = False) -> Filter:
    def _level(card: Card) -> bool:
        # Customizable cards can reach any level; they pass unless the range is enforced.
        if not check_customizable and card.customization_options:
            return True
        level = card_level(card)
        return level is not None and level_min <= level <= level_max

    return _level


def filter_permanent(card: Card) -> bool:
    return bool(card.permanent)


def filter_permanence(required: bool) -> Filter:
    if required:
        return filter_permanent
    return not_filter(filter_permanent)


def filter_type(type_codes: Sequence[str]) -> Filter:
    enabled = frozenset(type_codes)

    def _type(card: Card) -> bool:
        return card.type_code in enabled

    return _type


def filter_slot(slot: str) -> Filter:
    def _slot(card: Card) -> bool:
        return bool(card.real_slot) and slot in card.real_slot

    return _slot


def filter_tag(tag: str, check_customizable_options: bool) -> Filter:
    def _tag(card: Card) -> bool:
        has_tag = tag in (card.tags or [])
        if has_tag or not check_customizable_options or not card.customization_options:
            return has_tag
        return any(tag in (option.tags or []) for option in _customization_options(card))

    return _tag


def filter_seal(check_customizable_options: bool) -> Filter:
    return or_filters([filter_tag(TAG_SEAL, check_customizable_options), card_text_mentions_seal])


def filter_trait(trait: str, check_customizable_options: bool = False) -> Filter:
    def _trait(card: Card) -> bool:
        has_trait = trait in split_multi_value(card.real_traits)
        if has_trait or not card.customization_options or not check_customizable_options:
            return has_trait
        return any(trait in split_multi_value(option.real_traits) for option in _customization_options(card))

    return _trait


def filter_traits(traits: Iterable[str], check_customizable_options: bool = False) -> Filter:
    return or_filters([filter_trait(trait, check_customizable_options) for trait in traits])


def filter_uses(label: str) -> Filter:
    def _uses(card: Card) -> bool:
        return card_uses(card) == label

    return _uses


def filter_required(investigator: Card) -> Filter:
    # Parallel printings and reprints carry their root code in these fields.
    codes = [
        code
        for code in (investigator.code, investigator.duplicate_of_code, investigator.alternate_of_code)
        if code
    ]

    def _required(card: Card) -> bool:
        restricted_to = card.restrictions.investigator if card.restrictions is not None else None
        if not restricted_to:
            return False
        return any(code in restricted_to for code in codes)

    return _required


def filter_restrictions(investigator: Card) -> Filter:
    investigator_traits = [trait.lower() for trait in split_multi_value(investigator.real_traits)]

    def _restrictions(card: Card) -> bool:
        if card.restrictions is None or card.restrictions.trait is None:
            return True
        target_traits = card.restrictions.trait
        return any(trait in target_traits for trait in investigator_traits)

    return _restrictions
