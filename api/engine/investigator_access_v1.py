from __future__ import annotations

from typing import Any, Dict, Iterable, List

from api.engine.access_models_v1 import AccessConfig, Card, DeckOption, DeckRequirements
from api.engine.card_filters_v1 import filter_required, filter_restrictions, filter_type
from api.engine.constants import (
    FACTION_MYTHOS,
    NON_PLAYER_TYPE_CODES,
    SUBTYPE_BASIC_WEAKNESS,
    TARGET_DECK_EXTRA_SLOTS,
    TARGET_DECK_SLOTS,
)
from api.engine.filter_combinators_v1 import Filter, and_filters, not_filter, not_unless, or_filters
from api.engine.option_filter_v1 import make_option_filter
from api.engine.special_cases_v1 import apply_deck_option_overrides
from api.engine.unknowns import ACCESS_FILTER_NOOP, add_unknown
from engine.catalog import CardCatalog
from engine.logging import get_logger

VERSION = "investigator_access_v1"

MAIN_DECK_ACCESSORS = ("deck_options", "deck_requirements")
EXTRA_DECK_ACCESSORS = ("side_deck_options", "side_deck_requirements")

logger = get_logger(__name__)


def _target_deck(config: AccessConfig | None) -> str:
    if config is None:
        return TARGET_DECK_SLOTS
    return config.target_deck


def _is_basic_weakness(card: Card) -> bool:
    return card.subtype_code == SUBTYPE_BASIC_WEAKNESS


def _is_signature_encounter_card(card: Card) -> bool:
    return (
        bool(card.encounter_code)
        and bool(card.deck_limit)
        and not card.back_link_id
        and not card.double_sided
        and card.faction_code != FACTION_MYTHOS
    )


def _in_requirement_manifest(manifest: Dict[str, Any]) -> Filter:
    def _listed(card: Card) -> bool:
        return card.code in manifest

    return _listed


def make_player_cards_filter(
    investigator: Card,
    options_accessor: str = "deck_options",
    requirements_accessor: str = "deck_requirements",
    config: AccessConfig | None = None,
    unknowns: List[Dict[str, Any]] | None = None,
) -> Filter | None:
    options: List[DeckOption] | None = getattr(investigator, options_accessor)
    requirements: DeckRequirements | None = getattr(investigator, requirements_accessor)
    manifest = requirements.card if requirements is not None else None

    if options is None or manifest is None:
        return None

    # normalize parallel investigators to root for lookups.
    code = investigator.alternate_of_code or investigator.code
    options = apply_deck_option_overrides(code, options)

    ands: List[Filter] = [
        filter_restrictions(investigator),
        not_filter(filter_type(NON_PLAYER_TYPE_CODES)),
    ]

    ors: List[Filter] = []
    target_deck = _target_deck(config)

    if target_deck == TARGET_DECK_EXTRA_SLOTS:
        ors.append(_in_requirement_manifest(manifest))
    else:
        ors.extend(
            [
                filter_required(investigator),
                _is_basic_weakness,
                _is_signature_encounter_card,
            ]
        )

    filters: List[Filter] = []

    for option in options:
        option_filter = make_option_filter(option, config, unknowns)
        if option_filter is None:
            continue

        if option.not_:
            # Every inclusion seen so far exempts a card from this exclusion.
            ands.append(not_unless(option_filter, list(filters)) if filters else not_filter(option_filter))
        else:
            filters.append(option_filter)

    ors.extend(filters)

    if target_deck != TARGET_DECK_EXTRA_SLOTS and config is not None and config.additional_deck_options:
        for option in config.additional_deck_options:
            option_filter = make_option_filter(option, config, unknowns)
            if option_filter is None:
                continue

            if option.not_:
                ands.append(not_filter(option_filter))
            else:
                ors.append(option_filter)

    return and_filters([or_filters(ors), *ands])


def filter_investigator_access(
    investigator: Card,
    config: AccessConfig | None = None,
    unknowns: List[Dict[str, Any]] | None = None,
) -> Filter | None:
    mode = _target_deck(config)

    deck_filter = None
    if mode != TARGET_DECK_EXTRA_SLOTS:
        deck_filter = make_player_cards_filter(investigator, *MAIN_DECK_ACCESSORS, config=config, unknowns=unknowns)

    extra_deck_filter = None
    if mode != TARGET_DECK_SLOTS:
        extra_deck_filter = make_player_cards_filter(
            investigator, *EXTRA_DECK_ACCESSORS, config=config, unknowns=unknowns
        )

    if mode != TARGET_DECK_EXTRA_SLOTS and deck_filter is None:
        logger.warning("filter is a noop: %s is not an investigator.", investigator.code)
        add_unknown(
            unknowns,
            code=ACCESS_FILTER_NOOP,
            input_value=investigator.code,
            message="Card has no deck building rules; no cards are admissible.",
            reason=f"target_deck={mode}",
        )

    if mode == TARGET_DECK_SLOTS:
        return deck_filter
    if mode == TARGET_DECK_EXTRA_SLOTS:
        return extra_deck_filter

    present = [fn for fn in (deck_filter, extra_deck_filter) if fn is not None]
    if len(present) == 0:
        return None
    if len(present) == 1:
        return present[0]
    return or_filters(present)


def has_access(
    investigator: Card,
    card: Card,
    config: AccessConfig | None = None,
    unknowns: List[Dict[str, Any]] | None = None,
) -> bool:
    access_filter = filter_investigator_access(investigator, config, unknowns)
    if access_filter is None:
        return False
    return bool(access_filter(card))


def filter_access_pool(
    investigator: Card,
    cards: Iterable[Card],
    config: AccessConfig | None = None,
    unknowns: List[Dict[str, Any]] | None = None,
) -> List[str]:
    return admitted_codes(filter_investigator_access(investigator, config, unknowns), cards)


def admitted_codes(access_filter: Filter | None, cards: Iterable[Card]) -> List[str]:
    if access_filter is None:
        return []
    return [card.code for card in cards if access_filter(card)]


def has_access_by_code(
    catalog: CardCatalog,
    investigator_code: str,
    card_code: str,
    config: AccessConfig | None = None,
    unknowns: List[Dict[str, Any]] | None = None,
) -> bool:
    investigator = catalog.get_card(investigator_code)
    card = catalog.get_card(card_code)
    return has_access(investigator, card, config, unknowns)
