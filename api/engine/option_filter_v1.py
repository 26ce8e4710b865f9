from __future__ import annotations

from typing import Any, Dict, List

from api.engine.access_models_v1 import AccessConfig, DeckOption, FactionSelection, OptionSelection
from api.engine.card_filters_v1 import (
    filter_card_level,
    filter_factions,
    filter_permanence,
    filter_seal,
    filter_slot,
    filter_tag,
    filter_traits,
    filter_type,
    filter_uses,
)
from api.engine.constants import (
    FACTION_SELECTION_KEY_DEFAULT,
    INERT_OPTION_TAGS,
    OPTION_SELECTION_KEY_DEFAULT,
    TAG_HEALS_DAMAGE,
    TAG_HEALS_HORROR,
    TAG_PARLEY,
    TAG_SEAL,
)
from api.engine.filter_combinators_v1 import Filter, and_filters, or_filters
from api.engine.text_patterns_v1 import option_mentions_parley
from api.engine.unknowns import DECK_OPTION_UNRECOGNIZED, add_unknown
from api.engine.utils import capitalize, stable_json_dumps
from engine.logging import get_logger

VERSION = "option_filter_v1"

logger = get_logger(__name__)


def option_signature(option: DeckOption) -> str:
    return stable_json_dumps(option.model_dump(mode="json", by_alias=True, exclude_none=True))


def _is_inert_option(option: DeckOption) -> bool:
    if option.deck_size_select is not None:
        return True
    return any(tag in INERT_OPTION_TAGS for tag in option.tag or [])


def _checks_customizable_options(config: AccessConfig | None) -> bool:
    if config is None:
        return True
    return not config.ignore_unselected_customizable_options


def _lookup_selection(config: AccessConfig | None, option_id: str | None, default_key: str) -> Any:
    if config is None:
        return None
    # Selections keyed by the option id win; otherwise fall back to the shared key.
    if option_id and option_id in config.selections:
        return config.selections[option_id]
    return config.selections.get(default_key)


def _faction_select_filter(option: DeckOption, config: AccessConfig | None) -> Filter:
    selection = _lookup_selection(config, option.id, FACTION_SELECTION_KEY_DEFAULT)
    if isinstance(selection, FactionSelection) and isinstance(selection.value, str):
        return filter_factions([selection.value])
    return filter_factions(option.faction_select or [])


def _option_select_filters(option: DeckOption, config: AccessConfig | None) -> List[Filter]:
    selection = _lookup_selection(config, option.id, OPTION_SELECTION_KEY_DEFAULT)
    selected_id = None
    if isinstance(selection, OptionSelection) and selection.value is not None:
        selected_id = selection.value.id

    out: List[Filter] = []
    for select in option.option_select or []:
        if selected_id is not None and select.id != selected_id:
            continue

        select_filters: List[Filter] = []
        if select.level is not None:
            select_filters.append(filter_card_level(select.level.min, select.level.max, check_customizable=True))
        if select.trait is not None:
            select_filters.append(filter_traits([capitalize(trait) for trait in select.trait]))

        out.append(and_filters(select_filters))
    return out


def make_option_filter(
    option: DeckOption,
    config: AccessConfig | None = None,
    unknowns: List[Dict[str, Any]] | None = None,
) -> Filter | None:
    """Compile one deck option into a card predicate.

    Returns None for inert options and for options with at most one
    recognized field. Such options are dropped from the rule set entirely,
    so they never reach an AND or OR group.
    """
    if _is_inert_option(option):
        return None

    check_customizable = _checks_customizable_options(config)
    option_filters: List[Filter] = []
    filter_count = 0

    if option.not_:
        filter_count += 1

    if option.limit:
        filter_count += 1

    if option.faction is not None:
        filter_count += 1
        option_filters.append(filter_factions(option.faction))

    if option.faction_select is not None:
        filter_count += 1
        option_filters.append(_faction_select_filter(option, config))

    level = option.base_level if option.base_level is not None else option.level
    if level is not None:
        filter_count += 1
        option_filters.append(filter_card_level(level.min, level.max, check_customizable=True))

    # Absent means either is allowed; not counted toward the threshold.
    if option.permanent is not None:
        option_filters.append(filter_permanence(option.permanent))

    if option.trait is not None:
        filter_count += 1
        # Option traits are stored lower-case, card traits are capitalized.
        option_filters.append(
            filter_traits([capitalize(trait) for trait in option.trait], check_customizable)
        )

    if option.uses is not None:
        filter_count += 1
        option_filters.append(or_filters([filter_uses(label) for label in option.uses]))

    if option.type is not None:
        filter_count += 1
        option_filters.append(filter_type(option.type))

    if option.option_select is not None:
        select_filters = _option_select_filters(option, config)
        filter_count += len(select_filters) + 1
        option_filters.append(or_filters(select_filters))

    if option_mentions_parley(option):
        filter_count += 1
        option_filters.append(filter_tag(TAG_PARLEY, True))

    tags = option.tag or []

    if TAG_HEALS_HORROR in tags:
        filter_count += 1
        option_filters.append(filter_tag(TAG_HEALS_HORROR, check_customizable))

    if TAG_HEALS_DAMAGE in tags:
        filter_count += 1
        option_filters.append(filter_tag(TAG_HEALS_DAMAGE, check_customizable))

    if TAG_SEAL in tags:
        filter_count += 1
        option_filters.append(filter_seal(check_customizable))

    if option.slot is not None:
        filter_count += 1
        for slot in option.slot:
            option_filters.append(filter_slot(slot))

    if filter_count <= 1:
        signature = option_signature(option)
        logger.debug("unknown deck requirement: %s", signature)
        add_unknown(
            unknowns,
            code=DECK_OPTION_UNRECOGNIZED,
            input_value=signature,
            message="Deck option was not applied.",
            reason=f"recognized_fields={filter_count}",
        )
        return None

    return and_filters(option_filters)
