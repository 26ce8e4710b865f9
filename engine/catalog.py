from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Set, Tuple

from pydantic import ValidationError

from api.engine.access_models_v1 import Card
from api.engine.constants import TYPE_INVESTIGATOR
from api.engine.special_cases_v1 import prefers_required_over_replacement
from engine.db import load_card_rows, load_taboo_rows
from engine.logging import get_logger

VERSION = "catalog_v1"

logger = get_logger(__name__)

_EMPTY: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class SignatureRelations:
    required: FrozenSet[str] = _EMPTY
    advanced: FrozenSet[str] = _EMPTY
    replacement: FrozenSet[str] = _EMPTY
    parallel: FrozenSet[str] = _EMPTY

    def to_payload(self) -> Dict[str, List[str]]:
        return {
            "required": sorted(self.required),
            "advanced": sorted(self.advanced),
            "replacement": sorted(self.replacement),
            "parallel": sorted(self.parallel),
        }


@dataclass(frozen=True)
class CardCatalog:
    cards: Mapping[str, Card]
    relations: Mapping[str, SignatureRelations] = field(default_factory=lambda: MappingProxyType({}))
    taboo_set_id: int | None = None

    def get_card(self, code: str) -> Card:
        card = self.cards.get(code)
        if card is None:
            raise KeyError(code)
        return card

    def has_card(self, code: str) -> bool:
        return code in self.cards

    def canonical_investigator_code(self, code: str) -> str:
        card = self.get_card(code)
        return card.alternate_of_code or card.duplicate_of_code or card.code

    def signature_relations(self, code: str) -> SignatureRelations:
        return self.relations.get(code, SignatureRelations())

    def iter_cards(self) -> Tuple[Card, ...]:
        return tuple(self.cards[code] for code in sorted(self.cards))


def apply_taboo(card_row: Dict[str, Any], taboo_row: Dict[str, Any] | None) -> Dict[str, Any]:
    if not taboo_row:
        return card_row
    # Taboo entries duplicate the card structure, so a shallow merge is enough.
    merged = dict(card_row)
    merged.update(taboo_row)
    return merged


def _relation_kind(card: Card) -> str:
    text = card.real_text or ""
    if "Advanced." in text:
        return "advanced"
    if "Replacement." in text and not prefers_required_over_replacement(card.code):
        return "replacement"
    if card.parallel:
        return "parallel"
    return "required"


def build_signature_relations(cards: Mapping[str, Card]) -> Dict[str, SignatureRelations]:
    buckets: Dict[str, Dict[str, Set[str]]] = {}

    def _bucket(investigator_code: str) -> Dict[str, Set[str]]:
        return buckets.setdefault(
            investigator_code,
            {"required": set(), "advanced": set(), "replacement": set(), "parallel": set()},
        )

    for card in cards.values():
        if card.deck_requirements is not None and card.deck_requirements.card:
            for required_code in card.deck_requirements.card:
                _bucket(card.code)["required"].add(required_code)

        if card.hidden or card.restrictions is None or not card.restrictions.investigator:
            continue

        for investigator_code in card.restrictions.investigator:
            investigator = cards.get(investigator_code)
            # Reprinted investigators resolve through their original printing.
            if investigator is None or investigator.duplicate_of_code:
                continue
            _bucket(investigator_code)[_relation_kind(card)].add(card.code)

    for card in cards.values():
        if not (
            card.type_code == TYPE_INVESTIGATOR
            and card.parallel
            and card.alt_art_investigator
            and card.alternate_of_code
        ):
            continue
        root = _bucket(card.alternate_of_code)
        own = _bucket(card.code)
        for kind in ("advanced", "replacement", "parallel"):
            own[kind] |= root[kind]

    return {
        code: SignatureRelations(
            required=frozenset(bucket["required"]),
            advanced=frozenset(bucket["advanced"]),
            replacement=frozenset(bucket["replacement"]),
            parallel=frozenset(bucket["parallel"]),
        )
        for code, bucket in buckets.items()
    }


def build_catalog(
    card_rows: Iterable[Dict[str, Any]],
    taboo_rows: Iterable[Dict[str, Any]] | None = None,
    taboo_set_id: int | None = None,
) -> CardCatalog:
    taboos_by_code: Dict[str, Dict[str, Any]] = {}
    for taboo in taboo_rows or []:
        code = taboo.get("code")
        if isinstance(code, str) and code != "":
            taboos_by_code[code] = taboo

    cards: Dict[str, Card] = {}
    for row in card_rows:
        code = row.get("code")
        if not isinstance(code, str) or code == "":
            continue
        try:
            cards[code] = Card.model_validate(apply_taboo(row, taboos_by_code.get(code)))
        except ValidationError as exc:
            logger.warning("skipping card %s: %s", code, exc.errors(include_url=False))

    relations = build_signature_relations(cards)
    logger.info("catalog built: cards=%d taboo_set_id=%s", len(cards), taboo_set_id)

    return CardCatalog(
        cards=MappingProxyType(cards),
        relations=MappingProxyType(relations),
        taboo_set_id=taboo_set_id,
    )


def load_catalog(taboo_set_id: int | None = None) -> CardCatalog:
    taboo_rows = load_taboo_rows(taboo_set_id) if taboo_set_id else []
    return build_catalog(load_card_rows(), taboo_rows, taboo_set_id)
