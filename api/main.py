import os
from functools import lru_cache
from typing import Optional, Dict, Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from api.engine.access_models_v1 import AccessConfig, DeckOption, Selection
from api.engine.constants import ACCESS_RULES_VERSION, CATALOG_SCHEMA_VERSION, ENGINE_VERSION
from api.engine.investigator_access_v1 import (
    admitted_codes,
    filter_investigator_access,
    make_player_cards_filter,
)
from api.engine.unknowns import sort_unknowns
from engine.catalog import CardCatalog, load_catalog
from engine.logging import get_logger

logger = get_logger(__name__)


class AccessConfigFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    taboo_set_id: Optional[int] = None
    selections: Dict[str, Selection] = Field(default_factory=dict)
    ignore_unselected_customizable_options: bool = False
    target_deck: str = Field(default="slots", pattern="^(slots|extraSlots|both)$")
    additional_deck_options: Optional[List[DeckOption]] = None

    def to_access_config(self) -> AccessConfig:
        return AccessConfig(
            selections=self.selections,
            ignore_unselected_customizable_options=self.ignore_unselected_customizable_options,
            target_deck=self.target_deck,
            additional_deck_options=self.additional_deck_options,
        )


class AccessCheckRequest(AccessConfigFields):
    investigator_code: str = Field(..., description="Investigator card code")
    card_code: str = Field(..., description="Candidate card code")


class AccessCheckResponse(BaseModel):
    engine_version: str
    access_rules_version: str
    investigator_code: str
    canonical_investigator_code: str
    card_code: str
    target_deck: str
    filter_available: bool
    allowed: bool
    unknowns: List[Dict[str, Any]]


class AccessPoolRequest(AccessConfigFields):
    investigator_code: str = Field(..., description="Investigator card code")
    card_codes: Optional[List[str]] = Field(default=None, description="Defaults to every catalog card")


class AccessPoolResponse(BaseModel):
    engine_version: str
    access_rules_version: str
    investigator_code: str
    target_deck: str
    filter_available: bool
    cards_considered: int
    allowed_codes: List[str]
    unknowns: List[Dict[str, Any]]


@lru_cache(maxsize=8)
def get_catalog(taboo_set_id: Optional[int] = None) -> CardCatalog:
    return load_catalog(taboo_set_id)


def _require_card(catalog: CardCatalog, code: str, label: str):
    if not catalog.has_card(code):
        raise HTTPException(status_code=404, detail=f"Unknown {label} code: {code}")
    return catalog.get_card(code)


app = FastAPI(title="Investigator Access Engine", version=ENGINE_VERSION)

DEV_CORS = os.getenv("ARKHAM_ACCESS_DEV_CORS", "0") == "1"

if DEV_CORS:
    dev_ports = range(5173, 5181)
    allow_origins = [f"http://127.0.0.1:{port}" for port in dev_ports] + [
        f"http://localhost:{port}" for port in dev_ports
    ]
else:
    allow_origins = [
        "http://127.0.0.1:5173",
        "http://localhost:5173",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health():
    return {
        "ok": True,
        "engine_version": ENGINE_VERSION,
        "access_rules_version": ACCESS_RULES_VERSION,
        "catalog_schema_version": CATALOG_SCHEMA_VERSION,
    }


@app.get("/investigators/{code}")
def investigator(code: str, taboo_set_id: Optional[int] = None):
    catalog = get_catalog(taboo_set_id)
    card = _require_card(catalog, code, "investigator")
    canonical_code = catalog.canonical_investigator_code(code)
    return {
        "code": card.code,
        "canonical_code": canonical_code,
        "name": card.real_name,
        "has_deck_rules": make_player_cards_filter(card, "deck_options", "deck_requirements") is not None,
        "has_extra_deck_rules": (
            make_player_cards_filter(card, "side_deck_options", "side_deck_requirements") is not None
        ),
        "signature_cards": catalog.signature_relations(card.code).to_payload(),
    }


@app.post("/access/check", response_model=AccessCheckResponse)
def access_check(req: AccessCheckRequest):
    catalog = get_catalog(req.taboo_set_id)
    investigator_card = _require_card(catalog, req.investigator_code, "investigator")
    card = _require_card(catalog, req.card_code, "card")
    config = req.to_access_config()

    unknowns: List[Dict[str, Any]] = []
    access_filter = filter_investigator_access(investigator_card, config, unknowns)
    allowed = access_filter is not None and bool(access_filter(card))

    return AccessCheckResponse(
        engine_version=ENGINE_VERSION,
        access_rules_version=ACCESS_RULES_VERSION,
        investigator_code=investigator_card.code,
        canonical_investigator_code=catalog.canonical_investigator_code(investigator_card.code),
        card_code=card.code,
        target_deck=config.target_deck,
        filter_available=access_filter is not None,
        allowed=allowed,
        unknowns=sort_unknowns(unknowns),
    )


@app.post("/access/pool", response_model=AccessPoolResponse)
def access_pool(req: AccessPoolRequest):
    catalog = get_catalog(req.taboo_set_id)
    investigator_card = _require_card(catalog, req.investigator_code, "investigator")
    config = req.to_access_config()

    if req.card_codes is None:
        cards = list(catalog.iter_cards())
    else:
        cards = [_require_card(catalog, code, "card") for code in req.card_codes]

    unknowns: List[Dict[str, Any]] = []
    access_filter = filter_investigator_access(investigator_card, config, unknowns)
    allowed_codes = admitted_codes(access_filter, cards)
    logger.info(
        "access pool for %s: %d/%d cards admitted",
        investigator_card.code,
        len(allowed_codes),
        len(cards),
    )

    return AccessPoolResponse(
        engine_version=ENGINE_VERSION,
        access_rules_version=ACCESS_RULES_VERSION,
        investigator_code=investigator_card.code,
        target_deck=config.target_deck,
        filter_available=access_filter is not None,
        cards_considered=len(cards),
        allowed_codes=allowed_codes,
        unknowns=sort_unknowns(unknowns),
    )
