from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from api.engine.utils import split_multi_value

VERSION = "access_models_v1"


def _coerce_tag_list(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return split_multi_value(value)
    return value


def _coerce_code_mapping(value: Any) -> Any:
    if isinstance(value, (list, tuple, set)):
        return {str(code): str(code) for code in value}
    return value


class LevelRange(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    min: int = 0
    max: int = 5


class OptionSelect(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: Optional[str] = None
    level: Optional[LevelRange] = None
    trait: Optional[List[str]] = None


class DeckOption(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    id: Optional[str] = None
    name: Optional[str] = None
    error: Optional[str] = None

    faction: Optional[List[str]] = None
    faction_select: Optional[List[str]] = None
    level: Optional[LevelRange] = None
    base_level: Optional[LevelRange] = None
    permanent: Optional[bool] = None
    trait: Optional[List[str]] = None
    uses: Optional[List[str]] = None
    type: Optional[List[str]] = None
    slot: Optional[List[str]] = None
    tag: Optional[List[str]] = None
    text: Optional[List[str]] = None
    option_select: Optional[List[OptionSelect]] = None
    deck_size_select: Optional[Any] = None
    atleast: Optional[Dict[str, Any]] = None
    virtual: Optional[bool] = None

    not_: Optional[bool] = Field(default=None, alias="not")
    limit: Optional[int] = None

    @field_validator("tag", mode="before")
    @classmethod
    def _tags_from_string(cls, value: Any) -> Any:
        return _coerce_tag_list(value)


class DeckRequirements(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    size: Optional[int] = None
    card: Optional[Dict[str, Any]] = None
    random: Optional[List[Any]] = None

    @field_validator("card", mode="before")
    @classmethod
    def _card_codes_from_list(cls, value: Any) -> Any:
        return _coerce_code_mapping(value)


class CustomizationOption(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    xp: Optional[int] = None
    choice: Optional[str] = None
    real_traits: Optional[str] = None
    real_text: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_from_string(cls, value: Any) -> Any:
        return _coerce_tag_list(value)


class CardRestrictions(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    investigator: Optional[Dict[str, Any]] = None
    trait: Optional[List[str]] = None

    @field_validator("investigator", mode="before")
    @classmethod
    def _investigators_from_list(cls, value: Any) -> Any:
        return _coerce_code_mapping(value)


class Card(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    code: str
    real_name: Optional[str] = None
    real_subname: Optional[str] = None
    real_text: Optional[str] = None

    faction_code: Optional[str] = None
    faction2_code: Optional[str] = None
    faction3_code: Optional[str] = None
    type_code: Optional[str] = None
    subtype_code: Optional[str] = None
    encounter_code: Optional[str] = None
    deck_limit: Optional[int] = None

    real_traits: Optional[str] = None
    real_slot: Optional[str] = None
    permanent: Optional[bool] = None
    tags: Optional[List[str]] = None

    xp: Optional[int] = None
    customization_xp: Optional[int] = None
    customization_options: Optional[List[CustomizationOption]] = None
    restrictions: Optional[CardRestrictions] = None

    back_link_id: Optional[str] = None
    duplicate_of_code: Optional[str] = None
    alternate_of_code: Optional[str] = None
    double_sided: Optional[bool] = None
    hidden: Optional[bool] = None
    parallel: Optional[bool] = None
    alt_art_investigator: Optional[bool] = None

    deck_options: Optional[List[DeckOption]] = None
    deck_requirements: Optional[DeckRequirements] = None
    side_deck_options: Optional[List[DeckOption]] = None
    side_deck_requirements: Optional[DeckRequirements] = None

    taboo_set_id: Optional[int] = None
    taboo_xp: Optional[int] = None
    real_taboo_text_change: Optional[str] = None
    exceptional: Optional[bool] = None

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_from_string(cls, value: Any) -> Any:
        return _coerce_tag_list(value)


class FactionSelection(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["faction"] = "faction"
    value: Optional[str] = None
    options: List[str] = Field(default_factory=list)
    name: Optional[str] = None
    accessor: Optional[str] = None


class DeckSizeSelection(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["deckSize"] = "deckSize"
    value: int
    options: List[int] = Field(default_factory=list)
    name: Optional[str] = None
    accessor: Optional[str] = None


class OptionSelection(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["option"] = "option"
    value: Optional[OptionSelect] = None
    options: List[OptionSelect] = Field(default_factory=list)
    name: Optional[str] = None
    accessor: Optional[str] = None


Selection = Annotated[
    Union[FactionSelection, DeckSizeSelection, OptionSelection],
    Field(discriminator="type"),
]


class AccessConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    selections: Dict[str, Selection] = Field(default_factory=dict)
    # Customization options can grant traits or tags before they are purchased.
    # Listing cards wants them considered; validating a deck wants only applied ones.
    ignore_unselected_customizable_options: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "ignore_unselected_customizable_options",
            "ignoreUnselectedCustomizableOptions",
        ),
    )
    target_deck: Literal["slots", "extraSlots", "both"] = Field(
        default="slots",
        validation_alias=AliasChoices("target_deck", "targetDeck"),
    )
    additional_deck_options: Optional[List[DeckOption]] = Field(
        default=None,
        validation_alias=AliasChoices("additional_deck_options", "additionalDeckOptions"),
    )
