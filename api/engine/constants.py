# --- Versions (core) ---
ENGINE_VERSION = "0.3.0"
ACCESS_RULES_VERSION = "access_rules_v1"
CATALOG_SCHEMA_VERSION = "catalog_v1"

# --- Target decks ---
TARGET_DECK_SLOTS = "slots"
TARGET_DECK_EXTRA_SLOTS = "extraSlots"

# --- Card codes ---
FACTION_MYTHOS = "mythos"
FACTION_MULTICLASS = "multiclass"
PLAYER_FACTIONS = ("neutral", "guardian", "mystic", "rogue", "seeker", "survivor")

SUBTYPE_BASIC_WEAKNESS = "basicweakness"
TYPE_INVESTIGATOR = "investigator"
NON_PLAYER_TYPE_CODES = ("investigator", "location", "story")

# --- Selection keys ---
FACTION_SELECTION_KEY_DEFAULT = "faction_selected"
OPTION_SELECTION_KEY_DEFAULT = "option_selected"

# --- Card tags ---
TAG_HEALS_HORROR = "hh"
TAG_HEALS_DAMAGE = "hd"
TAG_PARLEY = "pa"
TAG_SEAL = "se"

# Deck option tags with no access semantics of their own.
INERT_OPTION_TAGS = frozenset({"st", "uc"})

# --- Uses ---
USES_LABEL_ALIASES = {"charge": "charges"}
