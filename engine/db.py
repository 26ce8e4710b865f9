import json
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DB_RELATIVE_PATH = Path("data") / "arkham.sqlite"
DB_PATH = (REPO_ROOT / DEFAULT_DB_RELATIVE_PATH).resolve()

DB_PATH_ENV = "ARKHAM_ACCESS_DB_PATH"


def resolve_db_path() -> Path:
    raw = (os.getenv(DB_PATH_ENV) or "").strip()
    if raw == "":
        candidate = DB_PATH
    else:
        candidate = Path(raw).expanduser()
        if not candidate.is_absolute():
            candidate = REPO_ROOT / candidate
        candidate = candidate.resolve()

    if not candidate.is_file():
        raise RuntimeError(
            f"Card catalog database file not found at '{candidate}'. "
            f"Set {DB_PATH_ENV} or ensure ./data/arkham.sqlite exists."
        )
    return candidate


def _json_object(raw: Any) -> Dict[str, Any]:
    if not isinstance(raw, str):
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        return {}
    if not isinstance(value, dict):
        return {}
    return value


@contextmanager
def connect() -> Iterator[sqlite3.Connection]:
    con = sqlite3.connect(str(resolve_db_path()))
    con.row_factory = sqlite3.Row
    try:
        yield con
    finally:
        con.close()


def load_card_rows() -> List[Dict[str, Any]]:
    with connect() as con:
        rows = con.execute("SELECT code, card_json FROM cards ORDER BY code ASC").fetchall()

    cards: List[Dict[str, Any]] = []
    for row in rows:
        card = _json_object(row["card_json"])
        if not card:
            continue
        card.setdefault("code", row["code"])
        cards.append(card)
    return cards


def load_taboo_rows(taboo_set_id: int) -> List[Dict[str, Any]]:
    with connect() as con:
        try:
            rows = con.execute(
                "SELECT code, taboo_json FROM taboos WHERE taboo_set_id = ? ORDER BY code ASC",
                (taboo_set_id,),
            ).fetchall()
        except sqlite3.OperationalError:
            # Snapshots built without taboo data have no taboos table.
            return []

    taboos: List[Dict[str, Any]] = []
    for row in rows:
        taboo = _json_object(row["taboo_json"])
        if not taboo:
            continue
        taboo["code"] = row["code"]
        taboo["taboo_set_id"] = taboo_set_id
        taboos.append(taboo)
    return taboos
