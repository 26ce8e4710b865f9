from __future__ import annotations

import os
from pathlib import Path

import pytest

from tests.access_fixture_harness import create_access_fixture_db

SQLITE_HEADER_PREFIX = b"SQLite format 3"


def _has_sqlite_header(raw_path: str) -> bool:
    if raw_path.strip() == "":
        return False
    path = Path(raw_path)
    if not path.is_file():
        return False
    try:
        with path.open("rb") as handle:
            return handle.read(16).startswith(SQLITE_HEADER_PREFIX)
    except OSError:
        return False


@pytest.fixture
def access_test_db_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    preset = os.getenv("ARKHAM_ACCESS_DB_PATH", "")
    if _has_sqlite_header(preset):
        # Class-level fixtures may already point at their own catalog DB.
        yield Path(preset)
        return

    db_path = create_access_fixture_db(tmp_path / "catalog")
    monkeypatch.setenv("ARKHAM_ACCESS_DB_PATH", str(db_path))
    yield db_path


@pytest.fixture(autouse=True)
def _hermetic_access_db(access_test_db_path: Path) -> None:
    _ = access_test_db_path
