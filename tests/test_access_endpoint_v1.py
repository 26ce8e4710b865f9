from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from tests.access_fixture_harness import (
    ACCESS_FIXTURE_TABOO_SET_ID,
    create_access_fixture_db,
    set_access_fixture_env,
)

try:
    from fastapi.testclient import TestClient
    from api.main import app, get_catalog

    _IMPORT_ERROR: Exception | None = None
except Exception as exc:  # pragma: no cover - environment-dependent dependency loading
    TestClient = None
    app = None
    get_catalog = None
    _IMPORT_ERROR = exc


class AccessEndpointTests(unittest.TestCase):
    _tmp_dir_ctx: tempfile.TemporaryDirectory[str] | None = None
    _db_env_ctx = None

    @classmethod
    def setUpClass(cls) -> None:
        super().setUpClass()
        if _IMPORT_ERROR is not None:
            return

        cls._tmp_dir_ctx = tempfile.TemporaryDirectory()
        db_path = create_access_fixture_db(Path(cls._tmp_dir_ctx.name))
        cls._db_env_ctx = set_access_fixture_env(db_path)
        cls._db_env_ctx.__enter__()
        get_catalog.cache_clear()

    @classmethod
    def tearDownClass(cls) -> None:
        try:
            if get_catalog is not None:
                get_catalog.cache_clear()
            if cls._db_env_ctx is not None:
                cls._db_env_ctx.__exit__(None, None, None)
                cls._db_env_ctx = None
        finally:
            if cls._tmp_dir_ctx is not None:
                cls._tmp_dir_ctx.cleanup()
                cls._tmp_dir_ctx = None
            super().tearDownClass()

    def setUp(self) -> None:
        if _IMPORT_ERROR is not None:
            self.skipTest(f"FastAPI integration dependencies unavailable: {_IMPORT_ERROR}")

    def test_health(self) -> None:
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/health")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body.get("ok"))
        self.assertIn("engine_version", body)
        self.assertIn("access_rules_version", body)

    def test_investigator_summary(self) -> None:
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/investigators/90024")

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body.get("canonical_code"), "01001")
        self.assertTrue(body.get("has_deck_rules"))
        self.assertFalse(body.get("has_extra_deck_rules"))
        self.assertEqual(body["signature_cards"]["parallel"], ["90025"])

    def test_unknown_investigator_is_404(self) -> None:
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.get("/investigators/00000")

        self.assertEqual(response.status_code, 404)

    def test_access_check_allowed_and_denied(self) -> None:
        with TestClient(app, raise_server_exceptions=False) as client:
            allowed = client.post("/access/check", json={"investigator_code": "01001", "card_code": "01030"})
            denied = client.post("/access/check", json={"investigator_code": "01001", "card_code": "01040"})

        self.assertEqual(allowed.status_code, 200)
        self.assertTrue(allowed.json().get("allowed"))
        self.assertTrue(allowed.json().get("filter_available"))
        self.assertEqual(allowed.json().get("target_deck"), "slots")
        self.assertEqual(denied.status_code, 200)
        self.assertFalse(denied.json().get("allowed"))

    def test_access_check_with_taboo_set(self) -> None:
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post(
                "/access/check",
                json={
                    "investigator_code": "01001",
                    "card_code": "01040",
                    "taboo_set_id": ACCESS_FIXTURE_TABOO_SET_ID,
                },
            )

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json().get("allowed"))

    def test_access_check_non_investigator_reports_noop(self) -> None:
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post("/access/check", json={"investigator_code": "01020", "card_code": "01030"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertFalse(body.get("allowed"))
        self.assertFalse(body.get("filter_available"))
        self.assertIn("ACCESS_FILTER_NOOP", [u.get("code") for u in body.get("unknowns", [])])

    def test_access_requests_compile_the_filter_once(self) -> None:
        with TestClient(app, raise_server_exceptions=False) as client:
            for path, payload in (
                ("/access/check", {"investigator_code": "01020", "card_code": "01030"}),
                ("/access/pool", {"investigator_code": "01020", "card_codes": ["01030", "01020"]}),
            ):
                with self.subTest(path=path):
                    with self.assertLogs("api.engine.investigator_access_v1", level="WARNING") as captured:
                        response = client.post(path, json=payload)

                    self.assertEqual(response.status_code, 200)
                    self.assertEqual(len(captured.output), 1)
                    noop = [u for u in response.json().get("unknowns", []) if u.get("code") == "ACCESS_FILTER_NOOP"]
                    self.assertEqual(len(noop), 1)

    def test_access_check_rejects_bad_target_deck(self) -> None:
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post(
                "/access/check",
                json={"investigator_code": "01001", "card_code": "01030", "target_deck": "sideboard"},
            )

        self.assertEqual(response.status_code, 422)

    def test_access_pool_extra_deck(self) -> None:
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post(
                "/access/pool",
                json={"investigator_code": "05002", "target_deck": "extraSlots"},
            )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body.get("allowed_codes"), ["05009", "05010"])
        self.assertEqual(body.get("target_deck"), "extraSlots")

    def test_access_pool_with_explicit_codes(self) -> None:
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post(
                "/access/pool",
                json={
                    "investigator_code": "01001",
                    "card_codes": ["01040", "01030", "01020"],
                    "additional_deck_options": [{"faction": ["rogue"], "level": {"min": 0, "max": 1}}],
                },
            )
            unknown_card = client.post(
                "/access/pool",
                json={"investigator_code": "01001", "card_codes": ["00000"]},
            )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body.get("allowed_codes"), ["01040", "01030", "01020"])
        self.assertEqual(body.get("cards_considered"), 3)
        self.assertEqual(unknown_card.status_code, 404)


if __name__ == "__main__":
    unittest.main()
