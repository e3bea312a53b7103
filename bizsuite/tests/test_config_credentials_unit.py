import json
import unittest
from pathlib import Path
from unittest import mock

from bizsuite.app.core.config import settings
from bizsuite.services.client_config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_S,
    effective_base_url,
    effective_timeout,
    format_token_for_log,
    load_client_config,
    mask_token,
)
from bizsuite.services.connection import create_portal_connection
from bizsuite.services.credentials import CredentialStore
from bizsuite.tests._util_tempdir import cleanup_dir, make_temp_dir


class TestCredentialStoreUnit(unittest.TestCase):
    def setUp(self):
        self.td = make_temp_dir(prefix="bizsuite_credentials")
        self.addCleanup(cleanup_dir, self.td)
        self.store = CredentialStore(self.td / "nested" / "credentials.json")

    def test_missing_file_means_logged_out(self):
        self.assertIsNone(self.store.load_token())
        self.assertFalse(self.store.clear())

    def test_save_load_clear(self):
        self.store.save_token("  abc123token  ")
        self.assertEqual(self.store.load_token(), "abc123token")
        data = json.loads(self.store.path.read_text(encoding="utf-8"))
        self.assertEqual(data["access_token"], "abc123token")
        self.assertIsInstance(data["saved_at_ms"], int)

        self.assertTrue(self.store.clear())
        self.assertIsNone(self.store.load_token())

    def test_empty_token_is_rejected(self):
        with self.assertRaises(ValueError):
            self.store.save_token("   ")

    def test_corrupt_file_is_logged_and_ignored(self):
        self.store.path.parent.mkdir(parents=True, exist_ok=True)
        self.store.path.write_text("{not json", encoding="utf-8")
        with self.assertLogs("bizsuite.services.credentials", level="WARNING"):
            self.assertIsNone(self.store.load_token())


class TestClientConfigUnit(unittest.TestCase):
    def setUp(self):
        self.td = make_temp_dir(prefix="bizsuite_config")
        self.addCleanup(cleanup_dir, self.td)

    def _write_config(self, payload) -> Path:
        p = self.td / "config.json"
        p.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        return p

    def test_mask_token(self):
        self.assertEqual(mask_token(None), "(empty)")
        self.assertEqual(mask_token("short"), "***")
        self.assertEqual(mask_token("abcdef1234567890"), "abcdef...7890")

    def test_format_token_respects_log_secrets(self):
        with mock.patch.object(settings, "LOG_SECRETS", False):
            self.assertEqual(format_token_for_log("abcdef1234567890"), "abcdef...7890")
        with mock.patch.object(settings, "LOG_SECRETS", True):
            self.assertEqual(format_token_for_log("abcdef1234567890"), "abcdef1234567890")

    def test_missing_and_invalid_config_files(self):
        self.assertEqual(load_client_config(self.td / "absent.json"), {})
        bad = self.td / "bad.json"
        bad.write_text("[1, 2", encoding="utf-8")
        self.assertEqual(load_client_config(bad), {})
        self.assertEqual(load_client_config(self._write_config([1, 2])), {})

    def test_defaults_and_overrides(self):
        with mock.patch.object(settings, "BASE_URL", ""), mock.patch.object(settings, "TIMEOUT_S", 0.0):
            self.assertEqual(effective_base_url({}), DEFAULT_BASE_URL)
            self.assertEqual(effective_timeout({}), DEFAULT_TIMEOUT_S)
            self.assertEqual(effective_timeout({"timeout": "bogus"}), DEFAULT_TIMEOUT_S)
            self.assertEqual(effective_timeout({"timeout": -3}), DEFAULT_TIMEOUT_S)
            self.assertEqual(effective_base_url({"base_url": " http://file.test "}), "http://file.test")
        with mock.patch.object(settings, "BASE_URL", "http://env.test"), mock.patch.object(settings, "TIMEOUT_S", 7.0):
            self.assertEqual(effective_base_url({"base_url": "http://file.test"}), "http://env.test")
            self.assertEqual(effective_timeout({"timeout": 99}), 7.0)

    def test_create_portal_connection_reads_config(self):
        creds_path = self.td / "creds.json"
        CredentialStore(creds_path).save_token("abcdef1234567890")
        cfg = self._write_config(
            {"base_url": "http://portal.test:8080/", "timeout": 12, "credentials_path": str(creds_path)}
        )

        with mock.patch.object(settings, "BASE_URL", ""), mock.patch.object(settings, "TIMEOUT_S", 0.0):
            with self.assertLogs("bizsuite.services.connection", level="INFO") as logs:
                conn = create_portal_connection(config_path=cfg)

        self.assertEqual(conn.config_path, cfg)
        self.assertEqual(conn.config["base_url"], "http://portal.test:8080/")
        self.assertEqual(conn.http.config.timeout_s, 12.0)
        self.assertEqual(conn.http.url("/api/employees"), "http://portal.test:8080/api/employees")
        self.assertEqual(conn.http.headers()["Authorization"], "Bearer abcdef1234567890")
        output = "\n".join(logs.output)
        self.assertIn("Portal config loaded", output)
        self.assertNotIn("abcdef1234567890", output)

    def test_token_saved_later_is_picked_up(self):
        creds_path = self.td / "later.json"
        cfg = self._write_config({"credentials_path": str(creds_path)})
        conn = create_portal_connection(config_path=cfg)
        self.assertNotIn("Authorization", conn.http.headers())

        CredentialStore(creds_path).save_token("fresh-token-value")
        self.assertEqual(conn.http.headers()["Authorization"], "Bearer fresh-token-value")


if __name__ == "__main__":
    unittest.main()
