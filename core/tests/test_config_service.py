"""Layered configuration: casting, env overlays and precedence."""
from __future__ import annotations

import os
import unittest
from pathlib import Path
from unittest import mock

from core.config.config_service import PROJECT_ROOT, ConfigService, _cast, _env_overlays


class TestEnvOverlays(unittest.TestCase):
    def test_only_prefixed_section_keys(self) -> None:
        overlays = _env_overlays({
            "PLANTQC_STORAGE__PUBLIC_BASE_URL": "http://files.local",
            "PLANTQC_DRAFTS__ENCRYPT": "no",
            "PLANTQC_BROKEN": "1",
            "HOME": "/root",
        })
        self.assertEqual(overlays, {
            "Storage": {"public_base_url": "http://files.local"},
            "Drafts": {"encrypt": "no"},
        })


class TestCast(unittest.TestCase):
    def test_bool_values(self) -> None:
        for raw in ("1", "true", "Yes", "on"):
            self.assertTrue(_cast(raw, "bool"))
        self.assertFalse(_cast("off", "bool"))

    def test_relative_path_is_project_relative(self) -> None:
        self.assertEqual(_cast("databases/x.db", Path), PROJECT_ROOT / "databases" / "x.db")
        self.assertEqual(_cast("/srv/x.db", "Path"), Path("/srv/x.db"))


class TestConfigService(unittest.TestCase):
    def test_environment_wins(self) -> None:
        env = {
            "PLANTQC_DATABASE__PLANTQC": "/srv/plantqc/test.db",
            "PLANTQC_DRAFTS__ENCRYPT": "false",
        }
        with mock.patch.dict(os.environ, env):
            service = ConfigService(ensure_machine_config=False)
        self.assertEqual(service.database.plantqc, Path("/srv/plantqc/test.db"))
        self.assertFalse(service.drafts.encrypt)
        self.assertEqual(service.meta_source("Database", "plantqc")["layer"], "env")
        self.assertEqual(service.get("Drafts", "encrypt", cast=bool), False)

    def test_describe_db_paths_names_the_winning_layer(self) -> None:
        with mock.patch.dict(os.environ, {"PLANTQC_DATABASE__LOGGING": "/srv/plantqc/logs.db"}):
            service = ConfigService(ensure_machine_config=False)
        plantqc_line, logging_line = service.describe_db_paths()
        self.assertTrue(plantqc_line.startswith("Database.plantqc = "))
        self.assertEqual(logging_line, "Database.logging = /srv/plantqc/logs.db (env: os.environ)")

    def test_embedded_defaults_fill_gaps(self) -> None:
        service = ConfigService(ensure_machine_config=False)
        self.assertTrue(service.general.app_name)
        self.assertIsNone(service.get("General", "missing"))
        self.assertIsInstance(service.as_app_config().storage.root, Path)


if __name__ == "__main__":
    unittest.main()
