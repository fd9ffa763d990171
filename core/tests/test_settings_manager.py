from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from core.settings.logic.settings_manager import SettingsManager


class TestSettingsManager(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.settings = SettingsManager(db_path=Path(self._tmp.name) / "settings.db")

    def tearDown(self) -> None:
        self.settings._repo.close()
        self._tmp.cleanup()

    def test_global_values_round_trip_as_json(self) -> None:
        self.settings.set("drafts", "keys", {"current": "k1", "previous": []})
        self.assertEqual(self.settings.get("drafts", "keys"), {"current": "k1", "previous": []})
        self.settings.set("drafts", "keys", {"current": "k2"})
        self.assertEqual(self.settings.get("drafts", "keys"), {"current": "k2"})

    def test_user_specific_values(self) -> None:
        self.settings.set("ui", "theme", "dark", user_specific=True, user_id="7")
        self.assertEqual(self.settings.get("ui", "theme", user_specific=True, user_id="7"), "dark")
        self.assertIsNone(self.settings.get("ui", "theme"))
        with self.assertRaises(ValueError):
            self.settings.set("ui", "theme", "dark", user_specific=True)
        with self.assertLogs("core.settings.logic.settings_manager", "WARNING"):
            self.assertEqual(self.settings.get("ui", "theme", "light", user_specific=True), "light")

    def test_delete(self) -> None:
        self.settings.set("ui", "lang", "es")
        self.settings.delete("ui", "lang")
        self.assertEqual(self.settings.get("ui", "lang", "en"), "en")


if __name__ == "__main__":
    unittest.main()
