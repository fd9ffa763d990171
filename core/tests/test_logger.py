"""Audit logger on a temporary database."""
from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from core.common.app_context import AppContext
from core.models.user import User
from core.qm_logging.logic.logger import Logger


class TestLogger(unittest.TestCase):
    def setUp(self) -> None:
        AppContext.clear_current_user(reason="test_setup")
        self._tmp = tempfile.TemporaryDirectory()
        self.logger = Logger(db_path=Path(self._tmp.name) / "logs.db")

    def tearDown(self) -> None:
        AppContext.clear_current_user(reason="test_teardown")
        self._tmp.cleanup()

    def test_query_by_feature_event_and_level(self) -> None:
        self.logger.log("checklists", "submitted", reference_id="7", message="ok")
        self.logger.log("checklists", "submit_failed", level="ERROR", message="disk full")
        self.logger.log("maintenance", "created", reference_id="1")

        failed = self.logger.query_logs(feature="checklists", level="ERROR")
        self.assertEqual([e.event for e in failed], ["submit_failed"])
        self.assertEqual(failed[0].username, "unknown")
        self.assertEqual(self.logger.query_logs(reference_id="7")[0].message, "ok")
        self.assertEqual(len(self.logger.fetch_logs(limit=2)), 2)

    def test_current_user_is_recorded(self) -> None:
        AppContext.set_current_user(User(id=3, username="maria"), reason="login")
        self.logger.log("maintenance", "assign")
        entry = self.logger.fetch_logs()[0]
        self.assertEqual((entry.user_id, entry.username), (3, "maria"))


if __name__ == "__main__":
    unittest.main()
