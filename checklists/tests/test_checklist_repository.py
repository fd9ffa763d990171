"""Date-range queries over the submitted checklists tables."""
from __future__ import annotations

import tempfile
import unittest
from datetime import date
from pathlib import Path

from checklists.models.checklist_type import MATERIALS_CONTROL, WEIGHING_SEALING
from checklists.repository.checklist_repository import ChecklistRepository


class TestChecklistRepositoryFetch(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.repo = ChecklistRepository(Path(self._tmp.name) / "plantqc.db")
        # submitted out of form-date order on purpose
        self.ids = {}
        for form_date in ("2025-12-01", "2025-12-15", "2025-12-10", "2025-12-20"):
            self.ids[form_date] = self.repo.insert(
                MATERIALS_CONTROL,
                form_date=form_date,
                summary={"date_string": form_date[8:] + "/12/2025"},
                payload={"date": form_date},
                pdf_url=f"file:///tmp/{form_date}.pdf",
            )

    def tearDown(self) -> None:
        self.repo.close()
        self._tmp.cleanup()

    def test_bounds_are_inclusive_and_newest_first(self) -> None:
        rows = self.repo.fetch(MATERIALS_CONTROL, date(2025, 12, 10), date(2025, 12, 15))
        self.assertEqual([r["form_date"] for r in rows], ["2025-12-10", "2025-12-15"])
        self.assertEqual(rows[0]["id"], self.ids["2025-12-10"])
        self.assertEqual(rows[0]["date_string"], "10/12/2025")
        self.assertEqual(rows[0]["payload"], {"date": "2025-12-10"})

    def test_open_ended_ranges(self) -> None:
        since = self.repo.fetch(MATERIALS_CONTROL, start_date=date(2025, 12, 15))
        self.assertEqual([r["form_date"] for r in since], ["2025-12-20", "2025-12-15"])
        until = self.repo.fetch(MATERIALS_CONTROL, end_date=date(2025, 12, 1))
        self.assertEqual([r["form_date"] for r in until], ["2025-12-01"])

    def test_without_bounds_returns_all_in_submission_order(self) -> None:
        rows = self.repo.fetch(MATERIALS_CONTROL)
        self.assertEqual([r["form_date"] for r in rows],
                         ["2025-12-20", "2025-12-10", "2025-12-15", "2025-12-01"])

    def test_types_do_not_share_rows(self) -> None:
        self.assertEqual(self.repo.fetch(WEIGHING_SEALING), [])


if __name__ == "__main__":
    unittest.main()
