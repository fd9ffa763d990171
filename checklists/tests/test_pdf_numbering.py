"""File naming of checklist PDFs."""
from __future__ import annotations

import unittest
from datetime import datetime

from checklists.logic.pdf_numbering import build_filename, next_pdf_number
from checklists.models.checklist_type import (
    CHECKLIST_TYPES,
    FINAL_PRODUCT_TASTING,
    MATERIALS_CONTROL,
    STAFF_PRACTICES,
    get_checklist_type,
)


class TestNextPdfNumber(unittest.TestCase):
    def test_first_number(self) -> None:
        self.assertEqual(next_pdf_number([], "2025-DEC-15", "Check-Weighing-Sealing"), "01")

    def test_max_plus_one_ignores_other_names(self) -> None:
        existing = [
            "2025-DEC-15-Internal-Control-Materials-01.pdf",
            "2025-DEC-15-Internal-Control-Materials-07.pdf",
            "2025-DEC-15-Internal-Control-Materials-7b.pdf",
            "2025-DEC-16-Internal-Control-Materials-09.pdf",
            "2025-DEC-15-Other-Form-12.pdf",
        ]
        self.assertEqual(next_pdf_number(existing, "2025-DEC-15", "Internal-Control-Materials"), "08")

    def test_more_than_two_digits(self) -> None:
        existing = ["2025-DEC-15-X-99.pdf"]
        self.assertEqual(next_pdf_number(existing, "2025-DEC-15", "X"), "100")


class TestBuildFilename(unittest.TestCase):
    def test_numbered_short_month(self) -> None:
        name = build_filename(MATERIALS_CONTROL, "2025-12-15",
                              ["2025-DEC-15-Internal-Control-Materials-01.pdf"])
        self.assertEqual(name, "2025-DEC-15-Internal-Control-Materials-02.pdf")

    def test_numbered_full_month(self) -> None:
        name = build_filename(STAFF_PRACTICES, "2025-09-03")
        self.assertEqual(name, "2025-SEPTEMBER-03-Staff-Good-Practices-Control-01.pdf")

    def test_timestamped(self) -> None:
        name = build_filename(FINAL_PRODUCT_TASTING, "2025-12-15",
                              moment=datetime(2025, 12, 15, 14, 5, 9))
        self.assertEqual(name, "2025-DEC-15-140509-Final-Product-Tasting.pdf")

    def test_registry(self) -> None:
        self.assertEqual(len(CHECKLIST_TYPES), 6)
        self.assertIs(get_checklist_type("staff_practices"), STAFF_PRACTICES)
        with self.assertRaises(KeyError):
            get_checklist_type("nope")


if __name__ == "__main__":
    unittest.main()
