from __future__ import annotations

import unittest
from datetime import datetime
from zoneinfo import ZoneInfo

import core.helpers.date_time_helper as dt


class TestChecklistDates(unittest.TestCase):
    def test_display_format(self) -> None:
        self.assertEqual(dt.format_date_display("2025-12-15"), "DEC-15-2025")
        self.assertEqual(dt.format_date_display("2025-1-5"), "JAN-05-2025")
        self.assertEqual(dt.format_date_display("15/12/2025"), "15/12/2025")
        self.assertEqual(dt.format_date_display(""), "")

    def test_filename_format(self) -> None:
        self.assertEqual(dt.format_date_for_filename("2025-09-03"), "2025-SEP-03")
        self.assertEqual(dt.format_date_for_filename("2025-09-03", full_month=True), "2025-SEPTEMBER-03")
        self.assertEqual(dt.format_date_for_filename("2025-13-03"), "2025-13-03")

    def test_moment_formats(self) -> None:
        moment = datetime(2025, 12, 15, 14, 5, 9)
        self.assertEqual(dt.time_for_filename(moment), "140509")
        self.assertEqual(dt.history_timestamp(moment), "15-12-2025 14:05:09")

    def test_parse_date_time(self) -> None:
        self.assertEqual(dt.parse_date_time("2025-12-15", "07:45"), datetime(2025, 12, 15, 7, 45))
        self.assertEqual(dt.parse_date_time("2025-12-15", "late"), datetime(2025, 12, 15))
        self.assertIsNone(dt.parse_date_time(""))
        self.assertIsNone(dt.parse_date_time("yesterday"))


class TestUtcConversion(unittest.TestCase):
    def test_utc_to_local(self) -> None:
        ny = ZoneInfo("America/New_York")
        self.assertEqual(dt.utc_to_local_str("2025-12-15T12:00:00+00:00", ny), "12/15/2025 07:00:00")
        self.assertEqual(dt.local_to_utc_iso(datetime(2025, 12, 15, 7, 0), ny), "2025-12-15T12:00:00+00:00")


if __name__ == "__main__":
    unittest.main()
