"""Derived values of the checklist forms."""
from __future__ import annotations

import unittest

from checklists.logic.calculations import (
    RluStatus,
    average_weight,
    final_grade,
    format_average_weight,
    is_valid_grade,
    mean_grade,
    mix_percentage,
    mix_within_tolerance,
    parse_float,
    parse_measure,
    rlu_status,
)


class TestRluStatus(unittest.TestCase):
    def test_thresholds(self) -> None:
        self.assertIs(rlu_status("19.9"), RluStatus.ACCEPT)
        self.assertIs(rlu_status("20"), RluStatus.CAUTION)
        self.assertIs(rlu_status("60"), RluStatus.CAUTION)
        self.assertIs(rlu_status("60.1"), RluStatus.REJECT)

    def test_blank_and_garbage_are_empty(self) -> None:
        for value in ("", "  ", "abc", None, "nan"):
            self.assertIs(rlu_status(value), RluStatus.EMPTY, value)

    def test_labels_and_retest(self) -> None:
        self.assertEqual(RluStatus.REJECT.label, "REJECTS")
        self.assertTrue(RluStatus.CAUTION.needs_retest)
        self.assertFalse(RluStatus.ACCEPT.needs_retest)
        self.assertFalse(RluStatus.EMPTY.needs_retest)


class TestGrades(unittest.TestCase):
    def test_grade_range(self) -> None:
        self.assertTrue(is_valid_grade("3.0"))
        self.assertTrue(is_valid_grade("6"))
        self.assertFalse(is_valid_grade("2.9"))
        self.assertFalse(is_valid_grade("6.1"))
        self.assertFalse(is_valid_grade(""))

    def test_mean_ignores_invalid_and_rounds_half_up(self) -> None:
        self.assertEqual(mean_grade(["4", "5", "", "9"]), 4.5)
        self.assertEqual(mean_grade(["4.25", "4.2"]), 4.2)
        self.assertEqual(mean_grade(["4", "4.5"]), 4.3)  # 4.25 rounds up
        self.assertEqual(mean_grade([]), 0.0)

    def test_final_grade_skips_zero_means(self) -> None:
        self.assertEqual(final_grade([5.0, 0.0, 4.0, 0.0, 0.0]), 4.5)
        self.assertEqual(final_grade([0.0] * 5), 0.0)


class TestWeights(unittest.TestCase):
    def test_average_over_filled_weights(self) -> None:
        self.assertAlmostEqual(average_weight(["250", "", "252", " "]), 251.0)
        self.assertEqual(format_average_weight(["250", "251", "251"]), "250.67")
        self.assertEqual(format_average_weight(["", ""]), "")
        self.assertIsNone(average_weight([]))

    def test_parse_float_accepts_comma(self) -> None:
        self.assertEqual(parse_float("2,5"), 2.5)
        self.assertIsNone(parse_float("inf"))


class TestMix(unittest.TestCase):
    def test_parse_measure_strips_units(self) -> None:
        self.assertEqual(parse_measure("350 gr"), 350.0)
        self.assertEqual(parse_measure("1.000,5"), 1.0005)
        self.assertIsNone(parse_measure("n/a"))

    def test_percentage_and_tolerance(self) -> None:
        pct = mix_percentage("175", "500 gr")
        self.assertAlmostEqual(pct, 35.0)
        self.assertTrue(mix_within_tolerance(pct, 0.40))
        self.assertFalse(mix_within_tolerance(pct, 0.41))
        self.assertIsNone(mix_percentage("100", "0"))
        self.assertFalse(mix_within_tolerance(None, 0.5))


if __name__ == "__main__":
    unittest.main()
