"""Unit tests for schedule_engine/models.py"""
import unittest

from schedule_engine.models import (
    ComparisonResult,
    DayColumn,
    PageResult,
    PositionedFragment,
    ScheduleEntry,
    Weekday,
    make_identity_key,
)


class TestWeekday(unittest.TestCase):
    """Test weekday parsing."""

    def test_full_names_any_case(self):
        self.assertEqual(Weekday.from_string("MONDAY"), Weekday.MONDAY)
        self.assertEqual(Weekday.from_string("sunday"), Weekday.SUNDAY)

    def test_abbreviations(self):
        self.assertEqual(Weekday.from_string("Mon"), Weekday.MONDAY)
        self.assertEqual(Weekday.from_string("Tues"), Weekday.TUESDAY)
        self.assertEqual(Weekday.from_string("Thurs."), Weekday.THURSDAY)
        self.assertEqual(Weekday.from_string("SAT"), Weekday.SATURDAY)

    def test_rejects_short_and_unknown(self):
        self.assertIsNone(Weekday.from_string("Mo"))
        self.assertIsNone(Weekday.from_string("Funday"))
        self.assertIsNone(Weekday.from_string(""))

    def test_find_all_reports_offsets(self):
        found = Weekday.find_all("MONDAY TUESDAY")
        self.assertEqual([day for day, _, _ in found], [Weekday.MONDAY, Weekday.TUESDAY])
        self.assertEqual(found[1][1:], (7, 14))

    def test_order(self):
        self.assertEqual(Weekday.MONDAY.order, 0)
        self.assertEqual(Weekday.SUNDAY.order, 6)


class TestScheduleEntry(unittest.TestCase):
    """Test entry identity."""

    def test_identity_key_computed(self):
        entry = ScheduleEntry("Monday", "7:30 AM", "Studio FIT", "Anisha Shah", "Kenkere House")
        self.assertEqual(entry.identity_key, "monday7:30amstudiofitanishashahkenkerehouse")

    def test_identity_key_ignores_case_and_spacing(self):
        self.assertEqual(
            make_identity_key("Monday", "7:30 AM", "Studio FIT", "Anisha Shah", "Kenkere House"),
            make_identity_key("MONDAY", "7:30AM", "studio  fit", "anisha shah", "KenkereHouse"),
        )

    def test_to_dict(self):
        entry = ScheduleEntry("Monday", "7:30 AM", "Studio FIT", "Anisha Shah", "Kenkere House", theme="TABATA")
        data = entry.to_dict()
        self.assertEqual(data["class_name"], "Studio FIT")
        self.assertEqual(data["theme"], "TABATA")


class TestComparisonResult(unittest.TestCase):
    """Test result invariants."""

    def setUp(self):
        self.entry = ScheduleEntry("Monday", "7:30 AM", "Studio FIT", "Anisha Shah", "Kenkere House")

    def test_match_requires_both_sides(self):
        with self.assertRaises(ValueError):
            ComparisonResult(authoritative=None, derived=self.entry, is_match=True)

    def test_mismatch_requires_reason(self):
        with self.assertRaises(ValueError):
            ComparisonResult(authoritative=self.entry, derived=None, is_match=False)

    def test_to_dict_sorts_fields(self):
        result = ComparisonResult(
            authoritative=self.entry,
            derived=None,
            is_match=False,
            mismatch_reason="missing",
            discrepancy_fields=frozenset({"time", "day"}),
        )
        data = result.to_dict()
        self.assertEqual(data["discrepancy_fields"], ["day", "time"])
        self.assertIsNone(data["derived"])


class TestLayoutModels(unittest.TestCase):
    """Test column and page models."""

    def test_day_column_bounds_are_half_open(self):
        column = DayColumn("Monday", x_min=0, x_max=100, y_min=10)
        self.assertTrue(column.contains(PositionedFragment("a", 0, 20)))
        self.assertFalse(column.contains(PositionedFragment("a", 100, 20)))
        self.assertTrue(column.contains(PositionedFragment("a", 50, 10)))
        self.assertFalse(column.contains(PositionedFragment("a", 50, 9)))

    def test_day_column_margin_shifts_vertical_edges(self):
        column = DayColumn("Monday", x_min=0, x_max=100, y_min=50, y_max=300, y_margin=12)
        self.assertTrue(column.contains(PositionedFragment("a", 10, 40)))
        self.assertFalse(column.contains(PositionedFragment("a", 10, 37)))
        self.assertFalse(column.contains(PositionedFragment("a", 10, 290)))

    def test_page_result_ok(self):
        self.assertTrue(PageResult(1, payload="text").ok)
        self.assertFalse(PageResult(1, error="timeout").ok)
        self.assertFalse(PageResult(1).ok)


if __name__ == "__main__":
    unittest.main()
