"""Unit tests for schedule_engine/utils.py"""
import os
import tempfile
import unittest

from schedule_engine.errors import ValidationError
from schedule_engine.models import ReconciliationSummary, ScheduleEntry
from schedule_engine.utils import (
    format_summary_report,
    is_supported_file,
    sanitize_text,
    validate_file_path,
    validate_schedule,
)


class TestValidateFilePath(unittest.TestCase):
    """Test input file validation."""

    def test_missing_file(self):
        with self.assertRaises(ValidationError):
            validate_file_path("no-such-poster.pdf")

    def test_directory_rejected(self):
        with tempfile.TemporaryDirectory() as directory:
            with self.assertRaises(ValidationError):
                validate_file_path(directory)

    def test_extension_checked(self):
        handle, path = tempfile.mkstemp(suffix=".docx")
        os.close(handle)
        self.addCleanup(os.remove, path)
        with self.assertRaises(ValidationError) as ctx:
            validate_file_path(path)
        self.assertIn(".pdf", str(ctx.exception))

    def test_valid_file(self):
        handle, path = tempfile.mkstemp(suffix=".PNG")
        os.close(handle)
        self.addCleanup(os.remove, path)
        self.assertEqual(str(validate_file_path(path)), path)


class TestValidateSchedule(unittest.TestCase):
    """Test schedule sanity warnings."""

    def test_empty(self):
        self.assertEqual(validate_schedule([]), ["No schedule entries were extracted"])

    def test_warnings(self):
        entries = [
            ScheduleEntry("Monday", "7:00 AM", "Studio FIT", "Anisha Shah", "Kenkere House"),
            ScheduleEntry("Monday", "7:00 AM", "Studio HIIT", "Anisha Shah", "Kenkere House"),
            ScheduleEntry("Tuesday", "7:00 AM", "Studio HIIT", "Awlan", "Kenkere House"),
        ]
        warnings = validate_schedule(entries)
        self.assertIn("5 weekday(s) have no entries", warnings)
        self.assertIn("1 slot(s) list the same trainer more than once", warnings)
        self.assertIn("1 entries have an unrecognized trainer name", warnings)

    def test_full_week_is_clean(self):
        days = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
        entries = [ScheduleEntry(day, "7:00 AM", "Studio FIT", "Anisha Shah", "Kenkere House") for day in days]
        self.assertEqual(validate_schedule(entries), [])


class TestTextHelpers(unittest.TestCase):
    """Test small text helpers."""

    def test_sanitize_text(self):
        self.assertEqual(sanitize_text("  7:00\x00 AM \n FIT  "), "7:00 AM FIT")
        self.assertEqual(sanitize_text(None), "")

    def test_is_supported_file(self):
        self.assertTrue(is_supported_file("poster.TIFF"))
        self.assertFalse(is_supported_file("poster.docx"))

    def test_format_summary_report(self):
        report = format_summary_report(ReconciliationSummary(3, 1, 0, 4))
        self.assertIn("Matched: 3 (75%)", report)
        self.assertIn("Missing from extracted schedule: 1", report)
        self.assertEqual(format_summary_report(ReconciliationSummary(0, 0, 0, 0)), "No entries to compare")


if __name__ == "__main__":
    unittest.main()
