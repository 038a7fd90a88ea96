"""Unit tests for schedule_engine/layout.py"""
import unittest

from schedule_engine.layout import LayoutReconstructor, is_boilerplate, strip_boilerplate
from schedule_engine.models import PositionedFragment

MERGED_TWO_DAY_TEXT = (
    "MONDAY TUESDAY\n\n"
    "7:15 AM STRENGTH (PULL) - Anisha 7:30 AM powerCycle - Richard\n"
    "7:30 AM BARRE 57 - Simonelle 730AM FT-Pramal\n"
)


class TestBoilerplate(unittest.TestCase):
    """Test poster boilerplate detection."""

    def test_banner_words(self):
        self.assertTrue(is_boilerplate("KEMPS"))
        self.assertTrue(is_boilerplate("STUDIO SCHEDULE"))

    def test_date_range(self):
        self.assertTrue(is_boilerplate("November 24th - November 30th 2025"))

    def test_level_legend(self):
        self.assertTrue(is_boilerplate("BEGINNER : BARRE 57, powerCycle"))
        self.assertTrue(is_boilerplate("ADVANCED : HIIT, AMPED UP!"))

    def test_class_list_continuation(self):
        self.assertTrue(is_boilerplate("STRENGTH LAB, powerCycle"))

    def test_entries_and_headers_kept(self):
        self.assertFalse(is_boilerplate("7:00 AM FIT, HIIT - Anisha"))
        self.assertFalse(is_boilerplate("MONDAY, TUESDAY"))

    def test_strip_boilerplate_removes_phrases_and_blanks(self):
        lines = ["KEMPS", "", "7:00 AM FIT - Anisha 7 YEARS STRONG", "  "]
        self.assertEqual(strip_boilerplate(lines), ["7:00 AM FIT - Anisha"])


class TestFlatTextMode(unittest.TestCase):
    """Test reconstruction from a single text stream."""

    def setUp(self):
        self.layout = LayoutReconstructor()

    def test_merged_header_distributes_round_robin(self):
        result = self.layout.reconstruct(MERGED_TWO_DAY_TEXT)
        self.assertEqual(result["Monday"], [
            "7:15 AM STRENGTH (PULL) - Anisha",
            "7:30 AM BARRE 57 - Simonelle",
        ])
        self.assertEqual(result["Tuesday"], [
            "7:30 AM powerCycle - Richard",
            "730AM FT-Pramal",
        ])

    def test_single_day_sections(self):
        text = "MONDAY\n7:00 AM FIT - Anisha\nTUESDAY\n8:00 AM HIIT - Kabir\n9:00 AM FIT - Bret"
        result = self.layout.reconstruct(text)
        self.assertEqual(result, {
            "Monday": ["7:00 AM FIT - Anisha"],
            "Tuesday": ["8:00 AM HIIT - Kabir", "9:00 AM FIT - Bret"],
        })

    def test_header_with_trailing_content(self):
        result = self.layout.reconstruct("MONDAY 7:00 AM FIT - Anisha")
        self.assertEqual(result, {"Monday": ["7:00 AM FIT - Anisha"]})

    def test_boilerplate_before_header(self):
        text = (
            "KEMPS\nCORNER\nNovember 24th - November 30th 2025\n"
            "BEGINNER : BARRE 57, powerCycle\nSTRENGTH LAB, powerCycle\n"
            "MONDAY\n7:00 AM FIT - Anisha"
        )
        self.assertEqual(self.layout.reconstruct(text), {"Monday": ["7:00 AM FIT - Anisha"]})

    def test_no_headers_returns_empty(self):
        self.assertEqual(self.layout.reconstruct("7:00 AM FIT - Anisha"), {})
        self.assertEqual(self.layout.reconstruct(""), {})


class TestPositionedMode(unittest.TestCase):
    """Test reconstruction from positioned fragments."""

    def setUp(self):
        self.layout = LayoutReconstructor(column_tolerance=30, line_tolerance=12)

    def test_columns_and_lines(self):
        fragments = [
            PositionedFragment("MONDAY", 100, 50),
            PositionedFragment("TUESDAY", 400, 50),
            PositionedFragment("7:00 AM", 100, 100),
            PositionedFragment("FIT - Anisha", 160, 102),
            PositionedFragment("8:00 AM HIIT - Kabir", 400, 100),
            PositionedFragment("9:00 AM", 105, 150),
            PositionedFragment("BARRE 57 - Simran", 170, 151),
        ]
        result = self.layout.reconstruct(fragments)
        self.assertEqual(result["Monday"], ["7:00 AM FIT - Anisha", "9:00 AM BARRE 57 - Simran"])
        self.assertEqual(result["Tuesday"], ["8:00 AM HIIT - Kabir"])

    def test_stacked_day_blocks(self):
        fragments = [
            PositionedFragment("MONDAY", 100, 50),
            PositionedFragment("WEDNESDAY", 100, 300),
            PositionedFragment("TUESDAY", 400, 50),
            PositionedFragment("7:00 AM FIT - Anisha", 100, 100),
            PositionedFragment("6:00 PM HIIT - Kabir", 100, 350),
            PositionedFragment("8:00 AM FIT - Bret", 400, 100),
        ]
        result = self.layout.reconstruct(fragments)
        self.assertEqual(result["Monday"], ["7:00 AM FIT - Anisha"])
        self.assertEqual(result["Wednesday"], ["6:00 PM HIIT - Kabir"])
        self.assertEqual(result["Tuesday"], ["8:00 AM FIT - Bret"])

    def test_abbreviated_headers(self):
        fragments = [
            PositionedFragment("MON", 100, 50),
            PositionedFragment("7:00 AM FIT - Anisha", 100, 100),
        ]
        self.assertEqual(self.layout.reconstruct(fragments), {"Monday": ["7:00 AM FIT - Anisha"]})

    def test_content_above_headers_is_dropped(self):
        fragments = [
            PositionedFragment("STUDIO SCHEDULE 7:00 AM", 100, 10),
            PositionedFragment("MONDAY", 100, 50),
            PositionedFragment("7:00 AM FIT - Anisha", 100, 100),
        ]
        self.assertEqual(self.layout.reconstruct(fragments), {"Monday": ["7:00 AM FIT - Anisha"]})

    def test_merged_header_fragment_falls_back_to_text(self):
        fragments = [
            PositionedFragment("MONDAY TUESDAY", 100, 50),
            PositionedFragment("7:15 AM STRENGTH (PULL) - Anisha", 100, 100),
            PositionedFragment("7:30 AM powerCycle - Richard", 400, 101),
        ]
        result = self.layout.reconstruct(fragments)
        self.assertEqual(result["Monday"], ["7:15 AM STRENGTH (PULL) - Anisha"])
        self.assertEqual(result["Tuesday"], ["7:30 AM powerCycle - Richard"])

    def test_fragments_without_positions_use_text_mode(self):
        fragments = [
            PositionedFragment("MONDAY", 0, 0),
            PositionedFragment("7:00 AM FIT - Anisha", 0, 0),
        ]
        self.assertEqual(self.layout.reconstruct(fragments), {"Monday": ["7:00 AM FIT - Anisha"]})

    def test_no_headers_returns_empty(self):
        fragments = [
            PositionedFragment("7:00 AM FIT - Anisha", 100, 100),
            PositionedFragment("8:00 AM FIT - Bret", 100, 150),
        ]
        self.assertEqual(self.layout.reconstruct(fragments), {})
        self.assertEqual(self.layout.reconstruct([]), {})

    def test_build_columns_clusters_nearby_headers(self):
        headers = [
            ("Monday", PositionedFragment("MONDAY", 100, 50)),
            ("Wednesday", PositionedFragment("WEDNESDAY", 115, 400)),
            ("Tuesday", PositionedFragment("TUESDAY", 400, 50)),
        ]
        columns = self.layout.build_columns(headers)
        self.assertEqual([c.day_label for c in columns], ["Monday", "Wednesday", "Tuesday"])
        self.assertEqual(columns[0].x_max, 257.5)
        self.assertEqual(columns[0].y_max, 400)
        self.assertEqual(columns[2].x_min, 257.5)
        self.assertEqual(columns[2].x_max, float("inf"))

    def test_content_left_of_header_stays_in_its_column(self):
        fragments = [
            PositionedFragment("MONDAY", 100, 50),
            PositionedFragment("TUESDAY", 300, 50),
            PositionedFragment("7:00 AM FIT - Anisha", 60, 100),
            PositionedFragment("8:00 AM HIIT - Kabir", 262, 100),
        ]
        result = self.layout.reconstruct(fragments)
        self.assertEqual(result["Monday"], ["7:00 AM FIT - Anisha"])
        self.assertEqual(result["Tuesday"], ["8:00 AM HIIT - Kabir"])

    def test_content_on_header_row_is_kept(self):
        fragments = [
            PositionedFragment("MONDAY", 100, 50),
            PositionedFragment("TUESDAY", 400, 50),
            PositionedFragment("7:00 AM FIT - Anisha", 180, 50),
            PositionedFragment("8:00 AM HIIT - Kabir", 400, 100),
        ]
        result = self.layout.reconstruct(fragments)
        self.assertEqual(result["Monday"], ["7:00 AM FIT - Anisha"])
        self.assertEqual(result["Tuesday"], ["8:00 AM HIIT - Kabir"])

    def test_group_lines(self):
        fragments = [
            PositionedFragment("world", 50, 11),
            PositionedFragment("hello", 0, 10),
            PositionedFragment("next", 0, 40),
        ]
        self.assertEqual(self.layout.group_lines(fragments), ["hello world", "next"])


if __name__ == "__main__":
    unittest.main()
