"""Layout reconstruction: recover which lines belong to which weekday.

Two modes:

- positioned: fragments carry coordinates; day headers define vertical
  column bands and content is grouped into lines by vertical proximity.
- flat text: one text stream per page; headers are lines that name
  weekdays, and a header naming several days ("MONDAY TUESDAY") means
  OCR merged side-by-side columns, so each line's entries are dealt out
  to those days in turn.
"""

import re
from typing import Dict, List, Optional, Sequence, Tuple

from .entries import split_segments
from .logging import get_logger
from .models import DayColumn, PagePayload, PositionedFragment, Weekday
from .timeparse import TIME_PATTERN
from .utils import sanitize_text

log = get_logger(__name__)

DayLines = Dict[str, List[str]]

# Banner words from studio posters; a line made only of these is a title
BANNER_WORDS = frozenset({
    'KEMPS', 'CORNER', 'STUDIO', 'SCHEDULE', 'KWALITY', 'HOUSE', 'SUPREME',
    'HQ', 'BANDRA', 'KENKERE', 'WEEKLY', 'CLASS', 'CLASSES', 'TIMETABLE',
})

_MONTHS = (
    r'JAN(?:UARY)?|FEB(?:RUARY)?|MAR(?:CH)?|APR(?:IL)?|MAY|JUNE?|JULY?|'
    r'AUG(?:UST)?|SEPT?(?:EMBER)?|OCT(?:OBER)?|NOV(?:EMBER)?|DEC(?:EMBER)?'
)

# Whole-line boilerplate, checked only on lines without a time token
BOILERPLATE_PATTERNS: Tuple[Tuple[str, re.Pattern], ...] = (
    ('date_range', re.compile(rf'\b(?:{_MONTHS})\s+\d{{1,2}}(?:ST|ND|RD|TH)?\b', re.IGNORECASE)),
    ('level_legend', re.compile(r'^\W*(?:BEGINNER|INTERMEDIATE|ADVANCED)\b', re.IGNORECASE)),
    ('class_list', re.compile(r',')),
)

# Promotional phrases removed wherever they appear
BANNER_PHRASES = re.compile(
    r'\b(?:\d+\s+YEARS?\s+STRONG|BEAT\s+THE\s+TRAINER)\b', re.IGNORECASE
)


def is_boilerplate(line: str) -> bool:
    """True for poster titles, date ranges, level legends and class-list banners."""
    if not line or TIME_PATTERN.search(line):
        return False
    if Weekday.find_all(line):
        return False

    words = re.findall(r'[A-Za-z]+', line)
    if words and all(word.upper() in BANNER_WORDS for word in words):
        return True

    for name, pattern in BOILERPLATE_PATTERNS:
        if pattern.search(line):
            log.debug("boilerplate_dropped", rule=name, line=line)
            return True
    return False


def strip_boilerplate(lines: Sequence[str]) -> List[str]:
    """Sanitize lines and drop empty and boilerplate ones."""
    kept = []
    for line in lines:
        line = sanitize_text(BANNER_PHRASES.sub(' ', line))
        if line and not is_boilerplate(line):
            kept.append(line)
    return kept


def _header_days(line: str) -> Optional[Tuple[List[str], str]]:
    """
    If the line is a day header, return its days and any trailing content.

    A header names at least one weekday before any time token. Text after
    the last weekday name is returned as the first content line.
    """
    found = Weekday.find_all(line)
    if not found:
        return None

    first_time = TIME_PATTERN.search(line)
    if first_time and first_time.start() < found[0][1]:
        return None

    days: List[str] = []
    for day, _, _ in found:
        if day.value not in days:
            days.append(day.value)

    remainder = line[found[-1][2]:].strip()
    return days, remainder


class LayoutReconstructor:
    """Groups page content into per-day line lists."""

    def __init__(self, column_tolerance: float = 30.0, line_tolerance: float = 12.0):
        """
        Initialize the reconstructor.

        Args:
            column_tolerance: Horizontal distance within which headers share a column
            line_tolerance: Vertical distance within which fragments share a line
        """
        self.column_tolerance = column_tolerance
        self.line_tolerance = line_tolerance

    def reconstruct(self, payload: PagePayload) -> DayLines:
        """
        Reconstruct day-keyed lines from a page payload.

        Args:
            payload: Positioned fragments or flat text for one page

        Returns:
            Mapping of day label to lines in reading order. Empty if no
            day header was found.
        """
        if isinstance(payload, str):
            return self.from_text(payload)
        return self.from_fragments(payload)

    # ------------------------------------------------------------------
    # Flat text mode
    # ------------------------------------------------------------------

    def from_text(self, text: str) -> DayLines:
        """Reconstruct day sections from a flat text stream."""
        lines = strip_boilerplate((text or '').splitlines())

        headers = []
        for index, line in enumerate(lines):
            header = _header_days(line)
            if header:
                headers.append((index, header[0], header[1]))

        if not headers:
            log.info("no_day_headers", mode="text", lines=len(lines))
            return {}

        result: DayLines = {}
        for position, (index, days, remainder) in enumerate(headers):
            end = headers[position + 1][0] if position + 1 < len(headers) else len(lines)
            content = ([remainder] if remainder else []) + lines[index + 1:end]

            for day in days:
                result.setdefault(day, [])

            if len(days) == 1:
                result[days[0]].extend(content)
                continue

            # Merged columns: deal each line's entries round-robin
            for line in content:
                for i, segment in enumerate(split_segments(line)):
                    result[days[i % len(days)]].append(segment)

        return result

    # ------------------------------------------------------------------
    # Positioned mode
    # ------------------------------------------------------------------

    def from_fragments(self, fragments: Sequence[PositionedFragment]) -> DayLines:
        """Reconstruct day columns from positioned fragments."""
        fragments = [f for f in fragments if sanitize_text(f.text)]
        if not fragments:
            return {}

        if not self._has_reliable_positions(fragments):
            log.info("positions_unreliable", fragments=len(fragments))
            return self.from_text('\n'.join(f.text for f in fragments))

        if any(len(Weekday.find_all(f.text)) > 1 for f in fragments):
            # Side-by-side columns merged into one box; positions can't separate them
            log.info("merged_day_headers", fragments=len(fragments))
            return self.from_text('\n'.join(self.group_lines(fragments)))

        headers = self._find_headers(fragments)
        if not headers:
            log.info("no_day_headers", mode="positioned", fragments=len(fragments))
            return {}

        columns = self.build_columns(headers)
        header_ids = {id(fragment) for _, fragment in headers}

        for fragment in fragments:
            if id(fragment) in header_ids:
                continue
            for column in columns:
                if column.contains(fragment):
                    column.fragments.append(fragment)
                    break

        result: DayLines = {}
        for column in columns:
            lines = strip_boilerplate(self.group_lines(column.fragments))
            result.setdefault(column.day_label, []).extend(lines)
        return result

    @staticmethod
    def _has_reliable_positions(fragments: Sequence[PositionedFragment]) -> bool:
        # A single box or everything at one point carries no layout
        return len({(f.x, f.y) for f in fragments}) > 1

    @staticmethod
    def _find_headers(fragments: Sequence[PositionedFragment]) -> List[Tuple[str, PositionedFragment]]:
        headers = []
        for fragment in fragments:
            text = sanitize_text(fragment.text)
            found = Weekday.find_all(text)
            if found and not TIME_PATTERN.search(text):
                headers.append((found[0][0].value, fragment))
            elif re.fullmatch(r'[A-Za-z]{3,9}\.?', text):
                # Abbreviated header ("MON", "Tues.")
                day = Weekday.from_string(text)
                if day:
                    headers.append((day.value, fragment))
        return headers

    def build_columns(self, headers: Sequence[Tuple[str, PositionedFragment]]) -> List[DayColumn]:
        """
        Turn day headers into column bands.

        Headers whose x positions fall within the column tolerance share a
        column. Bands partition the horizontal axis: neighbouring bands meet
        halfway between their headers and the outer bands are unbounded.
        Several headers stacked in one band split it vertically. Vertical
        edges sit one line tolerance above each header, so text on the
        header's own row belongs to that header.

        Args:
            headers: (day label, header fragment) pairs

        Returns:
            Day columns in reading order
        """
        ordered = sorted(headers, key=lambda h: h[1].x)
        clusters: List[List[Tuple[str, PositionedFragment]]] = []
        for header in ordered:
            if clusters and header[1].x - clusters[-1][-1][1].x <= self.column_tolerance:
                clusters[-1].append(header)
            else:
                clusters.append([header])

        edges = [float('-inf')]
        for left, right in zip(clusters, clusters[1:]):
            edges.append((left[-1][1].x + right[0][1].x) / 2)
        edges.append(float('inf'))

        columns = []
        for i, cluster in enumerate(clusters):
            x_min, x_max = edges[i], edges[i + 1]

            stacked = sorted(cluster, key=lambda h: h[1].y)
            for j, (label, fragment) in enumerate(stacked):
                y_max = stacked[j + 1][1].y if j + 1 < len(stacked) else float('inf')
                columns.append(DayColumn(
                    day_label=label,
                    x_min=x_min,
                    x_max=x_max,
                    y_min=fragment.y,
                    y_max=y_max,
                    y_margin=self.line_tolerance,
                ))

        return columns

    def group_lines(self, fragments: Sequence[PositionedFragment]) -> List[str]:
        """
        Group fragments into text lines by vertical proximity.

        Args:
            fragments: Fragments to group

        Returns:
            Lines top to bottom, each joined left to right
        """
        if not fragments:
            return []

        ordered = sorted(fragments, key=lambda f: (f.y, f.x))
        rows = []
        current_row = [ordered[0]]
        current_y = ordered[0].y

        for fragment in ordered[1:]:
            if abs(fragment.y - current_y) <= self.line_tolerance:
                current_row.append(fragment)
            else:
                rows.append(current_row)
                current_row = [fragment]
                current_y = fragment.y
        rows.append(current_row)

        return [
            sanitize_text(' '.join(f.text for f in sorted(row, key=lambda f: f.x)))
            for row in rows
        ]
