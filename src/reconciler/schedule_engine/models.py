"""Data models for schedule extraction and reconciliation."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple, Union


class Weekday(Enum):
    """Enumeration for days of the week."""
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def from_string(cls, day_str: str) -> Optional['Weekday']:
        """
        Parse weekday from various string formats.

        Accepts full names in any case ("MONDAY"), common abbreviations
        ("Mon", "Tues", "Thurs") and any prefix of at least three letters.

        Args:
            day_str: String representation of weekday

        Returns:
            Weekday enum or None if not matched
        """
        if not day_str or not isinstance(day_str, str):
            return None

        day_str = re.sub(r'[^A-Za-z]', '', day_str).upper()

        if len(day_str) < 3:
            return None

        for day in cls:
            name = day.value.upper()
            if day_str == name or (name.startswith(day_str)):
                return day

        return None

    @classmethod
    def find_all(cls, text: str) -> List[Tuple['Weekday', int, int]]:
        """
        Find every full weekday name in a piece of text.

        Args:
            text: Text to scan

        Returns:
            List of (weekday, start, end) tuples in order of appearance
        """
        if not text:
            return []
        return [
            (cls(match.group(1).capitalize()), match.start(), match.end())
            for match in _WEEKDAY_RE.finditer(text)
        ]

    @property
    def order(self) -> int:
        return list(Weekday).index(self)


_WEEKDAY_RE = re.compile(
    r'\b(' + '|'.join(day.value for day in Weekday) + r')\b',
    re.IGNORECASE,
)

DAY_NAMES = tuple(day.value for day in Weekday)


@dataclass(frozen=True)
class PositionedFragment:
    """A piece of recognized text with its bounding box (pixel space, y grows down)."""
    text: str
    x: float
    y: float
    width: float = 0.0
    height: float = 0.0


@dataclass
class DayColumn:
    """A horizontal band of the page owned by one day header."""
    day_label: str
    x_min: float
    x_max: float
    # Vertical extent of the header's block; stacked day blocks share a column
    y_min: float = float('-inf')
    y_max: float = float('inf')
    # Both vertical edges sit this far above their header
    y_margin: float = 0.0
    fragments: List[PositionedFragment] = field(default_factory=list)

    def contains(self, fragment: PositionedFragment) -> bool:
        return (self.x_min <= fragment.x < self.x_max
                and self.y_min - self.y_margin <= fragment.y < self.y_max - self.y_margin)


@dataclass
class RawEntry:
    """An entry parsed from one line before normalization."""
    time: str
    class_name: str
    trainer_name: str
    theme: Optional[str] = None


@dataclass(frozen=True)
class ScheduleEntry:
    """A canonical schedule slot, from either the derived or the authoritative side."""
    day: str
    time: str
    class_name: str
    trainer: str
    location: str
    theme: Optional[str] = None
    identity_key: str = ""

    def __post_init__(self):
        if not self.identity_key:
            object.__setattr__(self, 'identity_key', make_identity_key(
                self.day, self.time, self.class_name, self.trainer, self.location
            ))

    def to_dict(self) -> dict:
        return {
            'day': self.day,
            'time': self.time,
            'class_name': self.class_name,
            'trainer': self.trainer,
            'location': self.location,
            'theme': self.theme,
            'identity_key': self.identity_key,
        }


def make_identity_key(day: str, time: str, class_name: str, trainer: str, location: str) -> str:
    """Lower-cased, whitespace-free concatenation used for dedup and lookup."""
    return re.sub(r'\s+', '', f"{day}{time}{class_name}{trainer}{location}".lower())


COMPARED_FIELDS: Tuple[str, ...] = ('day', 'time', 'class_name', 'trainer', 'location')


@dataclass(frozen=True)
class ComparisonResult:
    """One row of a reconciliation report."""
    authoritative: Optional[ScheduleEntry]
    derived: Optional[ScheduleEntry]
    is_match: bool
    mismatch_reason: str = ""
    discrepancy_fields: FrozenSet[str] = frozenset()

    def __post_init__(self):
        if self.is_match and (self.authoritative is None or self.derived is None):
            raise ValueError("A matched result needs both sides")
        if not self.is_match and not self.mismatch_reason:
            raise ValueError("An unmatched result needs a mismatch reason")

    def to_dict(self) -> dict:
        return {
            'authoritative': self.authoritative.to_dict() if self.authoritative else None,
            'derived': self.derived.to_dict() if self.derived else None,
            'is_match': self.is_match,
            'mismatch_reason': self.mismatch_reason,
            'discrepancy_fields': sorted(self.discrepancy_fields),
        }


@dataclass(frozen=True)
class ReconciliationSummary:
    matched: int
    unmatched_authoritative: int
    unmatched_derived: int
    total: int

    def to_dict(self) -> dict:
        return {
            'matched': self.matched,
            'unmatched_authoritative': self.unmatched_authoritative,
            'unmatched_derived': self.unmatched_derived,
            'total': self.total,
        }


class RowKind(Enum):
    """Classification of an aligned row."""
    MATCH = "match"
    TIME_MISMATCH = "time_mismatch"
    CLASS_MISMATCH = "class_mismatch"
    TRAINER_MISMATCH = "trainer_mismatch"
    AUTHORITATIVE_ONLY = "authoritative_only"
    DERIVED_ONLY = "derived_only"


@dataclass(frozen=True)
class AlignedRow:
    day: str
    time_key: str
    kind: RowKind
    authoritative: Optional[ScheduleEntry] = None
    derived: Optional[ScheduleEntry] = None


# Output of the token extractor for one page
PagePayload = Union[List[PositionedFragment], str]


@dataclass
class PageResult:
    """Outcome of extracting one page."""
    page_number: int
    payload: Optional[PagePayload] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.payload is not None and self.error is None
