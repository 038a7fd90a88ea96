"""Time recognition and normalization for OCR'd schedule text."""

import re
from typing import Optional

# A clock token followed by AM/PM. The clock is either separated
# ("7:30", "7.30") or a compact digit run ("730", "1030"); a leading
# "S" is the usual OCR misread of "9" ("S00AM").
TIME_PATTERN = re.compile(
    r'(?<![\w:.])(?P<clock>\d{1,2}[:.]\d{1,2}|S?\d{1,4})\s?(?P<period>[AaPp])\.?[Mm]\.?(?![A-Za-z])'
)

_SEPARATED_RE = re.compile(r'^(\d{1,2})[:.](\d{2})$')
_COMPACT_RE = re.compile(r'^(\d{1,4})$')
_TWENTY_FOUR_HOUR_RE = re.compile(r'^(\d{1,2}):(\d{2})(?::\d{2})?$')
_NORMALIZED_RE = re.compile(r'^(\d{1,2}):(\d{2}) (AM|PM)$')


def normalize_time(raw: str, remap_ambiguous_hours: bool = False) -> Optional[str]:
    """
    Normalize a raw time token to "H:MM AM/PM".

    Accepts "7:30 AM", "7.30 AM", "7:30AM", "730AM", "1030AM" and "S00AM".
    Hours outside 1-12 and minutes of 60 or more are rejected, never clamped.

    Args:
        raw: Raw time text
        remap_ambiguous_hours: Read an AM hour of 1 as 11 (OCR dropped a leading "1")

    Returns:
        Normalized time string or None if unparseable
    """
    if not raw or not isinstance(raw, str):
        return None

    match = TIME_PATTERN.fullmatch(raw.strip())
    if not match:
        return None

    clock = match.group('clock')
    period = 'AM' if match.group('period').upper() == 'A' else 'PM'

    if clock.startswith('S'):
        clock = '9' + clock[1:]

    separated = _SEPARATED_RE.match(clock)
    if separated:
        hour, minute = int(separated.group(1)), int(separated.group(2))
    elif _COMPACT_RE.match(clock):
        if len(clock) <= 2:
            hour, minute = int(clock), 0
        else:
            hour, minute = int(clock[:-2]), int(clock[-2:])
    else:
        # single-digit minutes ("10:5AM") are unreadable
        return None

    if not 1 <= hour <= 12 or not 0 <= minute < 60:
        return None

    if remap_ambiguous_hours and period == 'AM' and hour == 1:
        hour = 11

    return f"{hour}:{minute:02d} {period}"


def time_to_minutes(value: str) -> Optional[int]:
    """
    Convert a time string to minutes since midnight.

    Understands the normalized 12-hour form, anything `normalize_time`
    accepts, and 24-hour "HH:MM".
    """
    if not value:
        return None

    value = value.strip().upper()
    normalized = value if _NORMALIZED_RE.match(value) else normalize_time(value)
    if normalized:
        hour_text, rest = normalized.split(':')
        hour = int(hour_text)
        minute = int(rest[:2])
        if rest.endswith('PM') and hour != 12:
            hour += 12
        if rest.endswith('AM') and hour == 12:
            hour = 0
        return hour * 60 + minute

    match = _TWENTY_FOUR_HOUR_RE.match(value)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour < 24 and minute < 60:
            return hour * 60 + minute

    return None


def minutes_diff(a: str, b: str) -> Optional[int]:
    """Absolute difference in minutes, or None if either side is unparseable."""
    ma = time_to_minutes(a)
    mb = time_to_minutes(b)
    if ma is None or mb is None:
        return None
    return abs(ma - mb)


def to_time_key(value: str) -> Optional[str]:
    """Canonical 24-hour "HH:MM" key, or None if unparseable."""
    minutes = time_to_minutes(value)
    if minutes is None:
        return None
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def from_24_hour(value: str) -> Optional[str]:
    """Convert "17:45" to "5:45 PM"."""
    match = _TWENTY_FOUR_HOUR_RE.match((value or '').strip())
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    period = 'PM' if hour >= 12 else 'AM'
    hour = hour % 12 or 12
    return f"{hour}:{minute:02d} {period}"
