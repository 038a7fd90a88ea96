"""Side-by-side alignment of derived and authoritative schedules for display."""

from typing import Dict, Iterable, List, Mapping, Sequence

from .models import AlignedRow, RowKind, ScheduleEntry, Weekday
from .reconciler import strip_studio
from .timeparse import to_time_key

UNKNOWN_TIME_KEY = "99:99"


def group_by_day(entries: Iterable[ScheduleEntry]) -> Dict[str, List[ScheduleEntry]]:
    """Group entries by day label, keeping their order within each day."""
    grouped: Dict[str, List[ScheduleEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.day, []).append(entry)
    return grouped


def _time_key(entry: ScheduleEntry) -> str:
    return to_time_key(entry.time) or UNKNOWN_TIME_KEY


def _classes_overlap(a: str, b: str) -> bool:
    a, b = strip_studio(a), strip_studio(b)
    return bool(a) and bool(b) and (a in b or b in a)


def classify_pair(authoritative: ScheduleEntry, derived: ScheduleEntry) -> RowKind:
    """Single mismatch kind for a pair, checked time first, then class, then trainer."""
    if authoritative.time.strip().upper() != derived.time.strip().upper():
        return RowKind.TIME_MISMATCH
    if strip_studio(authoritative.class_name) != strip_studio(derived.class_name):
        return RowKind.CLASS_MISMATCH
    if authoritative.trainer.strip().lower() != derived.trainer.strip().lower():
        return RowKind.TRAINER_MISMATCH
    return RowKind.MATCH


def align_day(
    day: str,
    derived: Sequence[ScheduleEntry],
    authoritative: Sequence[ScheduleEntry],
) -> List[AlignedRow]:
    """
    Align one day's entries.

    Args:
        day: Day label for the rows
        derived: Derived entries for the day
        authoritative: Authoritative entries for the day

    Returns:
        Rows sorted by HH:MM time key
    """
    derived_keys = [_time_key(entry) for entry in derived]
    consumed = [False] * len(derived)
    rows: List[AlignedRow] = []

    for auth in authoritative:
        key = _time_key(auth)
        pair = None
        for index, entry in enumerate(derived):
            if consumed[index] or derived_keys[index] != key:
                continue
            if _classes_overlap(auth.class_name, entry.class_name):
                pair = index
                break

        if pair is None:
            rows.append(AlignedRow(day, key, RowKind.AUTHORITATIVE_ONLY, authoritative=auth))
            continue

        consumed[pair] = True
        rows.append(AlignedRow(day, key, classify_pair(auth, derived[pair]),
                               authoritative=auth, derived=derived[pair]))

    for index, entry in enumerate(derived):
        if not consumed[index]:
            rows.append(AlignedRow(day, derived_keys[index], RowKind.DERIVED_ONLY, derived=entry))

    rows.sort(key=lambda row: row.time_key)
    return rows


def build_alignment(
    derived: Mapping[str, Sequence[ScheduleEntry]],
    authoritative: Mapping[str, Sequence[ScheduleEntry]],
) -> Dict[str, List[AlignedRow]]:
    """
    Align two day-grouped schedules.

    Returns:
        Day label -> aligned rows, days in Monday-to-Sunday order. Days with
        no entries on either side are omitted.
    """
    result: Dict[str, List[AlignedRow]] = {}
    for weekday in Weekday:
        day_derived = _entries_for(derived, weekday)
        day_authoritative = _entries_for(authoritative, weekday)
        if day_derived or day_authoritative:
            result[weekday.value] = align_day(weekday.value, day_derived, day_authoritative)
    return result


def _entries_for(schedule: Mapping[str, Sequence[ScheduleEntry]], weekday: Weekday) -> List[ScheduleEntry]:
    entries: List[ScheduleEntry] = []
    for label, day_entries in schedule.items():
        if Weekday.from_string(label) is weekday:
            entries.extend(day_entries)
    return entries
