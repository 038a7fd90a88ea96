"""Schedule assembly: normalize raw entries and drop duplicates."""

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List, Tuple

from .logging import get_logger
from .models import RawEntry, ScheduleEntry, Weekday
from .normalizer import NormalizationLayer
from .timeparse import time_to_minutes

log = get_logger(__name__)


@dataclass(frozen=True)
class AssemblyResult:
    entries: List[ScheduleEntry]
    seen_keys: FrozenSet[str]
    duplicates: int = 0
    rejected: int = 0


def assemble_entries(
    items: Iterable[Tuple[str, RawEntry, str]],
    normalization: NormalizationLayer,
    seen_keys: FrozenSet[str] = frozenset(),
) -> AssemblyResult:
    """
    Build canonical entries from (day label, raw entry, location) triples.

    Entries whose identity key is already in ``seen_keys`` (or earlier in
    this batch) are dropped, so the first occurrence wins.

    Args:
        items: Day label, raw entry and location for each parsed entry
        normalization: Vocabularies used to canonicalize names
        seen_keys: Identity keys already emitted by earlier pages

    Returns:
        AssemblyResult with new entries and the extended seen-key set
    """
    seen = set(seen_keys)
    entries: List[ScheduleEntry] = []
    duplicates = rejected = 0

    for day_label, raw, location in items:
        day = Weekday.from_string(day_label)
        if day is None or not raw.time:
            rejected += 1
            continue

        class_name = normalization.classes.normalize(raw.class_name)
        if not normalization.class_filter.is_valid(class_name):
            log.debug("class_rejected", raw=raw.class_name, normalized=class_name)
            rejected += 1
            continue

        entry = ScheduleEntry(
            day=day.value,
            time=raw.time,
            class_name=class_name,
            trainer=normalization.trainers.normalize(raw.trainer_name),
            location=normalization.locations.normalize(location),
            theme=raw.theme,
        )

        if entry.identity_key in seen:
            duplicates += 1
            continue

        seen.add(entry.identity_key)
        entries.append(entry)

    if duplicates or rejected:
        log.debug("assembly_filtered", duplicates=duplicates, rejected=rejected)

    return AssemblyResult(entries, frozenset(seen), duplicates, rejected)


def sort_entries(entries: Iterable[ScheduleEntry]) -> List[ScheduleEntry]:
    """Stable sort by weekday, then time of day; unparseable times go last within a day."""
    def sort_key(entry: ScheduleEntry):
        day = Weekday.from_string(entry.day)
        minutes = time_to_minutes(entry.time)
        return (day.order if day else 7, minutes if minutes is not None else 10_000)

    return sorted(entries, key=sort_key)
