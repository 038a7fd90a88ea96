"""Reconciliation of a derived schedule against the authoritative one.

Two modes share the ComparisonResult shape:

- greedy best-match (`reconcile`): each derived entry, in order, claims the
  best-scoring unclaimed authoritative entry that passes every gate.
- strict pairwise (`reconcile_strict`): entries pair only on identical day,
  time and class; other differing fields are reported by name.
"""

from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence

from .config import EngineSettings
from .logging import get_logger
from .models import COMPARED_FIELDS, ComparisonResult, ReconciliationSummary, ScheduleEntry, Weekday
from .timeparse import minutes_diff, time_to_minutes

log = get_logger(__name__)

NO_AUTHORITATIVE_MATCH = "no matching authoritative entry found"
NO_DERIVED_MATCH = "no matching derived entry found"

# Score reductions for exact agreement; time difference dominates
EXACT_TRAINER_BONUS = 0.5
EXACT_CLASS_BONUS = 0.5
EXACT_LOCATION_BONUS = 0.2
UNKNOWN_TIME_PENALTY = 2.0

ALL_FIELDS = frozenset(COMPARED_FIELDS)
PAIRWISE_FIELDS = ('day', 'time', 'class_name', 'trainer')


@dataclass(frozen=True)
class ReconcileOptions:
    time_tolerance_minutes: int = 5
    require_same_location: bool = False
    trainer_fuzzy: bool = True

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> 'ReconcileOptions':
        return cls(
            time_tolerance_minutes=settings.time_tolerance_minutes,
            require_same_location=settings.require_same_location,
            trainer_fuzzy=settings.trainer_fuzzy,
        )


def strip_studio(name: str) -> str:
    """Lower-case class name without a leading "studio "."""
    name = (name or '').strip().lower()
    if name.startswith('studio '):
        name = name[len('studio '):].strip()
    return name


def classes_match(a: str, b: str) -> bool:
    return strip_studio(a) == strip_studio(b)


def trainers_match(a: str, b: str, fuzzy: bool = True) -> bool:
    """
    Exact case-insensitive match, or with ``fuzzy`` also containment
    either way or a shared four-letter prefix ("Rich" / "Richard D'Costa").
    """
    a = (a or '').strip().lower()
    b = (b or '').strip().lower()
    if a == b:
        return True
    if not fuzzy or not a or not b:
        return False
    return a in b or b in a or a[:4] == b[:4]


def flatten_by_day(schedule: Mapping[str, Sequence[ScheduleEntry]]) -> List[ScheduleEntry]:
    """Flatten a day-keyed schedule, Monday first, keeping each day's order."""
    def day_order(label: str) -> int:
        day = Weekday.from_string(label)
        return day.order if day else 7

    flattened: List[ScheduleEntry] = []
    for label in sorted(schedule, key=day_order):
        flattened.extend(schedule[label])
    return flattened


def _score(derived: ScheduleEntry, candidate: ScheduleEntry, tolerance: int) -> Optional[float]:
    """Composite score for a candidate, or None if it fails the time gate."""
    diff = minutes_diff(derived.time, candidate.time)
    if diff is None:
        score = UNKNOWN_TIME_PENALTY
    elif diff > tolerance:
        return None
    else:
        score = diff / tolerance if tolerance else 0.0

    if derived.trainer.strip().lower() == candidate.trainer.strip().lower():
        score -= EXACT_TRAINER_BONUS
    if derived.class_name.strip().lower() == candidate.class_name.strip().lower():
        score -= EXACT_CLASS_BONUS
    if derived.location.strip().lower() == candidate.location.strip().lower():
        score -= EXACT_LOCATION_BONUS
    return score


def reconcile(
    derived: Iterable[ScheduleEntry],
    authoritative: Mapping[str, Sequence[ScheduleEntry]],
    options: Optional[ReconcileOptions] = None,
) -> List[ComparisonResult]:
    """
    Greedy best-match reconciliation.

    Each authoritative entry is claimed by at most one derived entry, first
    come first served; this is not a minimum-cost assignment.

    Args:
        derived: Entries recovered from the schedule image
        authoritative: Trusted entries grouped by day
        options: Tolerance and gating options

    Returns:
        One result per derived entry, followed by one per unclaimed
        authoritative entry
    """
    options = options or ReconcileOptions()
    candidates = flatten_by_day(authoritative)
    claimed = [False] * len(candidates)
    results: List[ComparisonResult] = []

    for entry in derived:
        best_index = None
        best_score = None

        for index, candidate in enumerate(candidates):
            if claimed[index] or candidate.day.lower() != entry.day.lower():
                continue
            if options.require_same_location and \
                    candidate.location.strip().lower() != entry.location.strip().lower():
                continue
            if not classes_match(entry.class_name, candidate.class_name):
                continue
            if not trainers_match(entry.trainer, candidate.trainer, options.trainer_fuzzy):
                continue

            score = _score(entry, candidate, options.time_tolerance_minutes)
            if score is None:
                continue
            # strict comparison keeps the earliest candidate on ties
            if best_score is None or score < best_score:
                best_index, best_score = index, score

        if best_index is None:
            results.append(ComparisonResult(
                authoritative=None,
                derived=entry,
                is_match=False,
                mismatch_reason=NO_AUTHORITATIVE_MATCH,
                discrepancy_fields=ALL_FIELDS,
            ))
            continue

        claimed[best_index] = True
        results.append(ComparisonResult(
            authoritative=candidates[best_index],
            derived=entry,
            is_match=True,
        ))

    for index, candidate in enumerate(candidates):
        if not claimed[index]:
            results.append(ComparisonResult(
                authoritative=candidate,
                derived=None,
                is_match=False,
                mismatch_reason=NO_DERIVED_MATCH,
                discrepancy_fields=ALL_FIELDS,
            ))

    log.info("reconciled", results=len(results),
             authoritative=len(candidates), matched=claimed.count(True))
    return results


def _differing_fields(authoritative: ScheduleEntry, derived: ScheduleEntry) -> List[str]:
    differing = []
    if authoritative.day.lower() != derived.day.lower():
        differing.append('day')

    a_minutes = time_to_minutes(authoritative.time)
    d_minutes = time_to_minutes(derived.time)
    if a_minutes is None or d_minutes is None:
        if authoritative.time.strip().upper() != derived.time.strip().upper():
            differing.append('time')
    elif a_minutes != d_minutes:
        differing.append('time')

    if not classes_match(authoritative.class_name, derived.class_name):
        differing.append('class_name')
    if authoritative.trainer.strip().lower() != derived.trainer.strip().lower():
        differing.append('trainer')
    return differing


def compare_pair(authoritative: ScheduleEntry, derived: ScheduleEntry) -> ComparisonResult:
    """
    Compare two entries field by field.

    Returns:
        A match when day, time, class and trainer agree; otherwise a
        mismatch naming exactly the differing fields
    """
    differing = _differing_fields(authoritative, derived)
    if not differing:
        return ComparisonResult(authoritative=authoritative, derived=derived, is_match=True)
    return ComparisonResult(
        authoritative=authoritative,
        derived=derived,
        is_match=False,
        mismatch_reason=f"Mismatched fields: {', '.join(differing)}",
        discrepancy_fields=frozenset(differing),
    )


def reconcile_strict(
    derived: Iterable[ScheduleEntry],
    authoritative: Mapping[str, Sequence[ScheduleEntry]],
) -> List[ComparisonResult]:
    """
    Strict pairwise reconciliation.

    Each authoritative entry pairs with the first unclaimed derived entry on
    the same day at the same time with the same class; the pair is then
    compared field by field, so a different trainer shows up as a
    "trainer" mismatch.

    Returns:
        One result per authoritative entry, then one per unpaired derived entry
    """
    derived = list(derived)
    used = [False] * len(derived)
    results: List[ComparisonResult] = []

    for auth in flatten_by_day(authoritative):
        auth_minutes = time_to_minutes(auth.time)
        pair_index = None
        for index, entry in enumerate(derived):
            if used[index] or entry.day.lower() != auth.day.lower():
                continue
            same_time = (auth_minutes is not None and auth_minutes == time_to_minutes(entry.time)) \
                or auth.time.strip().upper() == entry.time.strip().upper()
            if same_time and classes_match(auth.class_name, entry.class_name):
                pair_index = index
                break

        if pair_index is None:
            results.append(ComparisonResult(
                authoritative=auth,
                derived=None,
                is_match=False,
                mismatch_reason=NO_DERIVED_MATCH,
                discrepancy_fields=ALL_FIELDS,
            ))
            continue

        used[pair_index] = True
        results.append(compare_pair(auth, derived[pair_index]))

    for index, entry in enumerate(derived):
        if not used[index]:
            results.append(ComparisonResult(
                authoritative=None,
                derived=entry,
                is_match=False,
                mismatch_reason=NO_AUTHORITATIVE_MATCH,
                discrepancy_fields=ALL_FIELDS,
            ))

    return results


def summarize(results: Sequence[ComparisonResult]) -> ReconciliationSummary:
    """
    Count results.

    A non-match with an authoritative side (one-sided, or a pair with
    differing fields) counts as unmatched authoritative; a non-match with
    only a derived side counts as unmatched derived.
    """
    matched = sum(1 for r in results if r.is_match)
    unmatched_authoritative = sum(
        1 for r in results if not r.is_match and r.authoritative is not None
    )
    unmatched_derived = sum(
        1 for r in results if not r.is_match and r.authoritative is None
    )
    return ReconciliationSummary(
        matched=matched,
        unmatched_authoritative=unmatched_authoritative,
        unmatched_derived=unmatched_derived,
        total=len(results),
    )
