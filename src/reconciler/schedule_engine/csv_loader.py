"""Load the authoritative schedule from the studio's CSV export."""

import csv
import io
from pathlib import Path
from typing import Dict, List, Optional, Union

from .errors import ValidationError
from .logging import get_logger
from .models import ScheduleEntry, Weekday
from .normalizer import NormalizationLayer
from .timeparse import from_24_hour, normalize_time
from .utils import sanitize_text

log = get_logger(__name__)

# Accepted header spellings, compared case-insensitively
COLUMN_ALIASES = {
    'day': ('day', 'weekday'),
    'time': ('time', 'start time', 'class time'),
    'class_name': ('class', 'class name', 'classname'),
    'trainer': ('trainer', 'trainer 1', 'trainer name', 'instructor'),
    'location': ('location', 'studio'),
    'theme': ('theme',),
}
REQUIRED_COLUMNS = ('day', 'time', 'class_name', 'trainer')


def _resolve_columns(fieldnames: List[str]) -> Dict[str, str]:
    lowered = {sanitize_text(name).lower(): name for name in fieldnames if name}
    columns = {}
    for field, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lowered:
                columns[field] = lowered[alias]
                break
    return columns


def _read_text(source: Union[str, Path]) -> str:
    # A single line is a path; CSV text always has a header line and rows
    if isinstance(source, Path) or '\n' not in source:
        path = Path(source)
        if not path.is_file():
            raise ValidationError(f"CSV file not found: {path}")
        return path.read_text(encoding='utf-8-sig')
    return source


def _normalize_csv_time(value: str) -> Optional[str]:
    return normalize_time(value) or from_24_hour(value)


def load_authoritative_csv(
    source: Union[str, Path],
    location: Optional[str] = None,
    normalization: Optional[NormalizationLayer] = None,
) -> Dict[str, List[ScheduleEntry]]:
    """
    Read the authoritative schedule.

    Args:
        source: Path to a .csv file, or the CSV text itself
        location: Location for rows without one (or when the file has no
            location column)
        normalization: Canonicalizes location names; the shared default if omitted

    Returns:
        Day label -> entries, days in Monday-to-Sunday order

    Raises:
        ValidationError: If the file is missing or a required column is absent
    """
    reader = csv.DictReader(io.StringIO(_read_text(source)))
    columns = _resolve_columns(reader.fieldnames or [])

    missing = [field for field in REQUIRED_COLUMNS if field not in columns]
    if 'location' not in columns and not location:
        missing.append('location')
    if missing:
        raise ValidationError(f"CSV is missing required column(s): {', '.join(missing)}")

    normalization = normalization or NormalizationLayer.default()
    by_day: Dict[Weekday, List[ScheduleEntry]] = {}
    skipped = 0

    for row in reader:
        def cell(field: str) -> str:
            column = columns.get(field)
            return sanitize_text(row.get(column) or '') if column else ''

        day = Weekday.from_string(cell('day'))
        class_name = cell('class_name')
        if day is None or not class_name:
            skipped += 1
            continue

        raw_time = cell('time')
        by_day.setdefault(day, []).append(ScheduleEntry(
            day=day.value,
            time=_normalize_csv_time(raw_time) or raw_time,
            class_name=class_name,
            trainer=cell('trainer'),
            location=normalization.locations.normalize(cell('location') or location or ''),
            theme=cell('theme') or None,
        ))

    if skipped:
        log.info("csv_rows_skipped", skipped=skipped)

    return {day.value: by_day[day] for day in sorted(by_day, key=lambda d: d.order)}
