"""Validation and utility functions for schedule processing."""

import re
from collections import Counter
from pathlib import Path
from typing import Iterable, List

from .errors import ValidationError
from .models import ReconciliationSummary, ScheduleEntry

SUPPORTED_EXTENSIONS = {'.pdf', '.png', '.jpg', '.jpeg', '.bmp', '.tiff', '.tif'}


def validate_file_path(file_path: str, supported_extensions: set = SUPPORTED_EXTENSIONS) -> Path:
    """
    Validate file path and extension.

    Args:
        file_path: Path to validate
        supported_extensions: Set of supported file extensions

    Returns:
        Validated Path object

    Raises:
        ValidationError: If validation fails
    """
    path = Path(file_path)

    if not path.exists():
        raise ValidationError(f"File not found: {path}")

    if not path.is_file():
        raise ValidationError(f"Path is not a file: {path}")

    if path.suffix.lower() not in supported_extensions:
        raise ValidationError(
            f"Unsupported file format: {path.suffix}. "
            f"Supported formats: {', '.join(sorted(supported_extensions))}"
        )

    return path


def validate_schedule(entries: Iterable[ScheduleEntry]) -> List[str]:
    """
    Check an extracted schedule and return warnings.

    Args:
        entries: Extracted schedule entries

    Returns:
        List of validation warning messages
    """
    entries = list(entries)
    warnings = []

    if not entries:
        warnings.append("No schedule entries were extracted")
        return warnings

    days = {entry.day for entry in entries}
    if len(days) < 7:
        missing = 7 - len(days)
        warnings.append(f"{missing} weekday(s) have no entries")

    # Same trainer booked twice in one slot usually means a misread time
    slots = Counter((entry.day, entry.time, entry.trainer) for entry in entries)
    double_booked = sum(1 for count in slots.values() if count > 1)
    if double_booked:
        warnings.append(f"{double_booked} slot(s) list the same trainer more than once")

    unknown_trainers = sum(1 for entry in entries if ' ' not in entry.trainer)
    if unknown_trainers:
        warnings.append(f"{unknown_trainers} entries have an unrecognized trainer name")

    return warnings


def sanitize_text(text: str) -> str:
    """
    Sanitize extracted text by removing unwanted characters.

    Args:
        text: Text to sanitize

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    text = text.replace('\x00', '')
    text = re.sub(r'\s+', ' ', text)

    return text.strip()


def format_summary_report(summary: ReconciliationSummary) -> str:
    """
    Generate a human-readable reconciliation summary.

    Args:
        summary: Reconciliation counts

    Returns:
        Formatted report string
    """
    if not summary.total:
        return "No entries to compare"

    match_rate = summary.matched / summary.total

    report = f"""
Reconciliation Report:
  Matched: {summary.matched} ({match_rate:.0%})
  Missing from extracted schedule: {summary.unmatched_authoritative}
  Not in authoritative schedule: {summary.unmatched_derived}
  Total rows: {summary.total}
"""

    return report.strip()


def is_supported_file(file_path: str) -> bool:
    """
    Quick check if file is supported.

    Args:
        file_path: Path to check

    Returns:
        True if file extension is supported
    """
    return Path(file_path).suffix.lower() in SUPPORTED_EXTENSIONS
