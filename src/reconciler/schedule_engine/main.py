"""Core execution logic for the schedule engine."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .alignment import build_alignment, group_by_day
from .config import EngineSettings, get_settings
from .csv_loader import load_authoritative_csv
from .errors import NoScheduleFoundError
from .models import AlignedRow, ComparisonResult, PageResult, ReconciliationSummary, ScheduleEntry, Weekday
from .pages import extract_pages_sync
from .parser import ScheduleParser
from .preprocessor import DocumentPreprocessor
from .reconciler import ReconcileOptions, reconcile, summarize
from .utils import validate_file_path


@dataclass
class ProcessingReport:
    """Everything produced by one run over a schedule document."""
    file_path: str
    location: str
    entries: List[ScheduleEntry]
    pages: List[PageResult] = field(default_factory=list)
    results: List[ComparisonResult] = field(default_factory=list)
    summary: Optional[ReconciliationSummary] = None
    alignment: Dict[str, List[AlignedRow]] = field(default_factory=dict)


def process_schedule(
    file_path: str,
    location: str,
    csv_path: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
    extractor=None,
    preprocessor: Optional[DocumentPreprocessor] = None,
) -> ProcessingReport:
    """
    Extract a weekly class schedule from a PDF or image and optionally
    reconcile it against the authoritative CSV.

    Args:
        file_path: Path to the schedule document
        location: Studio location the schedule belongs to
        csv_path: Authoritative schedule CSV (optional)
        settings: Engine settings (defaults to environment settings)
        extractor: Object with ``recognize(image)``; defaults to OCRExtractor
        preprocessor: Page renderer; defaults to DocumentPreprocessor

    Returns:
        ProcessingReport with entries, and reconciliation output when a CSV was given

    Raises:
        ValidationError: If the file or CSV is invalid
        NoScheduleFoundError: If no page produced any entries
    """
    settings = settings or get_settings()
    path = validate_file_path(file_path)

    print(f"▶ Processing Schedule: {path.name} ({location})")

    # Step 1: Page count
    print("\n[1/5] Opening document...")
    preprocessor = preprocessor or DocumentPreprocessor(dpi=settings.dpi)
    page_count = preprocessor.page_count(path)
    print(f"✓ {page_count} page(s)")

    # Step 2: Render and recognize, one page at a time
    print("\n[2/5] Extracting text...")
    if extractor is None:
        from .ocr_extractor import OCRExtractor

        extractor = OCRExtractor(use_gpu=settings.use_gpu, lang=settings.ocr_lang)

    pages = extract_pages_sync(
        page_count,
        lambda page: preprocessor.render_page(path, page),
        extractor.recognize,
        render_timeout=settings.render_timeout,
        recognition_timeout=settings.recognition_timeout,
        page_delay=settings.page_delay,
    )
    for page in pages:
        status = "ok" if page.ok else f"failed ({page.error})"
        print(f"  → Page {page.page_number}/{page_count}: {status}")

    # Step 3: Parse
    print("\n[3/5] Parsing schedule...")
    parser = ScheduleParser.from_settings(settings)
    entries = parser.parse_pages(pages, location)
    if not entries:
        raise NoScheduleFoundError(f"No schedule data found in {path.name}")
    print(f"✓ Extracted {len(entries)} classes")

    report = ProcessingReport(
        file_path=str(path.absolute()),
        location=location,
        entries=entries,
        pages=pages,
    )

    # Step 4: Reconcile
    if csv_path:
        print("\n[4/5] Reconciling against authoritative schedule...")
        authoritative = load_authoritative_csv(csv_path, location=location)
        report.results = reconcile(entries, authoritative, ReconcileOptions.from_settings(settings))
        report.summary = summarize(report.results)
        report.alignment = build_alignment(group_by_day(entries), authoritative)
        print(f"✓ {report.summary.matched}/{report.summary.total} rows matched")
    else:
        print("\n[4/5] No authoritative schedule given, skipping reconciliation")

    # Step 5: Summary
    print("\n[5/5] Extraction Summary")
    print(f"{'─'*60}")
    _print_schedule_summary(report)

    return report


def save_to_json(report: ProcessingReport, output_path: str) -> None:
    """
    Save a processing report to a JSON file.

    Args:
        report: ProcessingReport to save
        output_path: Path to output JSON file
    """
    data = {
        'file_path': report.file_path,
        'location': report.location,
        'pages': [
            {'page': page.page_number, 'ok': page.ok, 'error': page.error}
            for page in report.pages
        ],
        'entries': [entry.to_dict() for entry in report.entries],
        'reconciliation': {
            'summary': report.summary.to_dict() if report.summary else None,
            'results': [result.to_dict() for result in report.results],
        },
        'alignment': {
            day: [
                {
                    'time': row.time_key,
                    'kind': row.kind.value,
                    'authoritative': row.authoritative.to_dict() if row.authoritative else None,
                    'derived': row.derived.to_dict() if row.derived else None,
                }
                for row in rows
            ]
            for day, rows in report.alignment.items()
        },
    }

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)

    print(f"✓ Saved to: {output_path}")


def _print_schedule_summary(report: ProcessingReport) -> None:
    """Print a summary of the extracted schedule."""
    print(f"  Total Classes: {len(report.entries)}")

    by_day = group_by_day(report.entries)
    for day in Weekday:
        if by_day.get(day.value):
            print(f"    {day.value}: {len(by_day[day.value])} classes")

    if report.entries:
        print("\n  Sample Entries:")
        for i, entry in enumerate(report.entries[:3], 1):
            print(f"    {i}. {entry.day} | {entry.time} | {entry.class_name} | {entry.trainer}")

        if len(report.entries) > 3:
            print(f"    ... and {len(report.entries) - 3} more entries")
