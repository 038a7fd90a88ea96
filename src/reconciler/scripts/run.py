"""Command-line entry point for the schedule engine."""

import json
import sys
from pathlib import Path
from typing import Optional

# Add parent directory to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from schedule_engine import is_supported_file, process_schedule, save_to_json, validate_schedule
from schedule_engine.config import get_settings
from schedule_engine.database import create_tables, get_db_engine, save_run
from schedule_engine.errors import NoScheduleFoundError, ScheduleEngineError, ValidationError
from schedule_engine.logging import setup_logging
from schedule_engine.utils import format_summary_report


def _option(name: str) -> Optional[str]:
    """Value following ``name`` on the command line, if any."""
    if name in sys.argv:
        index = sys.argv.index(name)
        if index + 1 < len(sys.argv):
            return sys.argv[index + 1]
    return None


def main():
    """Main entry point for command-line execution."""

    if len(sys.argv) < 2 or not _option('--location'):
        print("="*70)
        print("SCHEDULE ENGINE - Command Line Interface")
        print("="*70)
        print("\nUsage: python scripts/run.py <file_path> --location <name> [options]")
        print("\nArguments:")
        print("  file_path     Path to schedule file (required)")
        print("  --location    Studio location of the schedule (required)")
        print("\nOptions:")
        print("  --csv         Authoritative schedule CSV to reconcile against")
        print("  --output      Specify output JSON file path")
        print("  --db          SQLite database path")
        print("  --gpu         Use GPU acceleration for OCR")
        print("\nSupported formats: PDF, PNG, JPG, JPEG, BMP, TIFF")
        print("\nExamples:")
        print("  python scripts/run.py schedule.pdf --location Kemps")
        print("  python scripts/run.py schedule.pdf --location Bandra --csv classes.csv --output report.json")
        sys.exit(1)

    file_path = sys.argv[1]
    location = _option('--location')
    csv_path = _option('--csv')
    output_path = _option('--output') or Path(file_path).stem + "_schedule.json"

    settings = get_settings()
    if '--gpu' in sys.argv:
        settings = settings.model_copy(update={'use_gpu': True})
    db_path = _option('--db') or settings.db_path

    setup_logging(json_output=settings.log_json, log_level=settings.log_level)

    if not is_supported_file(file_path):
        print("\n✗ Error: Unsupported file format")
        print("  Supported formats: PDF, PNG, JPG, JPEG, BMP, TIFF")
        sys.exit(1)

    try:
        report = process_schedule(file_path, location, csv_path=csv_path, settings=settings)
    except ValidationError as e:
        print(f"\n✗ Validation Error: {e}")
        sys.exit(1)
    except NoScheduleFoundError as e:
        print(f"\n✗ Could not read schedule: {e}")
        sys.exit(1)
    except ScheduleEngineError as e:
        print(f"\n✗ Processing Error: {e}")
        sys.exit(1)

    warnings = validate_schedule(report.entries)
    if warnings:
        print("\n" + "="*70)
        print("VALIDATION WARNINGS")
        print("="*70)
        for warning in warnings:
            print(f"⚠ {warning}")

    if report.summary:
        print("\n" + "="*70)
        print("RECONCILIATION")
        print("="*70)
        print(format_summary_report(report.summary))

    print("\n" + "="*70)
    print("SAVING RESULTS")
    print("="*70)
    save_to_json(report, output_path)

    engine = get_db_engine(db_path=db_path)
    create_tables(engine)
    source_id = save_run(engine, report.file_path, report.location, report.entries, report.results)

    # Print result JSON so callers can pick up the source id
    print(json.dumps({"schedule_source_id": source_id}))
    print("\n✓ Processing completed successfully!")


if __name__ == "__main__":
    main()
