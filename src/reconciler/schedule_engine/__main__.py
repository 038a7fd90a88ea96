"""Main module for running the schedule engine."""

import sys

from schedule_engine.errors import ScheduleEngineError
from schedule_engine.main import process_schedule

if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python -m schedule_engine <file_path> <location> [csv_path]")
        print("\nExample: python -m schedule_engine schedule.pdf \"Kwality House, Kemps Corner\"")
        sys.exit(1)

    try:
        process_schedule(sys.argv[1], sys.argv[2], csv_path=sys.argv[3] if len(sys.argv) > 3 else None)
    except ScheduleEngineError as e:
        print(f"\n✗ {e}")
        sys.exit(1)
