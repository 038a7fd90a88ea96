"""Schedule Engine Package for class-schedule extraction and reconciliation."""

__version__ = "0.1.0"

from .alignment import build_alignment, group_by_day
from .csv_loader import load_authoritative_csv
from .main import ProcessingReport, process_schedule, save_to_json
from .models import (
    AlignedRow,
    ComparisonResult,
    PositionedFragment,
    RawEntry,
    ReconciliationSummary,
    RowKind,
    ScheduleEntry,
    Weekday,
)
from .normalizer import NormalizationLayer, Normalizer
from .parser import ScheduleParser, parse_schedule_text
from .reconciler import ReconcileOptions, compare_pair, reconcile, reconcile_strict, summarize
from .utils import is_supported_file, validate_schedule

__all__ = [
    'process_schedule',
    'save_to_json',
    'ProcessingReport',
    'ScheduleParser',
    'parse_schedule_text',
    'NormalizationLayer',
    'Normalizer',
    'ReconcileOptions',
    'reconcile',
    'reconcile_strict',
    'compare_pair',
    'summarize',
    'build_alignment',
    'group_by_day',
    'load_authoritative_csv',
    'AlignedRow',
    'ComparisonResult',
    'PositionedFragment',
    'RawEntry',
    'ReconciliationSummary',
    'RowKind',
    'ScheduleEntry',
    'Weekday',
    'is_supported_file',
    'validate_schedule',
]
