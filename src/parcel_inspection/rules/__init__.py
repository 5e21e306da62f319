"""Rule engine for evaluating parcels against the day's rules."""

from parcel_inspection.rules.evaluator import evaluate
from parcel_inspection.rules.comparators import (
    compare,
    compare_float,
    compare_int,
    describe,
)
from parcel_inspection.rules.inspection import (
    LabelInspection,
    ScanReading,
    Station,
    inspect_label,
    missing_stations,
    required_stations,
    scan,
)

__all__ = [
    "evaluate",
    "compare",
    "compare_float",
    "compare_int",
    "describe",
    "LabelInspection",
    "ScanReading",
    "Station",
    "inspect_label",
    "missing_stations",
    "required_stations",
    "scan",
]
