"""Parcel Inspection - day rule generation and parcel validation engine."""

from parcel_inspection.generation import (
    DayRuleGenerator,
    ItemRecordGenerator,
    RandomSource,
    generate_item,
    generate_rule_set,
)
from parcel_inspection.rules import evaluate

__version__ = "0.1.0"

__all__ = [
    "DayRuleGenerator",
    "ItemRecordGenerator",
    "RandomSource",
    "generate_item",
    "generate_rule_set",
    "evaluate",
]
