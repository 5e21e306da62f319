"""Random generation of parcels and daily rule sets."""

from parcel_inspection.generation.random_source import RandomSource
from parcel_inspection.generation.items import ItemRecordGenerator, generate_item
from parcel_inspection.generation.day_rules import DayRuleGenerator, generate_rule_set

__all__ = [
    "RandomSource",
    "ItemRecordGenerator",
    "generate_item",
    "DayRuleGenerator",
    "generate_rule_set",
]
