"""Domain models for parcel inspection."""

from parcel_inspection.models.item import (
    ProductCategory,
    HiddenFlags,
    Tint,
    VerificationRecord,
    ItemRecord,
    compute_signature,
)
from parcel_inspection.models.rules import (
    Comparator,
    DestinationRule,
    CategoryRule,
    WeightRule,
    PriceRule,
    AttributeBanRule,
    LabelRule,
    ProcessRule,
    RuleSet,
)
from parcel_inspection.models.verdict import (
    Verdict,
    Violation,
    ViolationKind,
)

__all__ = [
    # Item
    "ProductCategory",
    "HiddenFlags",
    "Tint",
    "VerificationRecord",
    "ItemRecord",
    "compute_signature",
    # Rules
    "Comparator",
    "DestinationRule",
    "CategoryRule",
    "WeightRule",
    "PriceRule",
    "AttributeBanRule",
    "LabelRule",
    "ProcessRule",
    "RuleSet",
    # Verdict
    "Verdict",
    "Violation",
    "ViolationKind",
]
