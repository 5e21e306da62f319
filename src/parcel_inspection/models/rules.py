"""Daily rule set models.

A RuleSet is generated once per day and replaced wholesale at the next day
boundary. Each sub-rule can be inactive (empty lists, disabled flags, or the
``ANY`` comparator), in which case it contributes no violations.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from parcel_inspection.models.item import HiddenFlags, ProductCategory


class Comparator(str, Enum):
    """Comparison operators usable in numeric rules."""

    ANY = "any"  # always true
    LESS_EQUAL = "le"
    GREATER_EQUAL = "ge"
    EQUAL = "eq"
    NOT_EQUAL = "ne"


class _FrozenRule(BaseModel):
    model_config = ConfigDict(frozen=True)


class DestinationRule(_FrozenRule):
    """Destination restrictions for the day."""

    forbidden_destinations: tuple[str, ...] = Field(
        default=(), description="Destinations explicitly forbidden today"
    )
    whitelist_mode: bool = Field(
        default=False, description="If True, only allowed_destinations are accepted"
    )
    allowed_destinations: tuple[str, ...] = Field(default=())
    require_scan_for_destinations: tuple[str, ...] = Field(
        default=(), description="Parcels to these destinations must be scanned"
    )


class CategoryRule(_FrozenRule):
    """Category restrictions for the day."""

    whitelist_mode: bool = Field(
        default=False, description="If True, only allowed categories are accepted"
    )
    allowed: tuple[ProductCategory, ...] = Field(default=())
    forbidden: tuple[ProductCategory, ...] = Field(default=())


class WeightRule(_FrozenRule):
    """Declared weight, real weight and label/scale consistency checks."""

    check_declared: bool = False
    declared_comparator: Comparator = Comparator.ANY
    declared_kg: float = 0.0

    check_real: bool = False
    real_comparator: Comparator = Comparator.ANY
    real_kg: float = 0.0

    require_consistency: bool = False
    max_allowed_diff_kg: float = Field(default=0.5, ge=0)


class PriceRule(_FrozenRule):
    """Declared price threshold."""

    enabled: bool = False
    comparator: Comparator = Comparator.LESS_EQUAL
    usd: int = 500


class AttributeBanRule(_FrozenRule):
    """Hidden attributes that cause automatic rejection."""

    forbidden_hidden_flags: HiddenFlags = HiddenFlags.NONE


class LabelRule(_FrozenRule):
    """Reject parcels whose label disagrees with the verification record."""

    enabled: bool = False


class ProcessRule(_FrozenRule):
    """Inspection stations a parcel must visit before delivery.

    These do not affect acceptance; they are checked separately against the
    stations actually used (see ``parcel_inspection.rules.inspection``).
    """

    require_weigh_all: bool = False
    require_scan_all: bool = False
    require_magnetic_check: bool = False
    require_radiation_check: bool = False
    require_chemical_check: bool = False

    if_electronics_require_magnet: bool = False
    if_medical_require_chemical: bool = False
    if_real_heavier_than_declared_require_radiation: bool = False
    if_international_require_scan: bool = False
    domestic_destinations: tuple[str, ...] = Field(
        default=(), description="Destinations that do not count as international"
    )


class RuleSet(_FrozenRule):
    """All acceptance rules for one day, plus gameplay tuning."""

    destination_rule: DestinationRule = Field(default_factory=DestinationRule)
    category_rule: CategoryRule = Field(default_factory=CategoryRule)
    weight_rule: WeightRule = Field(default_factory=WeightRule)
    price_rule: PriceRule = Field(default_factory=PriceRule)
    attribute_ban_rule: AttributeBanRule = Field(default_factory=AttributeBanRule)
    label_rule: LabelRule = Field(default_factory=LabelRule)
    process_rule: ProcessRule = Field(default_factory=ProcessRule)

    # Tuning
    max_belt_buffer: int = Field(
        default=6, ge=0, description="Parcels allowed on the belt before penalty"
    )
    day_time_seconds: int = Field(default=90, ge=0, description="Length of the day")
    max_stations_per_item: int = Field(
        default=0, ge=0, description="Station visits allowed per parcel (0 = no limit)"
    )
    designer_notes: str = ""
