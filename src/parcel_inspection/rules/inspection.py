"""Station readings and process requirements.

Each inspection station reveals part of a parcel's hidden state: the scanner
compares the visible label with the verification record, the scale reports
the real weight, and the detectors report their hidden flag. The day's
ProcessRule decides which stations a parcel has to visit.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from parcel_inspection.models.item import HiddenFlags, ItemRecord, ProductCategory
from parcel_inspection.models.rules import RuleSet
from parcel_inspection.rules.comparators import BOUND_TOLERANCE

# Label and scale readings closer than this count as equal
WEIGHT_READING_TOLERANCE_KG = 0.05


class Station(str, Enum):
    """Inspection stations, in the order a parcel usually visits them."""

    INFO = "info"  # barcode scanner
    WEIGHT = "weight"
    MAGNETIC = "magnetic"
    RADIATION = "radiation"
    CHEMICAL = "chemical"


_DETECTED_FLAG = {
    Station.MAGNETIC: HiddenFlags.METALLIC,
    Station.RADIATION: HiddenFlags.RADIOACTIVE,
    Station.CHEMICAL: HiddenFlags.CHEMICAL,
}


class LabelMismatch(BaseModel):
    """One field where the label disagrees with the verification record."""

    model_config = ConfigDict(frozen=True)

    field: str
    visible: Any
    official: Any


class LabelInspection(BaseModel):
    """Result of comparing a parcel's label with its verification record."""

    model_config = ConfigDict(frozen=True)

    mismatches: tuple[LabelMismatch, ...] = ()
    signature: str
    signature_valid: bool
    fake_label: bool

    @property
    def is_ok(self) -> bool:
        return not self.mismatches and self.signature_valid and not self.fake_label

    def describe(self) -> str:
        if self.is_ok:
            return f"LABEL OK (sig {self.signature})"
        parts = [f"{m.field}: {m.visible!r} vs {m.official!r}" for m in self.mismatches]
        if not self.signature_valid:
            parts.append(f"invalid signature {self.signature}")
        return "LABEL MISMATCH" + (f" ({'; '.join(parts)})" if parts else "")


def inspect_label(item: ItemRecord) -> LabelInspection:
    """Compare the visible label of a parcel with its official data."""
    official = item.verification
    mismatches: list[LabelMismatch] = []

    if item.destination != official.official_destination:
        mismatches.append(
            LabelMismatch(
                field="destination",
                visible=item.destination,
                official=official.official_destination,
            )
        )
    if item.category != official.official_category:
        mismatches.append(
            LabelMismatch(
                field="category",
                visible=item.category.value,
                official=official.official_category.value,
            )
        )
    weight_delta = abs(item.declared_weight_kg - official.official_declared_weight_kg)
    if weight_delta > WEIGHT_READING_TOLERANCE_KG:
        mismatches.append(
            LabelMismatch(
                field="declared_weight_kg",
                visible=item.declared_weight_kg,
                official=official.official_declared_weight_kg,
            )
        )
    if item.declared_price_usd != official.official_declared_price_usd:
        mismatches.append(
            LabelMismatch(
                field="declared_price_usd",
                visible=item.declared_price_usd,
                official=official.official_declared_price_usd,
            )
        )

    return LabelInspection(
        mismatches=tuple(mismatches),
        signature=official.signature,
        signature_valid=official.signature_valid,
        fake_label=item.hidden_flags.has_fake_label,
    )


class ScanReading(BaseModel):
    """What a station shows for one parcel."""

    model_config = ConfigDict(frozen=True)

    station: Station
    item_id: str
    detected: bool | None = Field(
        default=None, description="Detector stations: whether their flag is present"
    )
    declared_weight_kg: float | None = None
    real_weight_kg: float | None = None
    delta_kg: float | None = None
    within_tolerance: bool | None = None
    label: LabelInspection | None = None
    summary: str


def scan(item: ItemRecord, station: Station) -> ScanReading:
    """Take a reading of a parcel at a station."""
    if station == Station.INFO:
        label = inspect_label(item)
        return ScanReading(
            station=station,
            item_id=item.item_id,
            label=label,
            summary=label.describe(),
        )

    if station == Station.WEIGHT:
        delta = item.weight_discrepancy_kg
        within = delta < WEIGHT_READING_TOLERANCE_KG
        return ScanReading(
            station=station,
            item_id=item.item_id,
            declared_weight_kg=item.declared_weight_kg,
            real_weight_kg=item.real_weight_kg,
            delta_kg=round(delta, 3),
            within_tolerance=within,
            summary="WITHIN TOLERANCE" if within else "MISMATCH",
        )

    flag = _DETECTED_FLAG[station]
    detected = bool(item.hidden_flags & flag)
    alerts = {
        Station.MAGNETIC: "METAL DETECTED",
        Station.RADIATION: "RADIOACTIVE",
        Station.CHEMICAL: "HAZARDOUS",
    }
    return ScanReading(
        station=station,
        item_id=item.item_id,
        detected=detected,
        summary=alerts[station] if detected else "CLEAR",
    )


def required_stations(item: ItemRecord, rule_set: RuleSet) -> list[Station]:
    """Stations the day's process rules require for this parcel."""
    process = rule_set.process_rule
    required: set[Station] = set()

    if process.require_scan_all:
        required.add(Station.INFO)
    if item.destination in rule_set.destination_rule.require_scan_for_destinations:
        required.add(Station.INFO)
    if process.require_weigh_all:
        required.add(Station.WEIGHT)
    if process.require_magnetic_check:
        required.add(Station.MAGNETIC)
    if process.if_electronics_require_magnet and item.category == ProductCategory.ELECTRONICS:
        required.add(Station.MAGNETIC)
    if process.require_radiation_check:
        required.add(Station.RADIATION)
    if (
        process.if_real_heavier_than_declared_require_radiation
        and item.real_weight_kg > item.declared_weight_kg + BOUND_TOLERANCE
    ):
        required.add(Station.RADIATION)
    if process.require_chemical_check:
        required.add(Station.CHEMICAL)
    if process.if_medical_require_chemical and item.category == ProductCategory.MEDICAL:
        required.add(Station.CHEMICAL)
    if (
        process.if_international_require_scan
        and item.destination not in process.domestic_destinations
    ):
        required.add(Station.INFO)

    return [station for station in Station if station in required]


def missing_stations(
    item: ItemRecord,
    rule_set: RuleSet,
    used: Iterable[Station],
) -> list[Station]:
    """Required stations the parcel has not visited."""
    visited = set(used)
    return [s for s in required_stations(item, rule_set) if s not in visited]


def exceeds_station_limit(rule_set: RuleSet, used: Iterable[Station]) -> bool:
    """Whether more stations were visited than the day allows."""
    limit = rule_set.max_stations_per_item
    return limit > 0 and len(set(used)) > limit
