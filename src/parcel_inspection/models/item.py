"""Item record models: visible label, hidden flags and verification data."""

from __future__ import annotations

import hashlib
from enum import Enum, IntFlag
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ProductCategory(str, Enum):
    """Declared product type. Declaration order defines the ordinal."""

    UNDEFINED = "undefined"
    FOOD = "food"
    MEDICAL = "medical"
    ELECTRONICS = "electronics"
    MACHINERY = "machinery"
    CHEMICALS = "chemicals"
    DOCUMENTS = "documents"
    GIFTS = "gifts"
    OTHER = "other"

    @property
    def ordinal(self) -> int:
        """Zero-based position in declaration order."""
        return list(ProductCategory).index(self)

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class HiddenFlags(IntFlag):
    """Detectable properties that are not printed on the label."""

    NONE = 0
    METALLIC = 1  # magnetic detector
    RADIOACTIVE = 2  # radiation detector
    CHEMICAL = 4  # chemical detector
    FAKE_LABEL = 8  # verification data does not match the label

    @property
    def has_metallic(self) -> bool:
        return bool(self & HiddenFlags.METALLIC)

    @property
    def has_radioactive(self) -> bool:
        return bool(self & HiddenFlags.RADIOACTIVE)

    @property
    def has_chemical(self) -> bool:
        return bool(self & HiddenFlags.CHEMICAL)

    @property
    def has_fake_label(self) -> bool:
        return bool(self & HiddenFlags.FAKE_LABEL)

    def members(self) -> list[HiddenFlags]:
        """Individual flags set in this value, in declaration order."""
        return [
            flag
            for flag in (
                HiddenFlags.METALLIC,
                HiddenFlags.RADIOACTIVE,
                HiddenFlags.CHEMICAL,
                HiddenFlags.FAKE_LABEL,
            )
            if self & flag
        ]

    def label(self) -> str:
        """Readable form, e.g. ``"Metallic|Chemical"`` or ``"None"``."""
        names = [flag.name.replace("_", " ").title().replace(" ", "") for flag in self.members()]
        return "|".join(names) if names else "None"


class Tint(BaseModel):
    """RGB colour with channels in [0, 1]."""

    model_config = ConfigDict(frozen=True)

    r: float = Field(default=1.0, ge=0, le=1)
    g: float = Field(default=1.0, ge=0, le=1)
    b: float = Field(default=1.0, ge=0, le=1)

    def to_hex(self) -> str:
        return "#{:02X}{:02X}{:02X}".format(
            round(self.r * 255), round(self.g * 255), round(self.b * 255)
        )


def compute_signature(
    destination: str,
    category: ProductCategory,
    weight_kg: float,
    price_usd: int,
) -> str:
    """Deterministic signature of the official label fields.

    The weight is formatted to one decimal so values that round to the same
    label produce the same signature.
    """
    payload = f"{destination}|{category.ordinal}|{weight_kg:.1f}|{price_usd}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:8].upper()


class VerificationRecord(BaseModel):
    """Authoritative label data used to detect a falsified visible label."""

    model_config = ConfigDict(frozen=True)

    official_destination: str
    official_category: ProductCategory
    official_declared_weight_kg: float = Field(..., ge=0)
    official_declared_price_usd: int = Field(..., ge=0)
    signature: str

    @classmethod
    def create(
        cls,
        destination: str,
        category: ProductCategory,
        weight_kg: float,
        price_usd: int,
    ) -> VerificationRecord:
        """Build a record whose signature matches its fields."""
        return cls(
            official_destination=destination,
            official_category=category,
            official_declared_weight_kg=weight_kg,
            official_declared_price_usd=price_usd,
            signature=compute_signature(destination, category, weight_kg, price_usd),
        )

    def with_changes(self, **changes: Any) -> VerificationRecord:
        """Return a copy with some official fields replaced and a fresh signature."""
        fields = {
            "destination": self.official_destination,
            "category": self.official_category,
            "weight_kg": self.official_declared_weight_kg,
            "price_usd": self.official_declared_price_usd,
        }
        unknown = set(changes) - set(fields)
        if unknown:
            raise TypeError(f"Unknown verification fields: {', '.join(sorted(unknown))}")
        fields.update(changes)
        return VerificationRecord.create(**fields)

    def expected_signature(self) -> str:
        return compute_signature(
            self.official_destination,
            self.official_category,
            self.official_declared_weight_kg,
            self.official_declared_price_usd,
        )

    @property
    def signature_valid(self) -> bool:
        return self.signature == self.expected_signature()


class ItemRecord(BaseModel):
    """A parcel as produced at spawn time.

    Records are immutable snapshots: the scanner, the scale and the
    acceptance station all read the same instance.
    """

    model_config = ConfigDict(frozen=True)

    item_id: str = Field(..., description="Short unique identifier")
    destination: str = Field(..., description="Destination printed on the label")
    category: ProductCategory = Field(..., description="Declared product type")
    declared_weight_kg: float = Field(..., ge=0, description="Weight printed on the label")
    real_weight_kg: float = Field(..., ge=0.1, description="Weight measured on the scale")
    declared_price_usd: int = Field(..., ge=0, description="Price printed on the label")
    hidden_flags: HiddenFlags = Field(default=HiddenFlags.NONE)
    barcode: str = Field(default="", description="Read by the scanner")
    display_name: str = Field(default="", description="Product name shown to the player")
    tint: Tint = Field(default_factory=Tint)
    verification: VerificationRecord

    @property
    def weight_discrepancy_kg(self) -> float:
        """Absolute difference between real and declared weight."""
        return abs(self.real_weight_kg - self.declared_weight_kg)

    @property
    def is_fake_label(self) -> bool:
        return self.hidden_flags.has_fake_label
