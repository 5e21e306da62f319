"""Pytest fixtures for parcel inspection tests.

This module provides test fixtures that ensure:
1. Settings are never read from a developer's .env or leftover environment
2. Every test gets its own seeded RandomSource
3. Parcels and rule sets can be built field by field for scenario tests
"""

import os

import pytest

# Keep configuration deterministic BEFORE importing application modules
for _var in ("SEED", "LOG_LEVEL", "DEBUG"):
    os.environ.pop(_var, None)

from parcel_inspection.generation import RandomSource
from parcel_inspection.models.item import (
    HiddenFlags,
    ItemRecord,
    ProductCategory,
    VerificationRecord,
)
from parcel_inspection.models.rules import RuleSet


# =============================================================================
# Test Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test to ensure clean state."""
    from parcel_inspection.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def rng() -> RandomSource:
    """Seeded random source."""
    return RandomSource(seed=1234)


# =============================================================================
# Item Fixtures
# =============================================================================


@pytest.fixture
def make_item():
    """Factory for parcels with an honest verification record by default.

    Any ItemRecord field can be overridden. Pass ``verification`` to supply a
    falsified record.
    """

    def _make(**overrides) -> ItemRecord:
        fields = {
            "item_id": "a1b2c3d4",
            "destination": "Paris",
            "category": ProductCategory.ELECTRONICS,
            "declared_weight_kg": 5.0,
            "real_weight_kg": 5.0,
            "declared_price_usd": 100,
            "hidden_flags": HiddenFlags.NONE,
            "barcode": "BC-123456",
            "display_name": "Sensors",
        }
        verification = overrides.pop("verification", None)
        fields.update(overrides)
        if verification is None:
            verification = VerificationRecord.create(
                fields["destination"],
                fields["category"],
                fields["declared_weight_kg"],
                fields["declared_price_usd"],
            )
        return ItemRecord(**fields, verification=verification)

    return _make


@pytest.fixture
def paris_electronics(make_item) -> ItemRecord:
    """Metallic electronics parcel to Paris priced at 600 USD."""
    return make_item(
        destination="Paris",
        category=ProductCategory.ELECTRONICS,
        declared_weight_kg=5.0,
        real_weight_kg=5.0,
        declared_price_usd=600,
        hidden_flags=HiddenFlags.METALLIC,
    )


@pytest.fixture
def fake_label_item(make_item) -> ItemRecord:
    """Parcel whose official destination differs from its label."""
    verification = VerificationRecord.create("Berlin", ProductCategory.FOOD, 2.0, 50)
    return make_item(
        destination="Madrid",
        category=ProductCategory.FOOD,
        declared_weight_kg=2.0,
        real_weight_kg=2.0,
        declared_price_usd=50,
        hidden_flags=HiddenFlags.FAKE_LABEL,
        verification=verification,
    )


# =============================================================================
# Rule Fixtures
# =============================================================================


@pytest.fixture
def empty_rules() -> RuleSet:
    """A day with no active rules."""
    return RuleSet()
