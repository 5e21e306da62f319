"""Engine configuration.

Generation parameters are plain pydantic models so they can be built directly
in code or tests. `Settings` loads them, together with application options,
from environment variables using pydantic-settings.

## Environment Variables

- SEED: Seed for the session RandomSource (default: OS entropy)
- LOG_LEVEL: Logging level for the CLI (default: INFO)
- DEBUG: Enable debug mode (default: false)
- ITEM_GENERATION__*, DAY_RULES__*, ECONOMY__*: override any generation
  parameter, e.g. ``ITEM_GENERATION__P_FAKE_LABEL=0.25``

## Example .env file

```
SEED=1234
LOG_LEVEL=DEBUG
DAY_RULES__P_PRICE_RULE=0.8
ITEM_GENERATION__PRICE_RANGE_USD=[50, 400]
```

Probabilities are bounded to [0, 1] at construction. Cross-field problems
(inverted ranges, empty pools) are reported by ``check()``, which the
generators call on every ``generate`` so a malformed configuration fails at
the call site.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from parcel_inspection.errors import ConfigurationError
from parcel_inspection.models.item import ProductCategory

DESTINATIONS: tuple[str, ...] = (
    "Paris", "Madrid", "Rome", "Berlin", "Lisbon", "Vienna", "Prague",
    "Istanbul", "Dublin", "Warsaw", "Budapest", "Athens", "Copenhagen",
    "Stockholm", "Oslo", "Zurich", "Brussels", "Amsterdam", "London",
)

CATEGORY_NAMES: dict[ProductCategory, tuple[str, ...]] = {
    ProductCategory.FOOD: ("Canned Goods", "Snack Box", "Dry Pasta", "Tea Assortment", "Coffee Beans"),
    ProductCategory.MEDICAL: ("Bandages", "Saline Kits", "Syringe Packs", "Gloves", "Masks"),
    ProductCategory.ELECTRONICS: ("Electronic Parts", "PC Components", "Phone Chargers", "Batteries", "Sensors"),
    ProductCategory.MACHINERY: ("Gear Set", "Spare Bolts", "Hydraulic Valves", "Bearings", "Shaft Kit"),
    ProductCategory.CHEMICALS: ("Cleaning Solvent", "Lab Reagents", "Paint Thinner", "Adhesive Set", "Resin Kit"),
    ProductCategory.DOCUMENTS: ("Contracts", "Blueprints", "Forms", "Passports", "Certificates"),
    ProductCategory.GIFTS: ("Gift Box", "Souvenir Pack", "Toy Bundle", "Decor Set", "Board Game"),
    ProductCategory.OTHER: ("Misc. Tools", "Household Items", "Craft Supplies", "Stationery", "Accessories"),
}


def _check_range(problems: list[str], name: str, bounds: tuple[float, float]) -> None:
    low, high = bounds
    if low > high:
        problems.append(f"{name} has min {low} > max {high}")


class WeightNoiseTier(BaseModel):
    """One tier of the real-weight noise distribution.

    With ``probability`` the noise is drawn uniformly from [low, high].
    A tier with ``low == high`` yields that constant without a draw.
    """

    model_config = ConfigDict(frozen=True)

    probability: float = Field(..., ge=0, le=1)
    low: float = 0.0
    high: float = 0.0


DEFAULT_NOISE_TIERS: tuple[WeightNoiseTier, ...] = (
    WeightNoiseTier(probability=0.70, low=0.0, high=0.0),  # honest
    WeightNoiseTier(probability=0.20, low=-0.3, high=0.3),  # scale jitter
    WeightNoiseTier(probability=0.10, low=-2.0, high=4.0),  # anomaly
)


class ItemGenerationConfig(BaseModel):
    """Parameters for ItemRecordGenerator."""

    model_config = ConfigDict(frozen=True)

    destinations: tuple[str, ...] = DESTINATIONS
    category_pool: dict[ProductCategory, tuple[str, ...]] = Field(
        default_factory=lambda: dict(CATEGORY_NAMES),
        description="Categories that can be generated and their display names",
    )

    declared_weight_range_kg: tuple[float, float] = (0.5, 15.0)
    price_range_usd: tuple[int, int] = (10, 800)
    weight_noise_tiers: tuple[WeightNoiseTier, ...] = DEFAULT_NOISE_TIERS
    min_real_weight_kg: float = Field(default=0.1, gt=0)

    # Hidden flag base rates
    p_metallic: float = Field(default=0.35, ge=0, le=1)
    p_radioactive: float = Field(default=0.05, ge=0, le=1)
    p_chemical: float = Field(default=0.20, ge=0, le=1)
    p_fake_label: float = Field(default=0.12, ge=0, le=1)

    # Category bias
    metallic_categories: frozenset[ProductCategory] = frozenset(
        {ProductCategory.ELECTRONICS, ProductCategory.MACHINERY}
    )
    radioactive_exempt_categories: frozenset[ProductCategory] = frozenset(
        {ProductCategory.FOOD, ProductCategory.GIFTS}
    )
    chemical_categories: frozenset[ProductCategory] = frozenset({ProductCategory.CHEMICALS})

    # Falsified verification data (destination always differs)
    p_fake_category: float = Field(default=0.5, ge=0, le=1)
    p_fake_weight: float = Field(default=0.5, ge=0, le=1)
    p_fake_price: float = Field(default=0.5, ge=0, le=1)
    fake_weight_offset_kg: float = Field(default=1.0, ge=0)
    fake_price_offset_usd: int = Field(default=100, ge=0)

    barcode_range: tuple[int, int] = (100000, 999999)

    def problems(self) -> list[str]:
        """List every cross-field problem; empty when the config is usable."""
        problems: list[str] = []
        if not self.destinations:
            problems.append("destination pool is empty")
        if not self.category_pool:
            problems.append("category pool is empty")
        for category, names in self.category_pool.items():
            if not names:
                problems.append(f"category {category.value} has no display names")
        _check_range(problems, "declared_weight_range_kg", self.declared_weight_range_kg)
        _check_range(problems, "price_range_usd", self.price_range_usd)
        _check_range(problems, "barcode_range", self.barcode_range)
        if self.declared_weight_range_kg[0] < 0:
            problems.append("declared_weight_range_kg must not be negative")
        if self.price_range_usd[0] < 0:
            problems.append("price_range_usd must not be negative")
        if not self.weight_noise_tiers:
            problems.append("weight_noise_tiers is empty")
        else:
            total = sum(tier.probability for tier in self.weight_noise_tiers)
            if abs(total - 1.0) > 1e-6:
                problems.append(f"weight_noise_tiers probabilities sum to {total}, expected 1")
            for index, tier in enumerate(self.weight_noise_tiers):
                _check_range(problems, f"weight_noise_tiers[{index}]", (tier.low, tier.high))
        if self.p_fake_label > 0 and len(set(self.destinations)) < 2:
            problems.append("fake labels need at least two distinct destinations")
        return problems

    def check(self) -> None:
        """Raise ConfigurationError if the config cannot drive generation."""
        problems = self.problems()
        if problems:
            raise ConfigurationError(problems, component="item generation")


class DayRuleConfig(BaseModel):
    """Probability gates and ranges for DayRuleGenerator."""

    model_config = ConfigDict(frozen=True)

    destinations: tuple[str, ...] = DESTINATIONS

    # Destination
    p_destination_whitelist: float = Field(default=0.30, ge=0, le=1)
    destination_whitelist_size: int = Field(default=3, ge=1)
    p_forbid_two_destinations: float = Field(default=0.50, ge=0, le=1)
    p_forbid_one_destination: float = Field(default=0.20, ge=0, le=1)
    p_require_scan: float = Field(default=0.35, ge=0, le=1)
    require_scan_count: int = Field(default=2, ge=1)

    # Category
    p_category_whitelist: float = Field(default=0.25, ge=0, le=1)
    category_whitelist_size: int = Field(default=2, ge=1)
    p_category_forbid: float = Field(default=0.35, ge=0, le=1)
    category_forbid_count: int = Field(default=1, ge=1)

    # Weight
    p_check_declared_weight: float = Field(default=0.50, ge=0, le=1)
    p_check_real_weight: float = Field(default=0.70, ge=0, le=1)
    p_weight_less_equal: float = Field(default=0.5, ge=0, le=1)
    weight_threshold_range_kg: tuple[float, float] = (4.0, 12.0)
    weight_threshold_step_kg: float = Field(default=0.5, gt=0)
    p_weight_consistency: float = Field(default=0.45, ge=0, le=1)
    default_max_allowed_diff_kg: float = Field(default=1.0, ge=0)

    # Price
    p_price_rule: float = Field(default=0.45, ge=0, le=1)
    p_price_less_equal: float = Field(default=0.65, ge=0, le=1)
    price_threshold_range_usd: tuple[int, int] = (150, 699)

    # Hidden attributes
    p_attribute_ban: float = Field(default=0.40, ge=0, le=1)
    p_ban_single_flag: float = Field(default=0.5, ge=0, le=1)

    # Label verification
    p_label_rule: float = Field(default=0.0, ge=0, le=1)

    # Station requirements
    p_require_weigh_all: float = Field(default=0.35, ge=0, le=1)
    p_require_scan_all: float = Field(default=0.30, ge=0, le=1)
    p_require_magnetic_check: float = Field(default=0.25, ge=0, le=1)
    p_require_radiation_check: float = Field(default=0.20, ge=0, le=1)
    p_require_chemical_check: float = Field(default=0.25, ge=0, le=1)
    p_if_electronics_require_magnet: float = Field(default=0.45, ge=0, le=1)
    p_if_medical_require_chemical: float = Field(default=0.45, ge=0, le=1)
    p_if_real_heavier_require_radiation: float = Field(default=0.30, ge=0, le=1)
    p_if_international_require_scan: float = Field(default=0.35, ge=0, le=1)
    domestic_destinations: tuple[str, ...] = ("Paris",)

    # Tuning
    day_time_range_seconds: tuple[int, int] = (75, 100)
    max_belt_buffer: int = Field(default=6, ge=0)
    max_stations_per_item: int = Field(default=0, ge=0)
    designer_notes: str = "Auto-generated day."

    def problems(self) -> list[str]:
        problems: list[str] = []
        if not self.destinations:
            problems.append("destination pool is empty")
        _check_range(problems, "weight_threshold_range_kg", self.weight_threshold_range_kg)
        _check_range(problems, "price_threshold_range_usd", self.price_threshold_range_usd)
        _check_range(problems, "day_time_range_seconds", self.day_time_range_seconds)
        if self.day_time_range_seconds[0] < 0:
            problems.append("day_time_range_seconds must not be negative")
        return problems

    def check(self) -> None:
        problems = self.problems()
        if problems:
            raise ConfigurationError(problems, component="day rule")


class EconomyConfig(BaseModel):
    """Scoring and day-length parameters used by the session layer."""

    model_config = ConfigDict(frozen=True)

    reward_per_item: int = Field(default=10, ge=0)
    penalty_per_item: int = Field(default=10, ge=0)
    fee_per_day: int = Field(default=2, ge=0, description="Working fee, multiplied by day number")
    base_day_time_seconds: float = Field(default=180.0, gt=0)
    time_bonus_per_net_correct: float = Field(default=3.0, ge=0)
    max_bonus_per_day: float = Field(default=60.0, ge=0)
    max_items_per_day: int = Field(default=12, ge=0)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Parcel Inspection"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Randomness
    seed: int | None = Field(
        default=None, description="Seed for deterministic sessions (None = OS entropy)"
    )

    # Generation
    item_generation: ItemGenerationConfig = Field(default_factory=ItemGenerationConfig)
    day_rules: DayRuleConfig = Field(default_factory=DayRuleConfig)
    economy: EconomyConfig = Field(default_factory=EconomyConfig)


@lru_cache
def get_settings() -> Settings:
    """Settings shared by the CLI and sessions, read from the environment once.

    Call ``get_settings.cache_clear()`` after changing SEED or a generation
    override to pick up the new values.
    """
    return Settings()


def get_settings_uncached() -> Settings:
    """Read the environment again, bypassing the shared settings."""
    return Settings()
