"""Procedural generation of parcel records."""

from __future__ import annotations

import colorsys
import logging

from parcel_inspection.config import ItemGenerationConfig
from parcel_inspection.generation.random_source import RandomSource
from parcel_inspection.models.item import (
    HiddenFlags,
    ItemRecord,
    ProductCategory,
    Tint,
    VerificationRecord,
)

logger = logging.getLogger(__name__)

# Pastel tint saturation and value
TINT_SATURATION = 0.45
TINT_VALUE = 0.95


class ItemRecordGenerator:
    """Generates randomized, self-consistent parcel records.

    The record draws its label, real weight and hidden flags from the
    configured distributions. When the FakeLabel flag is drawn, the
    verification record is falsified: the official destination always
    differs from the label, and category, weight and price each differ with
    their own probability.

    Example:
        ```python
        generator = ItemRecordGenerator()
        item = generator.generate(RandomSource(seed=7))
        ```
    """

    def __init__(self, config: ItemGenerationConfig | None = None):
        self.config = config or ItemGenerationConfig()

    def generate(self, rng: RandomSource) -> ItemRecord:
        """Generate one parcel record.

        Args:
            rng: Random source owned by the caller's session

        Returns:
            A new ItemRecord

        Raises:
            ConfigurationError: If the configuration cannot be sampled
        """
        config = self.config
        config.check()

        with rng.exclusive():
            destination = rng.choice(config.destinations)
            category = rng.choice(list(config.category_pool))
            display_name = rng.choice(config.category_pool[category])

            declared = round(rng.uniform(*config.declared_weight_range_kg), 1)
            price = rng.randint(*config.price_range_usd)

            noise = self._sample_noise(rng)
            real = round(max(config.min_real_weight_kg, declared + noise), 1)
            # Rounding can undercut the floor when it is not a multiple of 0.1
            real = max(real, config.min_real_weight_kg)

            flags = self._sample_flags(rng, category)

            verification = VerificationRecord.create(destination, category, declared, price)
            if flags.has_fake_label:
                verification = self._falsify(rng, verification)

            tint = self._pastel(rng)
            barcode = f"BC-{rng.randint(*config.barcode_range)}"
            item_id = rng.hex_token(8)

        item = ItemRecord(
            item_id=item_id,
            destination=destination,
            category=category,
            declared_weight_kg=declared,
            real_weight_kg=real,
            declared_price_usd=price,
            hidden_flags=flags,
            barcode=barcode,
            display_name=display_name,
            tint=tint,
            verification=verification,
        )
        logger.debug(
            f"Generated item {item.item_id}: {display_name} to {destination}, "
            f"flags={flags.label()}"
        )
        return item

    def _sample_noise(self, rng: RandomSource) -> float:
        """Draw real-weight noise from the tiered distribution."""
        tiers = self.config.weight_noise_tiers
        roll = rng.value()
        cumulative = 0.0
        selected = tiers[-1]
        for tier in tiers:
            cumulative += tier.probability
            if roll < cumulative:
                selected = tier
                break

        if selected.low == selected.high:
            return selected.low
        return rng.uniform(selected.low, selected.high)

    def _sample_flags(self, rng: RandomSource, category: ProductCategory) -> HiddenFlags:
        """Draw hidden flags, then apply category bias.

        Every trial is drawn regardless of category so the number of draws
        per item is fixed.
        """
        config = self.config
        metallic = rng.chance(config.p_metallic)
        radioactive = rng.chance(config.p_radioactive)
        chemical = rng.chance(config.p_chemical)
        fake_label = rng.chance(config.p_fake_label)

        flags = HiddenFlags.NONE
        if metallic or category in config.metallic_categories:
            flags |= HiddenFlags.METALLIC
        if radioactive and category not in config.radioactive_exempt_categories:
            flags |= HiddenFlags.RADIOACTIVE
        if chemical or category in config.chemical_categories:
            flags |= HiddenFlags.CHEMICAL
        if fake_label:
            flags |= HiddenFlags.FAKE_LABEL
        return flags

    def _falsify(self, rng: RandomSource, record: VerificationRecord) -> VerificationRecord:
        """Make the official data diverge from the visible label."""
        config = self.config
        changes: dict = {}

        other_destinations = [
            d for d in dict.fromkeys(config.destinations) if d != record.official_destination
        ]
        changes["destination"] = rng.choice(other_destinations)

        if rng.chance(config.p_fake_category):
            other_categories = [c for c in config.category_pool if c != record.official_category]
            if other_categories:
                changes["category"] = rng.choice(other_categories)

        if rng.chance(config.p_fake_weight):
            offset = config.fake_weight_offset_kg if rng.chance(0.5) else -config.fake_weight_offset_kg
            weight = record.official_declared_weight_kg + offset
            changes["weight_kg"] = round(max(config.min_real_weight_kg, weight), 1)

        if rng.chance(config.p_fake_price):
            offset = config.fake_price_offset_usd if rng.chance(0.5) else -config.fake_price_offset_usd
            changes["price_usd"] = max(0, record.official_declared_price_usd + offset)

        return record.with_changes(**changes)

    @staticmethod
    def _pastel(rng: RandomSource) -> Tint:
        r, g, b = colorsys.hsv_to_rgb(rng.value(), TINT_SATURATION, TINT_VALUE)
        return Tint(r=r, g=g, b=b)


def generate_item(
    rng: RandomSource,
    config: ItemGenerationConfig | None = None,
) -> ItemRecord:
    """Generate one parcel record with the given (or default) configuration."""
    return ItemRecordGenerator(config).generate(rng)
