"""Procedural generation of daily rule sets."""

from __future__ import annotations

import logging

from parcel_inspection.config import DayRuleConfig
from parcel_inspection.generation.random_source import RandomSource
from parcel_inspection.models.item import HiddenFlags, ProductCategory
from parcel_inspection.models.rules import (
    AttributeBanRule,
    CategoryRule,
    Comparator,
    DestinationRule,
    LabelRule,
    PriceRule,
    ProcessRule,
    RuleSet,
    WeightRule,
)

logger = logging.getLogger(__name__)

# FakeLabel is caught through label verification, never through a ban
BANNABLE_FLAGS = (HiddenFlags.METALLIC, HiddenFlags.RADIOACTIVE, HiddenFlags.CHEMICAL)

RULE_CATEGORIES = tuple(c for c in ProductCategory if c != ProductCategory.UNDEFINED)


class DayRuleGenerator:
    """Generates the rule set for one day.

    Every sub-rule is gated by its own probability from DayRuleConfig, so any
    combination of active and inactive rules is possible, including a day
    with no rules at all.
    """

    def __init__(self, config: DayRuleConfig | None = None):
        self.config = config or DayRuleConfig()

    def generate(self, rng: RandomSource) -> RuleSet:
        """Generate a rule set.

        Raises:
            ConfigurationError: If the configuration cannot be sampled
        """
        config = self.config
        config.check()

        with rng.exclusive():
            rules = RuleSet(
                destination_rule=self._destination_rule(rng),
                category_rule=self._category_rule(rng),
                weight_rule=self._weight_rule(rng),
                price_rule=self._price_rule(rng),
                attribute_ban_rule=self._attribute_ban_rule(rng),
                label_rule=LabelRule(enabled=rng.chance(config.p_label_rule)),
                process_rule=self._process_rule(rng),
                max_belt_buffer=config.max_belt_buffer,
                day_time_seconds=rng.randint(*config.day_time_range_seconds),
                max_stations_per_item=config.max_stations_per_item,
                designer_notes=config.designer_notes,
            )

        logger.debug(f"Generated rule set: {rules.model_dump_json()}")
        return rules

    def _destination_rule(self, rng: RandomSource) -> DestinationRule:
        config = self.config
        pool = list(dict.fromkeys(config.destinations))
        whitelist_mode = False
        allowed: list[str] = []
        forbidden: list[str] = []

        if rng.chance(config.p_destination_whitelist):
            whitelist_mode = True
            allowed = rng.pick_distinct(pool, config.destination_whitelist_size)
        else:
            if rng.chance(config.p_forbid_two_destinations):
                forbid_count = 2
            elif rng.chance(config.p_forbid_one_destination):
                forbid_count = 1
            else:
                forbid_count = 0
            if forbid_count:
                forbidden = rng.pick_distinct(pool, forbid_count)

        require_scan: list[str] = []
        if rng.chance(config.p_require_scan):
            require_scan = rng.pick_distinct(pool, config.require_scan_count)

        return DestinationRule(
            forbidden_destinations=tuple(forbidden),
            whitelist_mode=whitelist_mode,
            allowed_destinations=tuple(allowed),
            require_scan_for_destinations=tuple(require_scan),
        )

    def _category_rule(self, rng: RandomSource) -> CategoryRule:
        config = self.config
        if rng.chance(config.p_category_whitelist):
            return CategoryRule(
                whitelist_mode=True,
                allowed=tuple(rng.pick_distinct(RULE_CATEGORIES, config.category_whitelist_size)),
            )
        if rng.chance(config.p_category_forbid):
            return CategoryRule(
                forbidden=tuple(rng.pick_distinct(RULE_CATEGORIES, config.category_forbid_count)),
            )
        return CategoryRule()

    def _weight_rule(self, rng: RandomSource) -> WeightRule:
        config = self.config
        fields: dict = {}

        if rng.chance(config.p_check_declared_weight):
            fields["check_declared"] = True
            fields["declared_comparator"] = self._weight_direction(rng)
            fields["declared_kg"] = self._weight_threshold(rng)

        if rng.chance(config.p_check_real_weight):
            fields["check_real"] = True
            fields["real_comparator"] = self._weight_direction(rng)
            fields["real_kg"] = self._weight_threshold(rng)

        if fields.get("check_declared") and fields.get("check_real"):
            if rng.chance(config.p_weight_consistency):
                fields["require_consistency"] = True
                fields["max_allowed_diff_kg"] = config.default_max_allowed_diff_kg

        return WeightRule(**fields)

    def _weight_direction(self, rng: RandomSource) -> Comparator:
        if rng.chance(self.config.p_weight_less_equal):
            return Comparator.LESS_EQUAL
        return Comparator.GREATER_EQUAL

    def _weight_threshold(self, rng: RandomSource) -> float:
        """Uniform threshold snapped to the configured step."""
        step = self.config.weight_threshold_step_kg
        raw = rng.uniform(*self.config.weight_threshold_range_kg)
        return round(round(raw / step) * step, 3)

    def _price_rule(self, rng: RandomSource) -> PriceRule:
        config = self.config
        if not rng.chance(config.p_price_rule):
            return PriceRule()
        comparator = (
            Comparator.LESS_EQUAL
            if rng.chance(config.p_price_less_equal)
            else Comparator.GREATER_EQUAL
        )
        return PriceRule(
            enabled=True,
            comparator=comparator,
            usd=rng.randint(*config.price_threshold_range_usd),
        )

    def _attribute_ban_rule(self, rng: RandomSource) -> AttributeBanRule:
        config = self.config
        if not rng.chance(config.p_attribute_ban):
            return AttributeBanRule()
        count = 1 if rng.chance(config.p_ban_single_flag) else 2
        banned = HiddenFlags.NONE
        for flag in rng.pick_distinct(BANNABLE_FLAGS, count):
            banned |= flag
        return AttributeBanRule(forbidden_hidden_flags=banned)

    def _process_rule(self, rng: RandomSource) -> ProcessRule:
        config = self.config
        fields: dict = {
            "require_weigh_all": rng.chance(config.p_require_weigh_all),
            "require_scan_all": rng.chance(config.p_require_scan_all),
            "require_magnetic_check": rng.chance(config.p_require_magnetic_check),
            "require_radiation_check": rng.chance(config.p_require_radiation_check),
            "require_chemical_check": rng.chance(config.p_require_chemical_check),
            "if_electronics_require_magnet": rng.chance(config.p_if_electronics_require_magnet),
            "if_medical_require_chemical": rng.chance(config.p_if_medical_require_chemical),
            "if_real_heavier_than_declared_require_radiation": rng.chance(
                config.p_if_real_heavier_require_radiation
            ),
        }
        if rng.chance(config.p_if_international_require_scan):
            fields["if_international_require_scan"] = True
            fields["domestic_destinations"] = config.domestic_destinations
        return ProcessRule(**fields)


def generate_rule_set(
    rng: RandomSource,
    config: DayRuleConfig | None = None,
) -> RuleSet:
    """Generate one day's rule set with the given (or default) configuration."""
    return DayRuleGenerator(config).generate(rng)
