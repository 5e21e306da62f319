"""Tests for parcel evaluation."""

import pytest

from parcel_inspection.errors import MissingReferenceError
from parcel_inspection.generation import DayRuleGenerator, ItemRecordGenerator, RandomSource
from parcel_inspection.models.item import HiddenFlags, ItemRecord, ProductCategory
from parcel_inspection.models.rules import (
    AttributeBanRule,
    CategoryRule,
    Comparator,
    DestinationRule,
    LabelRule,
    PriceRule,
    RuleSet,
    WeightRule,
)
from parcel_inspection.models.verdict import ViolationKind
from parcel_inspection.rules.evaluator import evaluate


class TestScenarios:
    """End-to-end evaluation scenarios."""

    def test_forbidden_destination_and_price(self, paris_electronics: ItemRecord):
        """Forbidden destination and failed price are both reported, in order."""
        rules = RuleSet(
            destination_rule=DestinationRule(forbidden_destinations=("Paris",)),
            price_rule=PriceRule(enabled=True, comparator=Comparator.LESS_EQUAL, usd=500),
        )
        accepted, violations = evaluate(paris_electronics, rules)

        assert accepted is False
        assert [v.kind for v in violations] == [
            ViolationKind.DESTINATION_FORBIDDEN,
            ViolationKind.PRICE,
        ]
        assert violations[0].actual == "Paris"
        price = violations[1]
        assert (price.actual, price.comparator, price.expected) == (
            600,
            Comparator.LESS_EQUAL,
            500,
        )

    def test_only_consistency_fails(self, make_item):
        """Both weight thresholds pass but the label and scale disagree."""
        rules = RuleSet(
            weight_rule=WeightRule(
                check_declared=True,
                declared_comparator=Comparator.LESS_EQUAL,
                declared_kg=10.0,
                check_real=True,
                real_comparator=Comparator.LESS_EQUAL,
                real_kg=12.0,
                require_consistency=True,
                max_allowed_diff_kg=1.0,
            )
        )
        item = make_item(declared_weight_kg=9.0, real_weight_kg=10.5)
        verdict = evaluate(item, rules)

        assert verdict.accepted is False
        assert verdict.kinds == [ViolationKind.WEIGHT_CONSISTENCY]
        assert verdict.violations[0].actual == pytest.approx(1.5)
        assert verdict.violations[0].expected == 1.0
        assert "exceeds 1.0kg (tolerance 0.0001kg)" in verdict.reasons[0]

    def test_consistency_tolerance_band(self, make_item):
        """A difference at the limit passes, one just past the band fails."""
        rules = RuleSet(
            weight_rule=WeightRule(require_consistency=True, max_allowed_diff_kg=1.0)
        )
        at_limit = make_item(declared_weight_kg=5.0, real_weight_kg=6.0)
        assert evaluate(at_limit, rules).accepted is True

        past_band = make_item(declared_weight_kg=5.0, real_weight_kg=6.1)
        assert evaluate(past_band, rules).kinds == [ViolationKind.WEIGHT_CONSISTENCY]

    def test_real_weight_inclusive_boundary(self, make_item):
        rules = RuleSet(
            weight_rule=WeightRule(
                check_real=True,
                real_comparator=Comparator.LESS_EQUAL,
                real_kg=10.0,
            )
        )
        verdict = evaluate(make_item(real_weight_kg=10.0), rules)
        assert verdict.accepted is True
        assert verdict.violations == ()


class TestDestinationRule:
    """Whitelist and forbidden list are independent checks."""

    def test_destination_outside_whitelist(self, make_item):
        rules = RuleSet(
            destination_rule=DestinationRule(
                whitelist_mode=True,
                allowed_destinations=("Rome", "Oslo", "Athens"),
            )
        )
        verdict = evaluate(make_item(destination="Paris"), rules)
        assert verdict.kinds == [ViolationKind.DESTINATION_NOT_ALLOWED]

    def test_destination_in_whitelist(self, make_item):
        rules = RuleSet(
            destination_rule=DestinationRule(
                whitelist_mode=True,
                allowed_destinations=("Paris", "Oslo"),
            )
        )
        assert evaluate(make_item(destination="Paris"), rules).accepted is True

    def test_empty_whitelist_is_inactive(self, make_item):
        rules = RuleSet(destination_rule=DestinationRule(whitelist_mode=True))
        assert evaluate(make_item(), rules).accepted is True

    def test_whitelist_ignored_when_mode_off(self, make_item):
        rules = RuleSet(destination_rule=DestinationRule(allowed_destinations=("Rome",)))
        assert evaluate(make_item(destination="Paris"), rules).accepted is True

    @pytest.mark.parametrize(
        "forbidden",
        [(), ("Rome",), ("Paris",), ("Paris", "Oslo")],
    )
    def test_whitelist_violation_independent_of_forbidden(self, make_item, forbidden):
        rules = RuleSet(
            destination_rule=DestinationRule(
                whitelist_mode=True,
                allowed_destinations=("Rome", "Oslo"),
                forbidden_destinations=forbidden,
            )
        )
        verdict = evaluate(make_item(destination="Paris"), rules)
        assert ViolationKind.DESTINATION_NOT_ALLOWED in verdict.kinds

    def test_whitelist_and_forbidden_both_reported(self, make_item):
        rules = RuleSet(
            destination_rule=DestinationRule(
                whitelist_mode=True,
                allowed_destinations=("Rome",),
                forbidden_destinations=("Paris",),
            )
        )
        verdict = evaluate(make_item(destination="Paris"), rules)
        assert verdict.kinds == [
            ViolationKind.DESTINATION_NOT_ALLOWED,
            ViolationKind.DESTINATION_FORBIDDEN,
        ]

    def test_require_scan_does_not_reject(self, make_item):
        rules = RuleSet(
            destination_rule=DestinationRule(require_scan_for_destinations=("Paris",))
        )
        assert evaluate(make_item(destination="Paris"), rules).accepted is True


class TestCategoryRule:
    """Same dual check as destinations."""

    def test_category_outside_whitelist(self, make_item):
        rules = RuleSet(
            category_rule=CategoryRule(
                whitelist_mode=True,
                allowed=(ProductCategory.FOOD, ProductCategory.GIFTS),
            )
        )
        verdict = evaluate(make_item(category=ProductCategory.ELECTRONICS), rules)
        assert verdict.kinds == [ViolationKind.CATEGORY_NOT_ALLOWED]
        assert "Electronics" in verdict.reasons[0]

    def test_forbidden_category(self, make_item):
        rules = RuleSet(category_rule=CategoryRule(forbidden=(ProductCategory.CHEMICALS,)))
        verdict = evaluate(make_item(category=ProductCategory.CHEMICALS), rules)
        assert verdict.kinds == [ViolationKind.CATEGORY_FORBIDDEN]
        assert verdict.violations[0].actual == ProductCategory.CHEMICALS


class TestNumericRules:
    """Price and weight checks."""

    def test_disabled_price_rule_is_ignored(self, make_item):
        rules = RuleSet(price_rule=PriceRule(enabled=False, usd=1))
        assert evaluate(make_item(declared_price_usd=800), rules).accepted is True

    def test_price_greater_equal(self, make_item):
        rules = RuleSet(
            price_rule=PriceRule(enabled=True, comparator=Comparator.GREATER_EQUAL, usd=500)
        )
        assert evaluate(make_item(declared_price_usd=500), rules).accepted is True
        assert evaluate(make_item(declared_price_usd=499), rules).kinds == [ViolationKind.PRICE]

    def test_any_comparator_never_fails(self, make_item):
        rules = RuleSet(
            price_rule=PriceRule(enabled=True, comparator=Comparator.ANY, usd=0),
            weight_rule=WeightRule(
                check_declared=True,
                declared_comparator=Comparator.ANY,
                check_real=True,
                real_comparator=Comparator.ANY,
            ),
        )
        item = make_item(declared_weight_kg=14.0, real_weight_kg=14.0, declared_price_usd=800)
        assert evaluate(item, rules).accepted is True

    def test_declared_and_real_weight_failures(self, make_item):
        rules = RuleSet(
            weight_rule=WeightRule(
                check_declared=True,
                declared_comparator=Comparator.GREATER_EQUAL,
                declared_kg=8.0,
                check_real=True,
                real_comparator=Comparator.LESS_EQUAL,
                real_kg=4.0,
            )
        )
        verdict = evaluate(make_item(declared_weight_kg=5.0, real_weight_kg=5.0), rules)
        assert verdict.kinds == [ViolationKind.DECLARED_WEIGHT, ViolationKind.REAL_WEIGHT]
        assert verdict.violations[0].comparator == Comparator.GREATER_EQUAL

    def test_consistency_at_exact_limit_passes(self, make_item):
        """Rounded weights exactly at the limit do not fail on representation error."""
        rules = RuleSet(weight_rule=WeightRule(require_consistency=True, max_allowed_diff_kg=1.0))
        item = make_item(declared_weight_kg=8.1, real_weight_kg=9.1)
        assert evaluate(item, rules).accepted is True


class TestHiddenAttributes:
    """Banned hidden flags."""

    def test_offending_flags_listed(self, make_item):
        rules = RuleSet(
            attribute_ban_rule=AttributeBanRule(
                forbidden_hidden_flags=HiddenFlags.CHEMICAL | HiddenFlags.RADIOACTIVE
            )
        )
        item = make_item(hidden_flags=HiddenFlags.METALLIC | HiddenFlags.CHEMICAL)
        verdict = evaluate(item, rules)
        assert verdict.kinds == [ViolationKind.HIDDEN_ATTRIBUTE]
        assert verdict.violations[0].actual == HiddenFlags.CHEMICAL
        assert "Chemical" in verdict.reasons[0]

    def test_no_overlap_passes(self, make_item):
        rules = RuleSet(
            attribute_ban_rule=AttributeBanRule(forbidden_hidden_flags=HiddenFlags.RADIOACTIVE)
        )
        assert evaluate(make_item(hidden_flags=HiddenFlags.METALLIC), rules).accepted is True


class TestLabelRule:
    """Label verification extension."""

    def test_fake_label_rejected_when_enabled(self, fake_label_item):
        rules = RuleSet(label_rule=LabelRule(enabled=True))
        verdict = evaluate(fake_label_item, rules)
        assert verdict.kinds == [ViolationKind.LABEL_MISMATCH]
        assert verdict.violations[0].actual == ["destination"]

    def test_fake_label_ignored_when_disabled(self, fake_label_item, empty_rules):
        assert evaluate(fake_label_item, empty_rules).accepted is True

    def test_honest_label_passes(self, make_item):
        rules = RuleSet(label_rule=LabelRule(enabled=True))
        assert evaluate(make_item(), rules).accepted is True


class TestEvaluationContract:
    """Ordering, purity and failure modes."""

    def test_empty_rules_accept(self, paris_electronics, empty_rules):
        assert evaluate(paris_electronics, empty_rules).accepted is True

    def test_verdict_unpacks_to_decision_and_violations(self, make_item, empty_rules):
        """Unpacking yields the bool and the violations, not field pairs."""
        rules = RuleSet(destination_rule=DestinationRule(forbidden_destinations=("Paris",)))
        accepted, violations = evaluate(make_item(destination="Paris"), rules)
        assert accepted is False
        assert [v.kind for v in violations] == [ViolationKind.DESTINATION_FORBIDDEN]

        accepted, violations = evaluate(make_item(), empty_rules)
        assert accepted is True
        assert violations == ()

    def test_verdict_serializes_fields(self, make_item, empty_rules):
        dumped = evaluate(make_item(), empty_rules).model_dump()
        assert dumped == {"accepted": True, "violations": ()}

    def test_violation_order_is_fixed(self, fake_label_item):
        rules = RuleSet(
            destination_rule=DestinationRule(
                whitelist_mode=True,
                allowed_destinations=("Rome",),
                forbidden_destinations=("Madrid",),
            ),
            category_rule=CategoryRule(
                whitelist_mode=True,
                allowed=(ProductCategory.GIFTS,),
                forbidden=(ProductCategory.FOOD,),
            ),
            price_rule=PriceRule(enabled=True, comparator=Comparator.GREATER_EQUAL, usd=100),
            weight_rule=WeightRule(
                check_declared=True,
                declared_comparator=Comparator.GREATER_EQUAL,
                declared_kg=5.0,
                check_real=True,
                real_comparator=Comparator.EQUAL,
                real_kg=7.0,
            ),
            attribute_ban_rule=AttributeBanRule(forbidden_hidden_flags=HiddenFlags.FAKE_LABEL),
            label_rule=LabelRule(enabled=True),
        )
        verdict = evaluate(fake_label_item, rules)
        assert verdict.kinds == [
            ViolationKind.DESTINATION_NOT_ALLOWED,
            ViolationKind.DESTINATION_FORBIDDEN,
            ViolationKind.CATEGORY_NOT_ALLOWED,
            ViolationKind.CATEGORY_FORBIDDEN,
            ViolationKind.PRICE,
            ViolationKind.DECLARED_WEIGHT,
            ViolationKind.REAL_WEIGHT,
            ViolationKind.HIDDEN_ATTRIBUTE,
            ViolationKind.LABEL_MISMATCH,
        ]

    def test_evaluation_is_deterministic(self):
        rng = RandomSource(seed=77)
        rule_generator = DayRuleGenerator()
        item_generator = ItemRecordGenerator()
        for _ in range(50):
            rules = rule_generator.generate(rng)
            item = item_generator.generate(rng)
            assert evaluate(item, rules) == evaluate(item, rules)

    def test_generated_pairs_are_consistent(self):
        rng = RandomSource(seed=4321)
        rule_generator = DayRuleGenerator()
        item_generator = ItemRecordGenerator()
        for _ in range(200):
            rules = rule_generator.generate(rng)
            item = item_generator.generate(rng)
            verdict = evaluate(item, rules)
            assert verdict.accepted == (len(verdict.violations) == 0)

    def test_missing_item(self, empty_rules):
        with pytest.raises(MissingReferenceError) as exc_info:
            evaluate(None, empty_rules)
        assert exc_info.value.reference == "item record"

    def test_missing_rule_set(self, make_item):
        with pytest.raises(MissingReferenceError) as exc_info:
            evaluate(make_item(), None)
        assert exc_info.value.reference == "rule set"
