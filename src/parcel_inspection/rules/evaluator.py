"""Evaluation of a parcel against the day's rule set.

Evaluation never stops at the first failure: the verdict lists every
violation so the player can be shown all reasons at once. Groups are checked
in a fixed order (destination, category, price, weight, hidden attributes,
label verification) and the order of the violations follows it.
"""

from __future__ import annotations

from parcel_inspection.errors import MissingReferenceError
from parcel_inspection.models.item import HiddenFlags, ItemRecord
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
from parcel_inspection.models.verdict import Verdict, Violation, ViolationKind
from parcel_inspection.rules.comparators import (
    BOUND_TOLERANCE,
    compare_float,
    compare_int,
    describe,
)
from parcel_inspection.rules.inspection import inspect_label


def check_destination(item: ItemRecord, rule: DestinationRule) -> list[Violation]:
    """Whitelist and forbidden list are checked independently."""
    violations: list[Violation] = []

    if rule.whitelist_mode and rule.allowed_destinations:
        if item.destination not in rule.allowed_destinations:
            violations.append(
                Violation(
                    kind=ViolationKind.DESTINATION_NOT_ALLOWED,
                    actual=item.destination,
                    expected=list(rule.allowed_destinations),
                    message=f"Destination '{item.destination}' not in allowed whitelist.",
                )
            )

    if item.destination in rule.forbidden_destinations:
        violations.append(
            Violation(
                kind=ViolationKind.DESTINATION_FORBIDDEN,
                actual=item.destination,
                expected=list(rule.forbidden_destinations),
                message=f"Destination '{item.destination}' is forbidden today.",
            )
        )

    return violations


def check_category(item: ItemRecord, rule: CategoryRule) -> list[Violation]:
    """Same dual check as destinations."""
    violations: list[Violation] = []
    name = item.category.display_name

    if rule.whitelist_mode and rule.allowed:
        if item.category not in rule.allowed:
            violations.append(
                Violation(
                    kind=ViolationKind.CATEGORY_NOT_ALLOWED,
                    actual=item.category,
                    expected=list(rule.allowed),
                    message=f"Category '{name}' not allowed (whitelist).",
                )
            )

    if item.category in rule.forbidden:
        violations.append(
            Violation(
                kind=ViolationKind.CATEGORY_FORBIDDEN,
                actual=item.category,
                expected=list(rule.forbidden),
                message=f"Category '{name}' is forbidden today.",
            )
        )

    return violations


def check_price(item: ItemRecord, rule: PriceRule) -> list[Violation]:
    if not rule.enabled:
        return []
    if compare_int(item.declared_price_usd, rule.comparator, rule.usd):
        return []
    return [
        Violation(
            kind=ViolationKind.PRICE,
            actual=item.declared_price_usd,
            expected=rule.usd,
            comparator=rule.comparator,
            message=(
                f"Price rule failed: {item.declared_price_usd} "
                f"{describe(rule.comparator)} {rule.usd}."
            ),
        )
    ]


def check_weight(item: ItemRecord, rule: WeightRule) -> list[Violation]:
    violations: list[Violation] = []

    if rule.check_declared and not compare_float(
        item.declared_weight_kg, rule.declared_comparator, rule.declared_kg
    ):
        violations.append(
            Violation(
                kind=ViolationKind.DECLARED_WEIGHT,
                actual=item.declared_weight_kg,
                expected=rule.declared_kg,
                comparator=rule.declared_comparator,
                message=(
                    f"Declared weight rule failed: {item.declared_weight_kg}kg "
                    f"{describe(rule.declared_comparator)} {rule.declared_kg}kg."
                ),
            )
        )

    if rule.check_real and not compare_float(
        item.real_weight_kg, rule.real_comparator, rule.real_kg
    ):
        violations.append(
            Violation(
                kind=ViolationKind.REAL_WEIGHT,
                actual=item.real_weight_kg,
                expected=rule.real_kg,
                comparator=rule.real_comparator,
                message=(
                    f"Real weight rule failed: {item.real_weight_kg}kg "
                    f"{describe(rule.real_comparator)} {rule.real_kg}kg."
                ),
            )
        )

    if rule.require_consistency:
        diff = item.weight_discrepancy_kg
        # Fails only beyond max_allowed_diff_kg + BOUND_TOLERANCE
        if not compare_float(diff, Comparator.LESS_EQUAL, rule.max_allowed_diff_kg):
            violations.append(
                Violation(
                    kind=ViolationKind.WEIGHT_CONSISTENCY,
                    actual=round(diff, 3),
                    expected=rule.max_allowed_diff_kg,
                    comparator=Comparator.LESS_EQUAL,
                    message=(
                        f"Weight consistency failed: |real-declared|={diff:.1f}kg "
                        f"exceeds {rule.max_allowed_diff_kg}kg "
                        f"(tolerance {BOUND_TOLERANCE}kg)."
                    ),
                )
            )

    return violations


def check_hidden_attributes(item: ItemRecord, rule: AttributeBanRule) -> list[Violation]:
    offending = HiddenFlags(item.hidden_flags & rule.forbidden_hidden_flags)
    if not offending:
        return []
    return [
        Violation(
            kind=ViolationKind.HIDDEN_ATTRIBUTE,
            actual=offending,
            expected=rule.forbidden_hidden_flags,
            message=f"Hidden attribute banned: {offending.label()}.",
        )
    ]


def check_label(item: ItemRecord, rule: LabelRule) -> list[Violation]:
    if not rule.enabled:
        return []
    inspection = inspect_label(item)
    if inspection.is_ok:
        return []
    return [
        Violation(
            kind=ViolationKind.LABEL_MISMATCH,
            actual=[m.field for m in inspection.mismatches],
            expected=inspection.signature,
            message=f"Barcode mismatch: {inspection.describe()}.",
        )
    ]


def evaluate(item: ItemRecord | None, rule_set: RuleSet | None) -> Verdict:
    """Evaluate a parcel against a rule set.

    Args:
        item: Parcel to evaluate
        rule_set: The day's rules

    Returns:
        Verdict with acceptance and every violation, in evaluation order

    Raises:
        MissingReferenceError: If the item or the rule set is absent
    """
    if item is None:
        raise MissingReferenceError("item record")
    if rule_set is None:
        raise MissingReferenceError("rule set")

    violations: list[Violation] = []
    violations.extend(check_destination(item, rule_set.destination_rule))
    violations.extend(check_category(item, rule_set.category_rule))
    violations.extend(check_price(item, rule_set.price_rule))
    violations.extend(check_weight(item, rule_set.weight_rule))
    violations.extend(check_hidden_attributes(item, rule_set.attribute_ban_rule))
    violations.extend(check_label(item, rule_set.label_rule))

    return Verdict(accepted=not violations, violations=tuple(violations))
