"""Comparison operators shared by every numeric rule.

Integers compare exactly. Floats compare with a small tolerance band because
generated weights are rounded to one decimal and must not fail a boundary
rule through representation error (e.g. ``10.0 <= 10.0`` after arithmetic).
"""

from __future__ import annotations

from parcel_inspection.models.rules import Comparator

# Slack for inclusive bounds (<=, >=)
BOUND_TOLERANCE = 1e-4
# Width of the equality band (==, !=)
EQUALITY_TOLERANCE = 1e-3

_SYMBOLS = {
    Comparator.LESS_EQUAL: "<=",
    Comparator.GREATER_EQUAL: ">=",
    Comparator.EQUAL: "==",
    Comparator.NOT_EQUAL: "!=",
    Comparator.ANY: "(any)",
}


def compare_int(a: int, op: Comparator, b: int) -> bool:
    """Exact integer comparison. ``ANY`` is always true."""
    comparisons = {
        Comparator.LESS_EQUAL: lambda x, y: x <= y,
        Comparator.GREATER_EQUAL: lambda x, y: x >= y,
        Comparator.EQUAL: lambda x, y: x == y,
        Comparator.NOT_EQUAL: lambda x, y: x != y,
    }
    comparison = comparisons.get(op)
    if comparison is None:
        return True
    return comparison(a, b)


def _within_band(x: float, y: float) -> bool:
    # Exact match first: inf - inf is nan
    return x == y or abs(x - y) < EQUALITY_TOLERANCE


def compare_float(a: float, op: Comparator, b: float) -> bool:
    """Float comparison with tolerance. ``ANY`` is always true."""
    comparisons = {
        Comparator.LESS_EQUAL: lambda x, y: x <= y + BOUND_TOLERANCE,
        Comparator.GREATER_EQUAL: lambda x, y: x >= y - BOUND_TOLERANCE,
        Comparator.EQUAL: _within_band,
        Comparator.NOT_EQUAL: lambda x, y: not _within_band(x, y),
    }
    comparison = comparisons.get(op)
    if comparison is None:
        return True
    return comparison(a, b)


def compare(a: int | float, op: Comparator, b: int | float) -> bool:
    """Compare two values, choosing the domain from the operand types.

    Two ints use exact comparison; anything involving a float uses the
    tolerance band.
    """
    if isinstance(a, int) and isinstance(b, int):
        return compare_int(a, op, b)
    return compare_float(float(a), op, float(b))


def describe(op: Comparator) -> str:
    """Symbol for an operator, e.g. ``"<="``."""
    return _SYMBOLS[op]
