"""Evaluation results."""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from parcel_inspection.models.rules import Comparator


class ViolationKind(str, Enum):
    """Which rule a violation came from."""

    DESTINATION_NOT_ALLOWED = "destination_not_allowed"
    DESTINATION_FORBIDDEN = "destination_forbidden"
    CATEGORY_NOT_ALLOWED = "category_not_allowed"
    CATEGORY_FORBIDDEN = "category_forbidden"
    PRICE = "price"
    DECLARED_WEIGHT = "declared_weight"
    REAL_WEIGHT = "real_weight"
    WEIGHT_CONSISTENCY = "weight_consistency"
    HIDDEN_ATTRIBUTE = "hidden_attribute"
    LABEL_MISMATCH = "label_mismatch"


class Violation(BaseModel):
    """One failed rule, with enough data to reproduce the check."""

    model_config = ConfigDict(frozen=True)

    kind: ViolationKind
    actual: Any = Field(..., description="Value found on the parcel")
    expected: Any = Field(..., description="Value or threshold required by the rule")
    comparator: Comparator | None = Field(
        default=None, description="Operator used for numeric checks"
    )
    message: str


class Verdict(BaseModel):
    """Accept/reject decision with every violation, in evaluation order.

    Unpacks as ``(accepted, violations)``:

        accepted, violations = evaluate(item, rules)
    """

    model_config = ConfigDict(frozen=True)

    accepted: bool
    violations: tuple[Violation, ...] = ()

    def __iter__(self) -> Iterator[Any]:  # type: ignore[override]
        yield self.accepted
        yield self.violations

    @property
    def kinds(self) -> list[ViolationKind]:
        return [v.kind for v in self.violations]

    @property
    def reasons(self) -> list[str]:
        return [v.message for v in self.violations]
