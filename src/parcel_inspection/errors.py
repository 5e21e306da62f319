"""Exceptions raised by the inspection engine."""

from __future__ import annotations


class InspectionError(Exception):
    """Base exception for inspection engine errors."""


class ConfigurationError(InspectionError):
    """Raised when generation parameters are malformed.

    Generators check their configuration on every call, so a bad range or an
    empty pool is reported at the call site instead of being clamped.
    """

    def __init__(self, problems: list[str], component: str | None = None):
        prefix = f"Invalid {component} configuration" if component else "Invalid configuration"
        super().__init__(f"{prefix}: {'; '.join(problems)}")
        self.problems = problems
        self.component = component


class MissingReferenceError(InspectionError):
    """Raised when an evaluation input is absent."""

    def __init__(self, reference: str):
        super().__init__(f"Cannot evaluate without a {reference}")
        self.reference = reference
