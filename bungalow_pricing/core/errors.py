"""Error taxonomy raised by the pricing engine."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date


class PricingError(Exception):
    """Base class for all pricing engine failures."""


class ValidationError(PricingError):
    """Malformed input: bad date range, unknown unit, invalid party size."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class ConflictError(PricingError):
    """The requested range overlaps a reservation in a blocking state."""

    def __init__(self, message: str, *, blocked_dates: Iterable[date] = ()) -> None:
        super().__init__(message)
        self.blocked_dates = sorted(set(blocked_dates))


class ComputationError(PricingError):
    """An internal invariant was violated while computing a quote."""


__all__ = ["ComputationError", "ConflictError", "PricingError", "ValidationError"]
