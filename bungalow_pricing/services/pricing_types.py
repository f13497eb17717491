"""Value types shared by the availability and pricing services."""

from __future__ import annotations

import enum
import uuid
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from bungalow_pricing.core.errors import ValidationError
from bungalow_pricing.models.pricing import (
    AmountType,
    ExtraChargeType,
    PriceRuleKind,
    RuleScope,
)
from bungalow_pricing.models.reservation import BLOCKING_STATUSES, ReservationStatus

MONEY_PLACES = Decimal("0.01")
ALL_WEEKDAYS = 0b1111111
_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def to_money(value: Decimal | int | str) -> Decimal:
    return Decimal(value).quantize(MONEY_PLACES, rounding=ROUND_HALF_UP)


def _to_str(value: Decimal) -> str:
    return f"{to_money(value):.2f}"


def weekday_mask(*weekdays: int) -> int:
    """Build a mask from ``date.weekday()`` numbers (0 = Monday)."""
    mask = 0
    for weekday in weekdays:
        if not 0 <= weekday <= 6:
            raise ValueError(f"weekday out of range: {weekday}")
        mask |= 1 << weekday
    return mask


WEEKEND = weekday_mask(5, 6)


class LineCategory(str, enum.Enum):
    """Kinds of quote breakdown lines."""

    BASE = "base"
    RULE = "rule"
    ADJUSTMENT = "adjustment"
    EXTRA = "extra"
    TAX = "tax"


class AvailabilityStatus(str, enum.Enum):
    """Outcome of an availability check."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    INVALID = "invalid"


@dataclass(slots=True, frozen=True)
class Unit:
    """Catalog view of a bungalow as seen by the engine."""

    id: uuid.UUID
    base_price: Decimal
    tax_inclusive: bool = False
    name: str = ""
    capacity: int | None = None
    included_guests: int = 2


@dataclass(slots=True, frozen=True)
class StayInterval:
    """A reservation reduced to the dates it occupies."""

    unit_id: uuid.UUID
    check_in: date
    check_out: date
    status: ReservationStatus = ReservationStatus.CONFIRMED

    def __post_init__(self) -> None:
        if self.check_in >= self.check_out:
            raise ValidationError(
                "Reservation check-out must be after check-in", field="check_out"
            )

    @property
    def blocks(self) -> bool:
        return self.status in BLOCKING_STATUSES

    def nights(self) -> Iterator[date]:
        current = self.check_in
        while current < self.check_out:
            yield current
            current += timedelta(days=1)


@dataclass(slots=True, frozen=True)
class RateRule:
    """Immutable snapshot of a price rule."""

    id: uuid.UUID
    name: str
    kind: PriceRuleKind
    amount_type: AmountType
    amount_value: Decimal
    scope: RuleScope = RuleScope.GLOBAL
    unit_id: uuid.UUID | None = None
    date_start: date | None = None
    date_end: date | None = None
    weekday_mask: int | None = None
    created_at: datetime = _EPOCH
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.scope is RuleScope.UNIT and self.unit_id is None:
            raise ValidationError(
                f"Unit-scoped rule {self.name!r} has no unit", field="unit_id"
            )
        if self.scope is RuleScope.GLOBAL and self.unit_id is not None:
            raise ValidationError(
                f"Global rule {self.name!r} must not reference a unit",
                field="unit_id",
            )
        if self.weekday_mask is not None and not 0 <= self.weekday_mask <= ALL_WEEKDAYS:
            raise ValidationError(
                f"Weekday mask out of range: {self.weekday_mask}",
                field="weekday_mask",
            )
        if (
            self.date_start is not None
            and self.date_end is not None
            and self.date_start > self.date_end
        ):
            raise ValidationError(
                f"Rule {self.name!r} ends before it starts", field="date_end"
            )

    def fingerprint(self) -> tuple[Any, ...]:
        """Values that identify this exact revision of the rule."""
        return (
            str(self.id),
            self.name,
            self.kind.value,
            self.amount_type.value,
            str(self.amount_value),
            self.scope.value,
            str(self.unit_id) if self.unit_id else None,
            self.date_start.isoformat() if self.date_start else None,
            self.date_end.isoformat() if self.date_end else None,
            self.weekday_mask,
            self.created_at.isoformat(),
            self.updated_at.isoformat() if self.updated_at else None,
        )


@dataclass(slots=True, frozen=True)
class ExtraOption:
    """Catalog entry for an add-on service."""

    code: str
    name: str
    price: Decimal
    charge_type: ExtraChargeType = ExtraChargeType.FLAT
    active: bool = True


@dataclass(slots=True, frozen=True)
class ExtraSelection:
    """An add-on requested with a quote."""

    code: str
    quantity: int = 1


@dataclass(slots=True, frozen=True)
class QuoteRequest:
    """Input for :meth:`PricingEngine.calculate_pricing`."""

    unit_id: uuid.UUID
    check_in: date
    check_out: date
    guests: int = 1
    extras: tuple[ExtraSelection, ...] = ()

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days


@dataclass(slots=True, frozen=True)
class QuoteLine:
    """Individual component contributing to a quote."""

    label: str
    amount: Decimal
    category: LineCategory
    nights: tuple[date, ...] = ()
    rule_id: uuid.UUID | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "amount": _to_str(self.amount),
            "category": self.category.value,
            "nights": [night.isoformat() for night in self.nights],
            "rule_id": str(self.rule_id) if self.rule_id else None,
        }


@dataclass(slots=True, frozen=True)
class QuoteResult:
    """Aggregate pricing output for a stay."""

    unit_id: uuid.UUID
    check_in: date
    check_out: date
    nights: int
    guests: int
    base_amount: Decimal
    extras_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    tax_rate: Decimal
    tax_inclusive: bool
    total_amount: Decimal
    lines: tuple[QuoteLine, ...] = ()
    clamped_nights: tuple[date, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Serialize the quote to plain types for responses."""
        return {
            "unit_id": str(self.unit_id),
            "check_in": self.check_in.isoformat(),
            "check_out": self.check_out.isoformat(),
            "nights": self.nights,
            "guests": self.guests,
            "lines": [line.to_dict() for line in self.lines],
            "base_amount": _to_str(self.base_amount),
            "extras_amount": _to_str(self.extras_amount),
            "discount_amount": _to_str(self.discount_amount),
            "tax_amount": _to_str(self.tax_amount),
            "tax_rate": str(self.tax_rate),
            "tax_inclusive": self.tax_inclusive,
            "total_amount": _to_str(self.total_amount),
            "clamped_nights": [night.isoformat() for night in self.clamped_nights],
        }


@dataclass(slots=True, frozen=True)
class AvailabilityResult:
    """Outcome of :meth:`PricingEngine.check_availability`."""

    unit_id: uuid.UUID
    start: date | None
    end: date | None
    status: AvailabilityStatus
    reason: str | None = None
    blocked_dates: tuple[date, ...] = ()

    @property
    def available(self) -> bool:
        return self.status is AvailabilityStatus.AVAILABLE

    @classmethod
    def invalid(
        cls,
        unit_id: uuid.UUID,
        start: date | None,
        end: date | None,
        reason: str,
    ) -> AvailabilityResult:
        return cls(unit_id, start, end, AvailabilityStatus.INVALID, reason=reason)

    @classmethod
    def from_blocked(
        cls,
        unit_id: uuid.UUID,
        start: date,
        end: date,
        blocked: Iterable[date],
    ) -> AvailabilityResult:
        ordered = tuple(sorted(blocked))
        status = (
            AvailabilityStatus.UNAVAILABLE if ordered else AvailabilityStatus.AVAILABLE
        )
        return cls(unit_id, start, end, status, blocked_dates=ordered)
