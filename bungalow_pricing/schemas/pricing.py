"""Pricing schema definitions."""

from __future__ import annotations

import datetime
import uuid
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from bungalow_pricing.services.pricing_types import (
    AvailabilityStatus,
    ExtraSelection,
    LineCategory,
    QuoteRequest,
)


class ExtraSelectionPayload(BaseModel):
    """Requested add-on and quantity."""

    code: str = Field(min_length=1)
    qty: int = Field(default=1, ge=1)


class QuoteRequestPayload(BaseModel):
    """Input payload for generating a stay quote."""

    bungalow_id: uuid.UUID
    check_in: datetime.date
    check_out: datetime.date
    guests: int = Field(default=1, ge=1)
    extras: list[ExtraSelectionPayload] = Field(default_factory=list)

    def to_request(self) -> QuoteRequest:
        return QuoteRequest(
            unit_id=self.bungalow_id,
            check_in=self.check_in,
            check_out=self.check_out,
            guests=self.guests,
            extras=tuple(ExtraSelection(e.code, e.qty) for e in self.extras),
        )


class QuoteLineRead(BaseModel):
    """Individual line item within a quote."""

    label: str
    amount: Decimal
    category: LineCategory
    nights: list[datetime.date]
    rule_id: uuid.UUID | None = None

    model_config = ConfigDict(from_attributes=True)


class QuoteRead(BaseModel):
    """Aggregated pricing response."""

    unit_id: uuid.UUID
    check_in: datetime.date
    check_out: datetime.date
    nights: int
    guests: int
    lines: list[QuoteLineRead]
    base_amount: Decimal
    extras_amount: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    tax_rate: Decimal
    tax_inclusive: bool
    total_amount: Decimal
    clamped_nights: list[datetime.date]

    model_config = ConfigDict(from_attributes=True)


class AvailabilityRead(BaseModel):
    """Availability outcome for a date range."""

    unit_id: uuid.UUID
    start: datetime.date | None
    end: datetime.date | None
    status: AvailabilityStatus
    reason: str | None = None
    blocked_dates: list[datetime.date]

    model_config = ConfigDict(from_attributes=True)
