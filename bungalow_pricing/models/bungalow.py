"""Bungalow (rentable unit) models."""
from __future__ import annotations

import enum
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bungalow_pricing.db.base import Base
from bungalow_pricing.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from bungalow_pricing.models.pricing import PriceRule
    from bungalow_pricing.models.reservation import Reservation


class BungalowStatus(str, enum.Enum):
    """Whether a unit is offered for booking."""

    ACTIVE = "active"
    PASSIVE = "passive"


class Bungalow(TimestampMixin, Base):
    """A rentable unit with its nightly rate."""

    __tablename__ = "bungalows"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    price_includes_tax: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    capacity: Mapped[int | None] = mapped_column(Integer())
    included_guests: Mapped[int] = mapped_column(Integer(), default=2, nullable=False)
    status: Mapped[BungalowStatus] = mapped_column(
        Enum(BungalowStatus), default=BungalowStatus.ACTIVE, nullable=False
    )

    reservations: Mapped[list["Reservation"]] = relationship(
        "Reservation", back_populates="bungalow", cascade="all, delete-orphan"
    )
    price_rules: Mapped[list["PriceRule"]] = relationship(
        "PriceRule", back_populates="bungalow", cascade="all, delete-orphan"
    )
