"""Reservation models."""
from __future__ import annotations

import enum
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Date, Enum, ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bungalow_pricing.db.base import Base
from bungalow_pricing.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing only imports
    from bungalow_pricing.models.bungalow import Bungalow


class ReservationStatus(str, enum.Enum):
    """Lifecycle states for reservations."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


BLOCKING_STATUSES = frozenset(
    {
        ReservationStatus.PENDING,
        ReservationStatus.CONFIRMED,
        ReservationStatus.CHECKED_IN,
    }
)


class Reservation(TimestampMixin, Base):
    """A stay booked on a bungalow, check-out exclusive."""

    __tablename__ = "reservations"
    __table_args__ = (
        CheckConstraint("check_in < check_out", name="ck_reservation_dates"),
        Index("ix_reservations_bungalow_dates", "bungalow_id", "check_in", "check_out"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4, unique=True
    )
    bungalow_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("bungalows.id", ondelete="CASCADE"), nullable=False
    )
    check_in: Mapped[date] = mapped_column(Date, nullable=False)
    check_out: Mapped[date] = mapped_column(Date, nullable=False)
    guests: Mapped[int] = mapped_column(Integer(), default=1, nullable=False)
    status: Mapped[ReservationStatus] = mapped_column(
        Enum(ReservationStatus), default=ReservationStatus.PENDING, nullable=False
    )

    bungalow: Mapped["Bungalow"] = relationship(
        "Bungalow", back_populates="reservations"
    )
