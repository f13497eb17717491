"""Pricing rules and extra service models."""

from __future__ import annotations

import datetime
import enum
import uuid
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bungalow_pricing.db.base import Base
from bungalow_pricing.models.mixins import TimestampMixin

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from bungalow_pricing.models.bungalow import Bungalow


class PriceRuleKind(str, enum.Enum):
    """Labels the purpose of a price rule."""

    BASE = "base"
    SEASON = "season"
    WEEKEND = "weekend"
    HOLIDAY = "holiday"
    CUSTOM = "custom"
    PER_PERSON = "per_person"
    MIN_NIGHTS = "min_nights"


class AmountType(str, enum.Enum):
    """How a rule's amount value is interpreted."""

    FIXED = "fixed"
    PERCENTAGE = "percentage"


class RuleScope(str, enum.Enum):
    """Whether a rule targets every unit or a single one."""

    GLOBAL = "global"
    UNIT = "unit"


class ExtraChargeType(str, enum.Enum):
    """Multiplier applied to an extra service price."""

    FLAT = "flat"
    PER_NIGHT = "per_night"
    PER_GUEST = "per_guest"


class PriceRule(TimestampMixin, Base):
    """Date- and weekday-scoped price adjustment."""

    __tablename__ = "price_rules"
    __table_args__ = (
        CheckConstraint(
            "(scope = 'UNIT' AND bungalow_id IS NOT NULL)"
            " OR (scope = 'GLOBAL' AND bungalow_id IS NULL)",
            name="ck_price_rule_scope",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[PriceRuleKind] = mapped_column(Enum(PriceRuleKind), nullable=False)
    amount_type: Mapped[AmountType] = mapped_column(Enum(AmountType), nullable=False)
    amount_value: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False)
    scope: Mapped[RuleScope] = mapped_column(Enum(RuleScope), nullable=False)
    bungalow_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("bungalows.id", ondelete="CASCADE"), nullable=True
    )
    date_start: Mapped[datetime.date | None] = mapped_column(nullable=True)
    date_end: Mapped[datetime.date | None] = mapped_column(nullable=True)
    weekday_mask: Mapped[int | None] = mapped_column(Integer(), nullable=True)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    bungalow: Mapped["Bungalow | None"] = relationship(
        "Bungalow", back_populates="price_rules"
    )


class ExtraService(TimestampMixin, Base):
    """Optional add-on a guest can book with a stay."""

    __tablename__ = "extra_services"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    charge_type: Mapped[ExtraChargeType] = mapped_column(
        Enum(ExtraChargeType), nullable=False
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
