"""SQLAlchemy-backed collaborators for the pricing engine."""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bungalow_pricing.models import (
    BLOCKING_STATUSES,
    Bungalow,
    BungalowStatus,
    ExtraService,
    PriceRule,
    Reservation,
)
from bungalow_pricing.services.pricing_types import (
    ExtraOption,
    RateRule,
    StayInterval,
    Unit,
)


def _coerce_utc(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def to_rate_rule(row: PriceRule) -> RateRule:
    return RateRule(
        id=row.id,
        name=row.name,
        kind=row.kind,
        amount_type=row.amount_type,
        amount_value=Decimal(row.amount_value),
        scope=row.scope,
        unit_id=row.bungalow_id,
        date_start=row.date_start,
        date_end=row.date_end,
        weekday_mask=row.weekday_mask,
        created_at=_coerce_utc(row.created_at),  # type: ignore[arg-type]
        updated_at=_coerce_utc(row.updated_at),
    )


def to_unit(row: Bungalow) -> Unit:
    return Unit(
        id=row.id,
        name=row.name,
        base_price=Decimal(row.base_price),
        tax_inclusive=row.price_includes_tax,
        capacity=row.capacity,
        included_guests=row.included_guests,
    )


class SqlReservationStore:
    """Reads blocking reservations with the half-open overlap test."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_blocking_reservations(
        self, unit_id: uuid.UUID, start: date, end: date
    ) -> list[StayInterval]:
        result = await self.session.execute(
            select(
                Reservation.bungalow_id,
                Reservation.check_in,
                Reservation.check_out,
                Reservation.status,
            )
            .where(
                Reservation.bungalow_id == unit_id,
                Reservation.status.in_(list(BLOCKING_STATUSES)),
                Reservation.check_in < end,
                Reservation.check_out > start,
            )
            .order_by(Reservation.check_in)
        )
        return [
            StayInterval(
                unit_id=bungalow_id,
                check_in=check_in,
                check_out=check_out,
                status=status,
            )
            for bungalow_id, check_in, check_out, status in result.all()
        ]


class SqlRuleStore:
    """Loads every active price rule."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def all_active_rules(self) -> list[RateRule]:
        result = await self.session.execute(
            select(PriceRule)
            .where(PriceRule.active.is_(True))
            .order_by(PriceRule.created_at, PriceRule.id)
        )
        return [to_rate_rule(row) for row in result.scalars().all()]


class SqlUnitCatalog:
    """Looks up bookable bungalows; passive ones are treated as unknown."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_unit(self, unit_id: uuid.UUID) -> Unit | None:
        bungalow = await self.session.get(Bungalow, unit_id)
        if bungalow is None or bungalow.status != BungalowStatus.ACTIVE:
            return None
        return to_unit(bungalow)


class SqlExtraCatalog:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_extras(self, codes: Iterable[str]) -> dict[str, ExtraOption]:
        wanted = list(codes)
        if not wanted:
            return {}
        result = await self.session.execute(
            select(ExtraService).where(ExtraService.code.in_(wanted))
        )
        return {
            row.code: ExtraOption(
                code=row.code,
                name=row.name,
                price=Decimal(row.price),
                charge_type=row.charge_type,
                active=row.active,
            )
            for row in result.scalars().all()
        }


__all__ = [
    "SqlExtraCatalog",
    "SqlReservationStore",
    "SqlRuleStore",
    "SqlUnitCatalog",
    "to_rate_rule",
    "to_unit",
]
