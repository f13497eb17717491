"""Calendar availability checks over blocking reservations."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Iterator
from datetime import date, timedelta

from bungalow_pricing.core.errors import ValidationError
from bungalow_pricing.services.pricing_types import StayInterval
from bungalow_pricing.services.stores import ReservationStore

logger = logging.getLogger(__name__)


def validate_range(start: date | None, end: date | None) -> None:
    """Reject missing, zero-length or inverted half-open ranges."""
    if start is None or end is None:
        raise ValidationError("Both start and end dates are required", field="end")
    if start >= end:
        raise ValidationError(
            f"End date {end.isoformat()} must be after start date {start.isoformat()}",
            field="end",
        )


def iter_nights(start: date, end: date) -> Iterator[date]:
    """Yield each night of ``[start, end)``."""
    current = start
    while current < end:
        yield current
        current += timedelta(days=1)


def expand_blocked_dates(
    reservations: Iterable[StayInterval],
    start: date,
    end: date,
) -> set[date]:
    """Return the days of ``[start, end)`` occupied by blocking reservations."""
    blocked: set[date] = set()
    for reservation in reservations:
        if not reservation.blocks:
            continue
        # Half-open overlap: touching check-out/check-in days do not clash.
        if not (reservation.check_in < end and reservation.check_out > start):
            continue
        blocked.update(reservation.nights())
    return {day for day in blocked if start <= day < end}


async def blocked_dates(
    store: ReservationStore,
    unit_id: uuid.UUID,
    start: date,
    end: date,
) -> set[date]:
    """Return the blocked calendar days for a unit inside ``[start, end)``."""
    validate_range(start, end)
    reservations = await store.find_blocking_reservations(unit_id, start, end)
    foreign = [r for r in reservations if r.unit_id != unit_id]
    if foreign:
        logger.warning(
            "Reservation store returned %d interval(s) for other units; ignoring",
            len(foreign),
        )
    return expand_blocked_dates(
        (r for r in reservations if r.unit_id == unit_id), start, end
    )


async def is_available(
    store: ReservationStore,
    unit_id: uuid.UUID,
    start: date,
    end: date,
) -> bool:
    """Return True when no night of ``[start, end)`` is blocked."""
    return not await blocked_dates(store, unit_id, start, end)
