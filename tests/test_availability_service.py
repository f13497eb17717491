"""Tests for calendar availability checks."""

from __future__ import annotations

import uuid
from datetime import date

import pytest

from bungalow_pricing.core.errors import ValidationError
from bungalow_pricing.models import ReservationStatus
from bungalow_pricing.services import availability_service

from tests.fakes import InMemoryReservationStore, stay

UNIT = uuid.UUID("00000000-0000-0000-0000-0000000000b1")
OTHER_UNIT = uuid.UUID("00000000-0000-0000-0000-0000000000b2")


def test_expand_blocked_dates_clips_to_window() -> None:
    reservations = [stay(UNIT, date(2024, 6, 8), date(2024, 6, 12))]

    blocked = availability_service.expand_blocked_dates(
        reservations, date(2024, 6, 10), date(2024, 6, 20)
    )

    assert blocked == {date(2024, 6, 10), date(2024, 6, 11)}


@pytest.mark.parametrize(
    "status",
    [ReservationStatus.CANCELLED, ReservationStatus.CHECKED_OUT],
)
def test_non_blocking_statuses_are_ignored(status: ReservationStatus) -> None:
    reservations = [stay(UNIT, date(2024, 6, 10), date(2024, 6, 12), status)]

    blocked = availability_service.expand_blocked_dates(
        reservations, date(2024, 6, 1), date(2024, 6, 30)
    )

    assert blocked == set()


@pytest.mark.parametrize(
    "status",
    [
        ReservationStatus.PENDING,
        ReservationStatus.CONFIRMED,
        ReservationStatus.CHECKED_IN,
    ],
)
def test_blocking_statuses_occupy_nights(status: ReservationStatus) -> None:
    reservations = [stay(UNIT, date(2024, 6, 10), date(2024, 6, 12), status)]

    blocked = availability_service.expand_blocked_dates(
        reservations, date(2024, 6, 1), date(2024, 6, 30)
    )

    assert blocked == {date(2024, 6, 10), date(2024, 6, 11)}


@pytest.mark.parametrize(
    ("start", "end"),
    [
        (date(2024, 6, 12), date(2024, 6, 12)),
        (date(2024, 6, 14), date(2024, 6, 12)),
        (None, date(2024, 6, 12)),
    ],
)
def test_validate_range_rejects_empty_and_inverted(start, end) -> None:
    with pytest.raises(ValidationError) as excinfo:
        availability_service.validate_range(start, end)
    assert excinfo.value.field == "end"


def test_reservation_interval_rejects_inverted_dates() -> None:
    with pytest.raises(ValidationError):
        stay(UNIT, date(2024, 6, 12), date(2024, 6, 10))


@pytest.mark.asyncio
async def test_touching_stays_do_not_conflict() -> None:
    store = InMemoryReservationStore([stay(UNIT, date(2024, 6, 10), date(2024, 6, 12))])

    before = await availability_service.is_available(
        store, UNIT, date(2024, 6, 8), date(2024, 6, 10)
    )
    after = await availability_service.is_available(
        store, UNIT, date(2024, 6, 12), date(2024, 6, 14)
    )

    assert before is True
    assert after is True


@pytest.mark.asyncio
async def test_overlapping_stay_reports_shared_night() -> None:
    store = InMemoryReservationStore([stay(UNIT, date(2024, 6, 10), date(2024, 6, 12))])

    blocked = await availability_service.blocked_dates(
        store, UNIT, date(2024, 6, 11), date(2024, 6, 13)
    )

    assert blocked == {date(2024, 6, 11)}


@pytest.mark.asyncio
async def test_other_units_do_not_block() -> None:
    store = InMemoryReservationStore(
        [stay(OTHER_UNIT, date(2024, 6, 10), date(2024, 6, 12))]
    )

    assert await availability_service.is_available(
        store, UNIT, date(2024, 6, 10), date(2024, 6, 12)
    )


@pytest.mark.asyncio
async def test_foreign_intervals_from_store_are_discarded(caplog) -> None:
    class LeakyStore:
        async def find_blocking_reservations(self, unit_id, start, end):
            return [stay(OTHER_UNIT, date(2024, 6, 10), date(2024, 6, 12))]

    with caplog.at_level("WARNING"):
        blocked = await availability_service.blocked_dates(
            LeakyStore(), UNIT, date(2024, 6, 10), date(2024, 6, 12)
        )

    assert blocked == set()
    assert "other units" in caplog.text


@pytest.mark.asyncio
async def test_invalid_range_never_queries_store() -> None:
    store = InMemoryReservationStore()

    with pytest.raises(ValidationError):
        await availability_service.blocked_dates(
            store, UNIT, date(2024, 6, 12), date(2024, 6, 10)
        )

    assert store.calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("start", "end", "expected"),
    [
        (date(2024, 6, 1), date(2024, 6, 5), True),
        (date(2024, 6, 5), date(2024, 6, 10), True),
        (date(2024, 6, 9), date(2024, 6, 11), False),
        (date(2024, 6, 11), date(2024, 6, 12), False),
        (date(2024, 6, 1), date(2024, 6, 30), False),
        (date(2024, 6, 12), date(2024, 6, 13), True),
    ],
)
async def test_availability_matches_half_open_overlap(start, end, expected) -> None:
    store = InMemoryReservationStore([stay(UNIT, date(2024, 6, 10), date(2024, 6, 12))])

    assert await availability_service.is_available(store, UNIT, start, end) is expected
