"""Collaborator interfaces consumed by the pricing engine."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Protocol, runtime_checkable

from bungalow_pricing.services.pricing_types import (
    ExtraOption,
    RateRule,
    StayInterval,
    Unit,
)


@runtime_checkable
class ReservationStore(Protocol):
    async def find_blocking_reservations(
        self, unit_id: uuid.UUID, start: date, end: date
    ) -> Sequence[StayInterval]:
        """Return blocking-status reservations overlapping ``[start, end)``."""
        ...


@runtime_checkable
class RuleStore(Protocol):
    async def all_active_rules(self) -> Sequence[RateRule]:
        """Return every rule the engine should consider."""
        ...


@runtime_checkable
class UnitCatalog(Protocol):
    async def get_unit(self, unit_id: uuid.UUID) -> Unit | None:
        ...


@runtime_checkable
class ExtraCatalog(Protocol):
    async def get_extras(self, codes: Iterable[str]) -> dict[str, ExtraOption]:
        """Return the catalog entries for the known codes, keyed by code."""
        ...


__all__ = ["ExtraCatalog", "ReservationStore", "RuleStore", "UnitCatalog"]
