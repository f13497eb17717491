"""Pricing engine service for bungalow stays."""

from __future__ import annotations

import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from bungalow_pricing.core.config import get_settings, parse_tax_rate
from bungalow_pricing.core.errors import ConflictError, ValidationError
from bungalow_pricing.services import availability_service, rule_selector
from bungalow_pricing.services.pricing_types import (
    AvailabilityResult,
    ExtraOption,
    QuoteRequest,
    QuoteResult,
    Unit,
)
from bungalow_pricing.services.quote_cache import QuoteCache, cache_key, quote_fingerprint
from bungalow_pricing.services.rate_calculator import compute_breakdown
from bungalow_pricing.services.sql_stores import (
    SqlExtraCatalog,
    SqlReservationStore,
    SqlRuleStore,
    SqlUnitCatalog,
)
from bungalow_pricing.services.stores import (
    ExtraCatalog,
    ReservationStore,
    RuleStore,
    UnitCatalog,
)

logger = logging.getLogger(__name__)


class PricingEngine:
    """Availability checks and quotes over injected collaborators.

    The engine holds no state of its own besides an optional quote cache.
    A successful availability check is advisory only: callers creating a
    reservation must still guard against a concurrent booking of the same
    dates at write time.
    """

    def __init__(
        self,
        reservations: ReservationStore,
        rules: RuleStore,
        units: UnitCatalog,
        extras: ExtraCatalog | None = None,
        *,
        tax_rate: Decimal | int | str | None = None,
        cache: QuoteCache | None = None,
    ) -> None:
        self.reservations = reservations
        self.rules = rules
        self.units = units
        self.extras = extras
        if tax_rate is None:
            self.tax_rate = get_settings().tax_rate
        else:
            try:
                self.tax_rate = parse_tax_rate(tax_rate)
            except ValueError as exc:
                raise ValidationError(str(exc), field="tax_rate") from exc
        self.cache = cache

    @classmethod
    def from_session(
        cls,
        session: AsyncSession,
        *,
        tax_rate: Decimal | int | str | None = None,
        cache: QuoteCache | None = None,
    ) -> PricingEngine:
        """Build an engine backed by the SQL stores for ``session``."""
        return cls(
            SqlReservationStore(session),
            SqlRuleStore(session),
            SqlUnitCatalog(session),
            SqlExtraCatalog(session),
            tax_rate=tax_rate,
            cache=cache,
        )

    async def check_availability(
        self,
        unit_id: uuid.UUID,
        start: date | None,
        end: date | None,
    ) -> AvailabilityResult:
        """Report whether ``[start, end)`` is free; never raises on bad input."""
        try:
            blocked = await self.blocked_dates(unit_id, start, end)  # type: ignore[arg-type]
        except ValidationError as exc:
            return AvailabilityResult.invalid(unit_id, start, end, str(exc))
        return AvailabilityResult.from_blocked(unit_id, start, end, blocked)  # type: ignore[arg-type]

    async def blocked_dates(
        self, unit_id: uuid.UUID, start: date, end: date
    ) -> set[date]:
        """Blocked days of ``[start, end)`` for a known, bookable unit."""
        availability_service.validate_range(start, end)
        await self._get_unit(unit_id)
        return await availability_service.blocked_dates(
            self.reservations, unit_id, start, end
        )

    async def calculate_pricing(self, request: QuoteRequest) -> QuoteResult:
        """Produce a quote, refusing ranges that are not available."""
        _validate_request(request)

        unit = await self._get_unit(request.unit_id)
        _validate_party(unit, request.guests)

        blocked = await availability_service.blocked_dates(
            self.reservations, request.unit_id, request.check_in, request.check_out
        )
        if blocked:
            logger.warning(
                "Quote refused for unit %s: %d night(s) already booked",
                request.unit_id,
                len(blocked),
            )
            raise ConflictError(
                "Unit is not available for the requested dates",
                blocked_dates=blocked,
            )

        rules = list(await self.rules.all_active_rules())
        extras = await self._resolve_extras(request)

        key = None
        if self.cache is not None and self.cache.enabled:
            fingerprint = quote_fingerprint(
                rules, unit, (option for option, _ in extras), self.tax_rate
            )
            key = cache_key(request, fingerprint)
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        rule_selector.enforce_minimum_nights(
            request.unit_id, request.check_in, request.check_out, rules
        )
        selection = rule_selector.select_applicable_rules(
            request.unit_id, request.check_in, request.check_out, rules
        )
        quote = compute_breakdown(
            unit, selection, request.guests, extras, self.tax_rate
        )
        if key is not None:
            self.cache.set(key, quote)  # type: ignore[union-attr]

        logger.info(
            "Quoted unit %s %s..%s: %s nights, total %s",
            request.unit_id,
            request.check_in.isoformat(),
            request.check_out.isoformat(),
            quote.nights,
            quote.total_amount,
        )
        return quote

    async def _get_unit(self, unit_id: uuid.UUID) -> Unit:
        unit = await self.units.get_unit(unit_id)
        if unit is None:
            raise ValidationError(f"Unknown unit {unit_id}", field="unit_id")
        return unit

    async def _resolve_extras(
        self, request: QuoteRequest
    ) -> list[tuple[ExtraOption, int]]:
        if not request.extras:
            return []
        if self.extras is None:
            raise ValidationError("Extras are not offered", field="extras")

        quantities: dict[str, int] = {}
        for selection in request.extras:
            quantities[selection.code] = quantities.get(selection.code, 0) + selection.quantity

        catalog = await self.extras.get_extras(list(quantities))
        resolved: list[tuple[ExtraOption, int]] = []
        for code, quantity in quantities.items():
            option = catalog.get(code)
            if option is None or not option.active:
                raise ValidationError(f"Unknown extra {code!r}", field="extras")
            if option.price < 0:
                raise ValidationError(
                    f"Extra {code!r} has a negative price", field="extras"
                )
            resolved.append((option, quantity))
        return resolved


def _validate_request(request: QuoteRequest) -> None:
    if request.unit_id is None:
        raise ValidationError("unit_id is required", field="unit_id")
    availability_service.validate_range(request.check_in, request.check_out)
    if request.guests < 1:
        raise ValidationError("At least one guest is required", field="guests")
    for selection in request.extras:
        if not selection.code:
            raise ValidationError("Extra code is required", field="extras")
        if selection.quantity < 1:
            raise ValidationError(
                f"Quantity for extra {selection.code!r} must be at least 1",
                field="extras",
            )


def _validate_party(unit: Unit, guests: int) -> None:
    if unit.capacity is not None and guests > unit.capacity:
        raise ValidationError(
            f"Unit sleeps at most {unit.capacity} guest(s), {guests} requested",
            field="guests",
        )


__all__ = ["PricingEngine"]
