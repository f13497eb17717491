"""Time-bounded in-process cache for computed quotes."""

from __future__ import annotations

import hashlib
import json
import logging
import time
import uuid
from collections import OrderedDict
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal

from bungalow_pricing.core.config import get_settings
from bungalow_pricing.services.pricing_types import (
    ExtraOption,
    QuoteRequest,
    QuoteResult,
    RateRule,
    Unit,
)

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str, str, int, tuple[tuple[str, int], ...], str]


def rule_set_fingerprint(rules: Iterable[RateRule]) -> str:
    """Digest of the rule set; changes whenever any rule does."""
    parts = sorted(
        json.dumps(rule.fingerprint(), separators=(",", ":")) for rule in rules
    )
    payload = "\n".join(parts)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def quote_fingerprint(
    rules: Iterable[RateRule],
    unit: Unit,
    extras: Iterable[ExtraOption],
    tax_rate: Decimal,
) -> str:
    """Digest of every priced input besides the request itself."""
    context = [
        rule_set_fingerprint(rules),
        str(unit.base_price),
        unit.tax_inclusive,
        unit.included_guests,
        str(tax_rate),
        sorted((o.code, str(o.price), o.charge_type.value) for o in extras),
    ]
    payload = json.dumps(context, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def cache_key(request: QuoteRequest, fingerprint: str) -> CacheKey:
    extras = tuple(sorted((extra.code, extra.quantity) for extra in request.extras))
    return (
        str(request.unit_id),
        request.check_in.isoformat(),
        request.check_out.isoformat(),
        request.guests,
        extras,
        fingerprint,
    )


@dataclass(slots=True)
class _Entry:
    quote: QuoteResult
    expires_at: float


class QuoteCache:
    """LRU-evicting quote cache with per-entry expiry.

    Keys include the rule-set fingerprint, so editing a rule makes stale
    entries unreachable; :meth:`invalidate` frees them eagerly.
    """

    def __init__(
        self,
        ttl_seconds: float = 60,
        max_entries: int = 512,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[CacheKey, _Entry] = OrderedDict()

    @classmethod
    def from_settings(cls) -> QuoteCache:
        settings = get_settings()
        return cls(
            ttl_seconds=settings.quote_cache_ttl_seconds,
            max_entries=settings.quote_cache_max_entries,
        )

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: CacheKey) -> QuoteResult | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return None
        self._entries.move_to_end(key)
        logger.debug("Quote cache hit for unit %s", key[0])
        return entry.quote

    def set(self, key: CacheKey, quote: QuoteResult) -> None:
        if not self.enabled:
            return
        self._entries[key] = _Entry(quote, self._clock() + self.ttl_seconds)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def invalidate(self, unit_id: uuid.UUID | None = None) -> int:
        """Drop entries for ``unit_id`` (or all entries); return how many."""
        if unit_id is None:
            dropped = len(self._entries)
            self._entries.clear()
            return dropped
        target = str(unit_id)
        stale = [key for key in self._entries if key[0] == target]
        for key in stale:
            del self._entries[key]
        return len(stale)
