"""Per-night selection and ordering of price rules."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime

from bungalow_pricing.core.errors import ComputationError, ValidationError
from bungalow_pricing.models.pricing import PriceRuleKind, RuleScope
from bungalow_pricing.services.availability_service import iter_nights, validate_range
from bungalow_pricing.services.pricing_types import RateRule

logger = logging.getLogger(__name__)

_CONSTRAINT_KINDS = frozenset({PriceRuleKind.MIN_NIGHTS})


def scope_matches(rule: RateRule, unit_id: uuid.UUID) -> bool:
    if rule.scope is RuleScope.GLOBAL:
        return True
    return rule.unit_id is not None and rule.unit_id == unit_id


def window_contains(rule: RateRule, night: date) -> bool:
    """Inclusive window test; a missing bound is open on that side."""
    if rule.date_start is not None and night < rule.date_start:
        return False
    if rule.date_end is not None and night > rule.date_end:
        return False
    return True


def weekday_matches(rule: RateRule, night: date) -> bool:
    if rule.weekday_mask is None:
        return True
    return bool(rule.weekday_mask & (1 << night.weekday()))


def rule_applies_on(rule: RateRule, unit_id: uuid.UUID, night: date) -> bool:
    return (
        scope_matches(rule, unit_id)
        and window_contains(rule, night)
        and weekday_matches(rule, night)
    )


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def rule_sort_key(rule: RateRule) -> tuple[int, datetime, str]:
    """Unit rules before global ones, then oldest first, then by id."""
    scope_rank = 0 if rule.scope is RuleScope.UNIT else 1
    return (scope_rank, _as_utc(rule.created_at), str(rule.id))


def order_rules(rules: Iterable[RateRule]) -> list[RateRule]:
    return sorted(rules, key=rule_sort_key)


def _ensure_unit_scope(rules: Sequence[RateRule], unit_id: uuid.UUID) -> None:
    for rule in rules:
        if rule.scope is RuleScope.UNIT and rule.unit_id != unit_id:
            raise ComputationError(
                f"Rule {rule.id} scoped to unit {rule.unit_id} selected for {unit_id}"
            )


def select_applicable_rules(
    unit_id: uuid.UUID,
    check_in: date,
    check_out: date,
    rules: Iterable[RateRule],
) -> dict[date, list[RateRule]]:
    """Map every night of the stay to its ordered list of price rules.

    Stay constraints such as minimum-night rules are not price adjustments
    and are left out; see :func:`select_stay_constraints`.
    """
    validate_range(check_in, check_out)
    candidates = [
        rule for rule in order_rules(rules) if rule.kind not in _CONSTRAINT_KINDS
    ]

    selection: dict[date, list[RateRule]] = {}
    for night in iter_nights(check_in, check_out):
        selected = [rule for rule in candidates if rule_applies_on(rule, unit_id, night)]
        _ensure_unit_scope(selected, unit_id)
        selection[night] = selected
        logger.debug(
            "Night %s for unit %s: %d rule(s) selected",
            night.isoformat(),
            unit_id,
            len(selected),
        )
    return selection


def select_stay_constraints(
    unit_id: uuid.UUID,
    check_in: date,
    rules: Iterable[RateRule],
) -> list[RateRule]:
    """Return the constraint rules in force on the check-in night."""
    return [
        rule
        for rule in order_rules(rules)
        if rule.kind in _CONSTRAINT_KINDS and rule_applies_on(rule, unit_id, check_in)
    ]


def enforce_minimum_nights(
    unit_id: uuid.UUID,
    check_in: date,
    check_out: date,
    rules: Iterable[RateRule],
) -> None:
    """Raise :class:`ValidationError` when the stay is shorter than required."""
    nights = (check_out - check_in).days
    for rule in select_stay_constraints(unit_id, check_in, rules):
        if rule.kind is PriceRuleKind.MIN_NIGHTS and nights < rule.amount_value:
            raise ValidationError(
                f"A minimum stay of {rule.amount_value.normalize():f} night(s) "
                f"is required ({rule.name})",
                field="check_out",
            )
