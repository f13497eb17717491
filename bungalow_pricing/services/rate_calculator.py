"""Night-by-night price folding, extras and tax."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, timedelta
from decimal import Decimal

from bungalow_pricing.core.errors import ComputationError
from bungalow_pricing.models.pricing import AmountType, ExtraChargeType, PriceRuleKind
from bungalow_pricing.services.pricing_types import (
    ExtraOption,
    LineCategory,
    QuoteLine,
    QuoteResult,
    RateRule,
    Unit,
    to_money,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def rule_delta(rule: RateRule, running_price: Decimal, extra_guests: int) -> Decimal:
    """Return the change a rule makes to the running night price."""
    multiplier = Decimal(extra_guests) if rule.kind is PriceRuleKind.PER_PERSON else 1
    value = Decimal(rule.amount_value)
    if rule.amount_type is AmountType.FIXED:
        return value * multiplier
    if rule.amount_type is AmountType.PERCENTAGE:
        return running_price * value / HUNDRED * multiplier
    raise ComputationError(f"Unsupported amount type {rule.amount_type!r}")


def extra_amount(
    option: ExtraOption, quantity: int, *, nights: int, guests: int
) -> Decimal:
    price = Decimal(option.price)
    if option.charge_type is ExtraChargeType.FLAT:
        return price * quantity
    if option.charge_type is ExtraChargeType.PER_NIGHT:
        return price * quantity * nights
    if option.charge_type is ExtraChargeType.PER_GUEST:
        return price * quantity * guests
    raise ComputationError(f"Unsupported extra charge type {option.charge_type!r}")


def tax_portion(amount: Decimal, rate: Decimal, *, inclusive: bool) -> Decimal:
    """Tax on top of ``amount``, or the tax already contained in it."""
    if inclusive:
        return amount * rate / (HUNDRED + rate)
    return amount * rate / HUNDRED


def compute_breakdown(
    unit: Unit,
    nights_with_rules: Mapping[date, Sequence[RateRule]],
    guests: int,
    extras: Sequence[tuple[ExtraOption, int]] = (),
    tax_rate: Decimal | int | str = ZERO,
) -> QuoteResult:
    """Fold rules over every night and build the itemized quote.

    Percentage rules compound on the price already adjusted by the rules
    before them on the same night, so the order of ``nights_with_rules``
    values is significant. Nothing is rounded until the result is built.
    """
    if not nights_with_rules:
        raise ComputationError("Cannot price a stay without nights")

    nights = sorted(nights_with_rules)
    night_count = len(nights)
    check_in = nights[0]
    check_out = nights[-1] + timedelta(days=1)
    if (check_out - check_in).days != night_count:
        raise ComputationError("Nights to price must be consecutive")

    rate = Decimal(tax_rate)
    base_price = Decimal(unit.base_price)
    extra_guests = max(0, guests - unit.included_guests)

    contributions: dict[uuid.UUID, Decimal] = {}
    rule_nights: dict[uuid.UUID, list[date]] = {}
    rules_by_id: dict[uuid.UUID, RateRule] = {}
    clamped: list[date] = []
    clamp_total = ZERO
    base_amount = ZERO

    for night in nights:
        price = base_price
        for rule in nights_with_rules[night]:
            delta = rule_delta(rule, price, extra_guests)
            if delta == 0:
                continue
            price += delta
            rules_by_id.setdefault(rule.id, rule)
            contributions[rule.id] = contributions.get(rule.id, ZERO) + delta
            rule_nights.setdefault(rule.id, []).append(night)
        if price < 0:
            logger.warning(
                "Night %s for unit %s priced at %s; clamping to zero",
                night.isoformat(),
                unit.id,
                price,
            )
            clamped.append(night)
            clamp_total -= price
            price = ZERO
        base_amount += price

    lines: list[QuoteLine] = [
        QuoteLine(
            label="Base rate",
            amount=to_money(base_price * night_count),
            category=LineCategory.BASE,
            nights=tuple(nights),
        )
    ]
    discount_amount = ZERO
    for rule_id, total in contributions.items():
        if total < 0:
            discount_amount -= total
        lines.append(
            QuoteLine(
                label=rules_by_id[rule_id].name,
                amount=to_money(total),
                category=LineCategory.RULE,
                nights=tuple(rule_nights[rule_id]),
                rule_id=rule_id,
            )
        )
    if clamped:
        # Only the part of a discount that lowered the price counts.
        discount_amount = max(ZERO, discount_amount - clamp_total)
        lines.append(
            QuoteLine(
                label="Minimum night price adjustment",
                amount=to_money(clamp_total),
                category=LineCategory.ADJUSTMENT,
                nights=tuple(clamped),
            )
        )

    extras_amount = ZERO
    for option, quantity in extras:
        amount = extra_amount(option, quantity, nights=night_count, guests=guests)
        extras_amount += amount
        lines.append(
            QuoteLine(
                label=f"{option.name} x{quantity}" if quantity > 1 else option.name,
                amount=to_money(amount),
                category=LineCategory.EXTRA,
                nights=tuple(nights)
                if option.charge_type is ExtraChargeType.PER_NIGHT
                else (),
            )
        )

    tax_amount = tax_portion(base_amount + extras_amount, rate, inclusive=unit.tax_inclusive)
    if rate:
        label = (
            f"Tax included ({rate.normalize():f}%)"
            if unit.tax_inclusive
            else f"Tax ({rate.normalize():f}%)"
        )
        lines.append(
            QuoteLine(label=label, amount=to_money(tax_amount), category=LineCategory.TAX)
        )

    base_total = to_money(base_amount)
    extras_total = to_money(extras_amount)
    tax_total = to_money(tax_amount)
    total = base_total + extras_total
    if not unit.tax_inclusive:
        total += tax_total
    if total < 0:
        raise ComputationError(f"Negative total {total} for unit {unit.id}")

    return QuoteResult(
        unit_id=unit.id,
        check_in=check_in,
        check_out=check_out,
        nights=night_count,
        guests=guests,
        base_amount=base_total,
        extras_amount=extras_total,
        discount_amount=to_money(discount_amount),
        tax_amount=tax_total,
        tax_rate=rate,
        tax_inclusive=unit.tax_inclusive,
        total_amount=total,
        lines=tuple(lines),
        clamped_nights=tuple(clamped),
    )
