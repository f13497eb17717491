"""Seed a demo bungalow, baseline pricing rules and extra services."""

from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bungalow_pricing.db.session import get_sessionmaker
from bungalow_pricing.models import (
    AmountType,
    Bungalow,
    ExtraChargeType,
    ExtraService,
    PriceRule,
    PriceRuleKind,
    RuleScope,
)
from bungalow_pricing.services.pricing_types import WEEKEND

DEMO_BUNGALOW = "Lakeside Bungalow"
WEEKEND_RULE = "Weekend pricing"
MIN_NIGHTS_RULE = "Minimum 3 night stay"
PER_PERSON_RULE = "Extra guest surcharge"
EXTRAS = (
    ("BREAKFAST", "Breakfast", Decimal("150.00"), ExtraChargeType.PER_GUEST),
    ("CLEANING", "Final cleaning", Decimal("300.00"), ExtraChargeType.FLAT),
    ("JACUZZI", "Heated jacuzzi", Decimal("250.00"), ExtraChargeType.PER_NIGHT),
)


def _summer_window(today: date | None = None) -> tuple[date, date]:
    today = today or date.today()
    year = today.year if today <= date(today.year, 9, 30) else today.year + 1
    return date(year, 6, 1), date(year, 9, 30)


async def seed_pricing(session: AsyncSession) -> tuple[int, int]:
    """Create missing seed rows; return (rules created, extras created)."""
    existing_names = set((await session.execute(select(PriceRule.name))).scalars())
    bungalow = (
        await session.execute(select(Bungalow).where(Bungalow.name == DEMO_BUNGALOW))
    ).scalar_one_or_none()
    if bungalow is None:
        bungalow = Bungalow(
            name=DEMO_BUNGALOW,
            base_price=Decimal("1000.00"),
            price_includes_tax=False,
            capacity=6,
            included_guests=2,
        )
        session.add(bungalow)
        await session.flush()

    season_start, season_end = _summer_window()
    season_rule = f"Summer season {season_start.year}"
    candidates = [
        PriceRule(
            name=WEEKEND_RULE,
            kind=PriceRuleKind.WEEKEND,
            amount_type=AmountType.PERCENTAGE,
            amount_value=Decimal("20"),
            scope=RuleScope.GLOBAL,
            weekday_mask=WEEKEND,
        ),
        PriceRule(
            name=season_rule,
            kind=PriceRuleKind.SEASON,
            amount_type=AmountType.PERCENTAGE,
            amount_value=Decimal("30"),
            scope=RuleScope.GLOBAL,
            date_start=season_start,
            date_end=season_end,
        ),
        PriceRule(
            name=MIN_NIGHTS_RULE,
            kind=PriceRuleKind.MIN_NIGHTS,
            amount_type=AmountType.FIXED,
            amount_value=Decimal("3"),
            scope=RuleScope.GLOBAL,
            date_start=season_start,
            date_end=season_end,
        ),
        PriceRule(
            name=PER_PERSON_RULE,
            kind=PriceRuleKind.PER_PERSON,
            amount_type=AmountType.FIXED,
            amount_value=Decimal("200"),
            scope=RuleScope.UNIT,
            bungalow_id=bungalow.id,
        ),
    ]
    rules_created = 0
    for rule in candidates:
        if rule.name not in existing_names:
            session.add(rule)
            rules_created += 1

    existing_codes = set((await session.execute(select(ExtraService.code))).scalars())
    extras_created = 0
    for code, name, price, charge_type in EXTRAS:
        if code in existing_codes:
            continue
        session.add(
            ExtraService(code=code, name=name, price=price, charge_type=charge_type)
        )
        extras_created += 1

    await session.commit()
    return rules_created, extras_created


async def _seed_async() -> None:
    sessionmaker = get_sessionmaker()
    async with sessionmaker() as session:
        rules_created, extras_created = await seed_pricing(session)
    print(
        f"Seeded {rules_created} pricing rule(s) and {extras_created} extra service(s)."
    )


def main() -> None:
    asyncio.run(_seed_async())


if __name__ == "__main__":
    main()
