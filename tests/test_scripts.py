"""Tests for the seed and quote command line scripts."""

from __future__ import annotations

import json

import pytest
from sqlalchemy import func, select

from bungalow_pricing.db.session import get_sessionmaker
from bungalow_pricing.models import Bungalow, PriceRule
from scripts import quote_stay, seed_pricing

pytestmark = pytest.mark.asyncio


async def _seeded_bungalow_id(db_url: str) -> str:
    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        created = await seed_pricing.seed_pricing(session)
        bungalow = (
            await session.execute(
                select(Bungalow).where(Bungalow.name == seed_pricing.DEMO_BUNGALOW)
            )
        ).scalar_one()
    assert created == (4, 3)
    return str(bungalow.id)


async def test_seed_is_idempotent(reset_database, db_url) -> None:
    await _seeded_bungalow_id(db_url)

    sessionmaker = get_sessionmaker(db_url)
    async with sessionmaker() as session:
        again = await seed_pricing.seed_pricing(session)
        rule_count = await session.scalar(select(func.count()).select_from(PriceRule))
        bungalow_count = await session.scalar(select(func.count()).select_from(Bungalow))

    assert again == (0, 0)
    assert rule_count == 4
    assert bungalow_count == 1


async def test_quote_script_prints_quote(reset_database, db_url, capsys) -> None:
    bungalow_id = await _seeded_bungalow_id(db_url)
    # Monday to Wednesday in January: no weekend, season or minimum stay.
    args = quote_stay.build_parser().parse_args(
        [bungalow_id, "2030-01-07", "2030-01-09", "--tax-rate", "10"]
    )

    exit_code = await quote_stay.run(args)

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["base_amount"] == "2000.00"
    assert payload["tax_amount"] == "200.00"
    assert payload["total_amount"] == "2200.00"


async def test_quote_script_prices_extras(reset_database, db_url, capsys) -> None:
    bungalow_id = await _seeded_bungalow_id(db_url)
    args = quote_stay.build_parser().parse_args(
        [
            bungalow_id,
            "2030-01-07",
            "2030-01-09",
            "--tax-rate",
            "0",
            "--extra",
            "CLEANING",
            "--extra",
            "BREAKFAST:2",
        ]
    )

    exit_code = await quote_stay.run(args)

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert payload["extras_amount"] == "900.00"
    assert payload["total_amount"] == "2900.00"


async def test_quote_script_reports_validation_errors(
    reset_database, db_url, capsys
) -> None:
    bungalow_id = await _seeded_bungalow_id(db_url)
    args = quote_stay.build_parser().parse_args(
        [bungalow_id, "2030-01-07", "2030-01-09", "--extra", "SPA"]
    )

    exit_code = await quote_stay.run(args)

    assert exit_code == 2
    assert "SPA" in json.loads(capsys.readouterr().err)["error"]


async def test_availability_only(reset_database, db_url, capsys) -> None:
    bungalow_id = await _seeded_bungalow_id(db_url)
    args = quote_stay.build_parser().parse_args(
        [bungalow_id, "2030-01-09", "2030-01-07", "--availability-only"]
    )

    exit_code = await quote_stay.run(args)

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert payload["status"] == "invalid"


@pytest.mark.parametrize("tax_rate", ["-5", "100", "abc"])
async def test_quote_script_rejects_bad_tax_rate(tax_rate, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        quote_stay.build_parser().parse_args(
            [
                "00000000-0000-0000-0000-0000000000b1",
                "2030-01-07",
                "2030-01-09",
                "--tax-rate",
                tax_rate,
            ]
        )

    assert excinfo.value.code == 2
    assert "--tax-rate" in capsys.readouterr().err
