"""Test fixtures for the pricing engine."""
from __future__ import annotations

import os
import uuid
from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("TAX_RATE", "20")

from bungalow_pricing.core.config import get_settings
from bungalow_pricing.db.base import Base
from bungalow_pricing.db.session import dispose_engine
from bungalow_pricing.models import *  # noqa: F401,F403
from bungalow_pricing.services.pricing_types import Unit

from tests.fakes import (
    InMemoryExtraCatalog,
    InMemoryReservationStore,
    InMemoryRuleStore,
    InMemoryUnitCatalog,
)


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


@pytest.fixture()
def unit() -> Unit:
    return Unit(
        id=uuid.UUID("00000000-0000-0000-0000-0000000000b1"),
        name="Pine",
        base_price=Decimal("1000"),
        tax_inclusive=False,
        capacity=4,
    )


@pytest.fixture()
def reservation_store() -> InMemoryReservationStore:
    return InMemoryReservationStore()


@pytest.fixture()
def rule_store() -> InMemoryRuleStore:
    return InMemoryRuleStore()


@pytest.fixture()
def unit_catalog(unit: Unit) -> InMemoryUnitCatalog:
    return InMemoryUnitCatalog([unit])


@pytest.fixture()
def extra_catalog() -> InMemoryExtraCatalog:
    return InMemoryExtraCatalog()
