"""Test fixtures for Taskiq, the async runtime and a throwaway database."""

import os
import sys
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

os.environ["TASKIQ_TESTING"] = "1"

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from property_tracker.models import Base
from property_tracker.taskiq_app.broker import broker
from property_tracker.taskiq_app.dedup import _MEMORY_LOCKS


@pytest.fixture(scope="function", autouse=True)
async def init_taskiq() -> AsyncIterator[None]:
    """Initialize broker per test when using InMemoryBroker."""

    _MEMORY_LOCKS.clear()
    await broker.startup()
    yield
    await broker.shutdown()
    _MEMORY_LOCKS.clear()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """File-backed SQLite database with the full schema created."""

    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tracker.db'}")
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
def make_payload() -> Callable[..., dict[str, Any]]:
    """Build a raw scrape payload shaped like the upstream transport's output."""

    def _make(
        *,
        listing_id: str = "L-1001",
        source_name: str = "realtor",
        line: str = "123 Main St",
        city: str = "Provo",
        postal_code: str = "84601",
        state_code: str = "UT",
        county: str | None = "Utah",
        status: str | None = "for_sale",
        list_price: object | None = 500000,
        sold_price: object | None = None,
        sold_date: object | None = None,
        flags: dict[str, object] | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "source": {"name": source_name, "listing_id": listing_id},
            "location": {
                "address": {
                    "line": line,
                    "city": city,
                    "postal_code": postal_code,
                    "state_code": state_code,
                },
                "county": {"name": county} if county is not None else None,
            },
            "status": status,
            "list_price": list_price,
            "sold_price": sold_price,
            "description": {"sold_date": sold_date},
            "flags": dict(flags or {}),
        }
        return payload

    return _make
