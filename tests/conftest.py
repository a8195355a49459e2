"""Pytest configuration and shared fixtures for tests."""

import uuid
from collections.abc import AsyncGenerator
from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from budget_planner.core.database import create_session_factory, create_tables
from budget_planner.persistence import SnapshotStore, SqlBudgetStore

TODAY = date(2024, 6, 15)


@pytest.fixture
def today() -> date:
    """Fixed reference date for date validation.

    Returns:
        A mid-year date so "two years back" and "tomorrow" are unambiguous.
    """
    return TODAY


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create an in-memory sqlite database with the budget tables.

    Yields:
        Session factory bound to the fresh database.
    """
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(engine)
    try:
        yield create_session_factory(engine)
    finally:
        await engine.dispose()


@pytest.fixture
def sql_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlBudgetStore:
    """Create a SQL store over the in-memory database."""
    return SqlBudgetStore(session_factory)


@pytest.fixture
def storage_url() -> str:
    """Unique in-memory fsspec location per test."""
    return f"memory://budget-{uuid.uuid4().hex}"


@pytest.fixture
def snapshot_store(storage_url: str) -> SnapshotStore:
    """Create a snapshot store in memory storage."""
    return SnapshotStore(storage_url, "budget.json")
