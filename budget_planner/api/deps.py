"""FastAPI dependency injection for database, store and planner access."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from budget_planner.core.config import settings
from budget_planner.orchestration.planner import BudgetPlanner
from budget_planner.persistence.base import BudgetStore
from budget_planner.tax.rates import get_statutory_rates


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session from the app's session factory.

    Args:
        request: FastAPI request containing app state.

    Yields:
        AsyncSession for database operations with automatic commit/rollback.
    """
    async with request.app.state.async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_store(request: Request) -> BudgetStore:
    """Get the budget store configured for this app.

    Args:
        request: FastAPI request containing app state.

    Returns:
        The store created at startup (SQL or snapshot backed).
    """
    return request.app.state.store


async def get_planner(
    store: Annotated[BudgetStore, Depends(get_store)],
) -> BudgetPlanner:
    """Build a planner over the store, loaded with the current budget.

    Args:
        store: Store resolved by get_store.

    Returns:
        A loaded BudgetPlanner for this request.
    """
    planner = BudgetPlanner(
        store,
        default_names=settings.default_categories,
        rates=get_statutory_rates(settings.tax_year),
    )
    await planner.load()
    return planner
