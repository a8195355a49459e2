"""Async database engine factory and session factory."""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from budget_planner.core.config import settings

# Import all models to register them with Base.metadata
from budget_planner.models import (  # noqa: F401
    Base,
    CategoryRecord,
    ExpenseRecord,
    IncomeRecord,
)


def create_engine(
    database_url: str | None = None,
    **engine_options: Any,
) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Args:
        database_url: Async connection URL. Defaults to settings.database_url.
        **engine_options: Additional options passed to create_async_engine.

    Returns:
        Configured AsyncEngine instance.
    """
    url = database_url or settings.database_url

    default_options: dict[str, Any] = {"echo": settings.debug}
    if not url.startswith("sqlite"):
        # sqlite uses a single-connection pool; sizing only applies to servers
        default_options.update(
            {
                "pool_size": 20,
                "max_overflow": 0,
                "pool_pre_ping": True,
            }
        )
    default_options.update(engine_options)

    return create_async_engine(url, **default_options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory.

    Args:
        engine: AsyncEngine instance to bind sessions to.

    Returns:
        Configured async_sessionmaker instance.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet.

    Used for sqlite deployments and tests; server databases are migrated
    with Alembic.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
