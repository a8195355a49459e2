"""FastAPI application entry point with lifespan management."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from budget_planner import __version__
from budget_planner.api.budget import router as budget_router
from budget_planner.api.errors import budget_error_handler
from budget_planner.api.health import router as health_router
from budget_planner.api.middleware import RequestContextMiddleware
from budget_planner.core.config import settings
from budget_planner.core.database import create_engine, create_session_factory, create_tables
from budget_planner.core.errors import BudgetError
from budget_planner.core.logging import configure_logging, get_logger
from budget_planner.core.sentry import init_sentry
from budget_planner.persistence import SnapshotStore, SqlBudgetStore

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle resources.

    Startup:
        - Configure structured logging
        - Initialize Sentry error tracking
        - Create database engine and session factory
        - Create tables for sqlite databases
        - Select the budget store

    Shutdown:
        - Dispose database engine
    """
    # Configure logging first
    configure_logging()
    logger.info("Starting application", environment=settings.environment)

    # Initialize error tracking
    init_sentry()

    # Create database engine and session factory
    app.state.db_engine = create_engine()
    app.state.async_session = create_session_factory(app.state.db_engine)
    logger.info("Database engine created")

    # Server databases are migrated with Alembic
    if settings.database_url.startswith("sqlite"):
        await create_tables(app.state.db_engine)
        logger.info("Database tables created")

    if settings.storage_backend == "snapshot":
        app.state.store = SnapshotStore(settings.storage_url, settings.snapshot_name)
    else:
        app.state.store = SqlBudgetStore(app.state.async_session)
    logger.info("Budget store selected", backend=settings.storage_backend)

    yield

    # Shutdown
    logger.info("Shutting down application")

    # Dispose database engine
    await app.state.db_engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="Budget Planner",
    description="Salary deductions, budget categories and expense tracking",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request context middleware
app.add_middleware(RequestContextMiddleware)

# Error handlers
app.add_exception_handler(BudgetError, budget_error_handler)

# Include routers
app.include_router(health_router)
app.include_router(budget_router)
