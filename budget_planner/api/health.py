"""Health check endpoint for infrastructure verification."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from budget_planner.api.deps import get_db
from budget_planner.core.config import settings
from budget_planner.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    db: str
    storage_backend: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> HealthResponse:
    """Check application health including database connectivity.

    Returns:
        HealthResponse with status of each component.
    """
    try:
        await db.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.exception("database_health_check_failed", error=str(e))
        db_status = "disconnected"

    return HealthResponse(
        status="ok" if db_status == "connected" else "degraded",
        db=db_status,
        storage_backend=settings.storage_backend,
    )
