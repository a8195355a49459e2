"""API module exports."""

from budget_planner.api.budget import router as budget_router
from budget_planner.api.deps import get_db, get_planner, get_store
from budget_planner.api.health import router as health_router

__all__ = [
    "budget_router",
    "get_db",
    "get_planner",
    "get_store",
    "health_router",
]
