"""SQLAlchemy models for the budget planner."""

from budget_planner.models.base import Base, TimestampMixin
from budget_planner.models.budget import CategoryRecord, ExpenseRecord, IncomeRecord

__all__ = [
    "Base",
    "TimestampMixin",
    "CategoryRecord",
    "ExpenseRecord",
    "IncomeRecord",
]
