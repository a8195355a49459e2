"""Durable stores for the budget ledger."""

from budget_planner.persistence.base import BudgetStore
from budget_planner.persistence.migration import (
    MigrationReport,
    backup_snapshot,
    migrate_snapshot,
)
from budget_planner.persistence.snapshot import SnapshotStore
from budget_planner.persistence.sql import SqlBudgetStore

__all__ = [
    "BudgetStore",
    "MigrationReport",
    "SnapshotStore",
    "SqlBudgetStore",
    "backup_snapshot",
    "migrate_snapshot",
]
