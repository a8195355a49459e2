"""Durable store contract consumed by the planner and the reconciler."""

from datetime import date
from decimal import Decimal
from typing import Protocol, runtime_checkable

from budget_planner.ledger.models import Categories, Category, Expense
from budget_planner.tax.calculator import PayBreakdown


@runtime_checkable
class BudgetStore(Protocol):
    """Async persistence for income, categories and expenses.

    Amounts and names arrive already validated by the ledger. Creates accept
    the id the ledger assigned so speculative and durable state agree.
    Implementations raise NotFoundError for unknown ids, DuplicateNameError
    for name collisions and PersistenceError for I/O failures.
    """

    async def load_income(self) -> PayBreakdown | None: ...

    async def save_income(self, breakdown: PayBreakdown) -> PayBreakdown: ...

    async def load_categories(self) -> Categories: ...

    async def create_category(
        self,
        name: str,
        planned_amount: Decimal,
        *,
        category_id: str | None = None,
    ) -> Category: ...

    async def update_category(
        self, category_id: str, name: str, planned_amount: Decimal
    ) -> Category: ...

    async def delete_category(self, category_id: str) -> None: ...

    async def add_expense(
        self,
        category_id: str,
        amount: Decimal,
        description: str,
        expense_date: date,
        *,
        expense_id: str | None = None,
    ) -> Expense: ...

    async def update_expense(
        self,
        expense_id: str,
        amount: Decimal,
        description: str,
        expense_date: date,
    ) -> Expense: ...

    async def delete_expense(self, expense_id: str) -> None: ...
