"""Immutable ledger types.

A ledger snapshot is a tuple of Category values; every mutation returns a new
tuple and leaves the previous one untouched, so "did anything change" is a
plain equality check.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from budget_planner.tax.calculator import PayBreakdown


@dataclass(frozen=True)
class Expense:
    """A single expense owned by exactly one category.

    Attributes:
        id: Globally unique expense id.
        category_id: Id of the owning category.
        amount: Positive amount spent.
        description: Trimmed description, 3-100 characters.
        date: Calendar date the money was spent.
    """

    id: str
    category_id: str
    amount: Decimal
    description: str
    date: date

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys and an ISO date."""
        return {
            "id": self.id,
            "categoryId": self.category_id,
            "amount": str(self.amount),
            "description": self.description,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Expense:
        """Rebuild an expense from its serialized form."""
        raw_date = data["date"]
        return cls(
            id=str(data["id"]),
            category_id=str(data["categoryId"]),
            amount=Decimal(str(data["amount"])),
            description=data["description"],
            date=raw_date if isinstance(raw_date, date) else date.fromisoformat(raw_date[:10]),
        )


@dataclass(frozen=True)
class Category:
    """A budget bucket with a planned amount and its owned expenses.

    actual_spent is derived: it always equals the sum of expense amounts.
    Build instances through the ledger operations rather than by hand.
    """

    id: str
    name: str
    planned_amount: Decimal
    actual_spent: Decimal = Decimal("0")
    expenses: tuple[Expense, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, embedding expenses."""
        return {
            "id": self.id,
            "name": self.name,
            "plannedAmount": str(self.planned_amount),
            "actualSpent": str(self.actual_spent),
            "expenses": [expense.to_dict() for expense in self.expenses],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Category:
        """Rebuild a category; actual_spent is recomputed from the expenses."""
        expenses = tuple(Expense.from_dict(item) for item in data.get("expenses") or [])
        return cls(
            id=str(data["id"]),
            name=data["name"],
            planned_amount=Decimal(str(data.get("plannedAmount", "0"))),
            actual_spent=sum_expenses(expenses),
            expenses=expenses,
        )


Categories = tuple[Category, ...]


@dataclass(frozen=True)
class BudgetSnapshot:
    """Persisted application state: current income plus every category."""

    income: PayBreakdown | None = None
    categories: Categories = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "income": self.income.to_dict() if self.income is not None else None,
            "categories": [category.to_dict() for category in self.categories],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BudgetSnapshot:
        income = data.get("income")
        return cls(
            income=PayBreakdown.from_dict(income) if income else None,
            categories=tuple(
                Category.from_dict(item) for item in data.get("categories") or []
            ),
        )


def sum_expenses(expenses: tuple[Expense, ...]) -> Decimal:
    """Sum expense amounts; the only way actual_spent is ever computed."""
    return sum((expense.amount for expense in expenses), Decimal("0"))
