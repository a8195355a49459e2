"""Randomized operation sequences checking ledger invariants."""

import random
from datetime import date, timedelta
from decimal import Decimal

import pytest

from budget_planner.core.errors import BudgetError
from budget_planner.ledger import operations
from budget_planner.ledger.models import Categories


def _random_amount(rng: random.Random) -> Decimal:
    return Decimal(rng.randint(1, 500_000)) / 100


def _step(rng: random.Random, categories: Categories, today: date) -> Categories:
    """Apply one random mutation; invalid choices raise BudgetError."""
    expense_ids = [expense.id for category in categories for expense in category.expenses]
    choice = rng.choice(["add", "add", "update", "delete", "create", "drop"])
    day = today - timedelta(days=rng.randint(0, 60))

    if choice == "create" or not categories:
        return operations.create_category(
            categories, f"Category {rng.randint(0, 30)}", _random_amount(rng)
        )
    if choice == "drop":
        return operations.delete_category(categories, rng.choice(categories).id)
    if choice == "add":
        return operations.add_expense(
            categories, rng.choice(categories).id, _random_amount(rng), "Random spend", day,
            today=today,
        )
    if not expense_ids:
        # update/delete on a stale id must fail cleanly
        target = "stale-id"
    else:
        target = rng.choice(expense_ids)
    if choice == "update":
        return operations.update_expense(
            categories, target, _random_amount(rng), "Changed spend", day, today=today
        )
    return operations.delete_expense(categories, target)


@pytest.mark.parametrize("seed", range(25))
def test_actual_spent_always_equals_expense_sum(seed: int, today: date) -> None:
    """After any operation sequence, every category's spent equals its expense sum."""
    rng = random.Random(seed)
    categories: Categories = ()

    for _ in range(150):
        before = [category.to_dict() for category in categories]
        try:
            categories = _step(rng, categories, today)
        except BudgetError:
            # a rejected operation leaves its input untouched
            assert [category.to_dict() for category in categories] == before
            continue

        names = [category.name.lower() for category in categories]
        assert len(names) == len(set(names))
        for category in categories:
            assert category.actual_spent == sum(
                (expense.amount for expense in category.expenses), Decimal("0")
            )
            assert all(expense.category_id == category.id for expense in category.expenses)

        expense_ids = [e.id for category in categories for e in category.expenses]
        assert len(expense_ids) == len(set(expense_ids))
