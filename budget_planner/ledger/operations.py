"""Pure ledger transitions over immutable category snapshots.

This module contains the functional core for category and expense mutations:
- Every operation takes a snapshot and returns a new one
- Failures raise before anything is built, so no partial result escapes
- actual_spent is recomputed from the full expense list after every expense
  change, never incremented

All monetary amounts are Decimal rounded to the cent.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import date
from decimal import Decimal

from budget_planner.core.errors import DuplicateNameError, NotFoundError, ValidationError
from budget_planner.ledger.models import Categories, Category, Expense, sum_expenses
from budget_planner.ledger.validation import (
    DateInput,
    NumericInput,
    parse_date,
    parse_decimal,
    raise_for_invalid,
    validate_category_name,
    validate_expense_amount,
    validate_expense_date,
    validate_expense_description,
    validate_planned_amount,
)
from budget_planner.tax.calculator import round_currency

IdFactory = Callable[[], str]


def new_id() -> str:
    """Generate an opaque id."""
    return str(uuid.uuid4())


# =============================================================================
# Lookups
# =============================================================================


def _category_index(categories: Categories, category_id: str) -> int:
    for index, category in enumerate(categories):
        if category.id == category_id:
            return index
    raise NotFoundError("category", category_id)


def _expense_position(categories: Categories, expense_id: str) -> tuple[int, int]:
    for category_index, category in enumerate(categories):
        for expense_index, expense in enumerate(category.expenses):
            if expense.id == expense_id:
                return category_index, expense_index
    raise NotFoundError("expense", expense_id)


def find_category(categories: Categories, category_id: str) -> Category:
    """Return the category with this id.

    Raises:
        NotFoundError: If no category has the id.
    """
    return categories[_category_index(categories, category_id)]


def find_expense(categories: Categories, expense_id: str) -> tuple[Category, Expense]:
    """Return (owning category, expense) for a globally unique expense id.

    Raises:
        NotFoundError: If no category holds the expense.
    """
    category_index, expense_index = _expense_position(categories, expense_id)
    category = categories[category_index]
    return category, category.expenses[expense_index]


def get_expenses_by_category(categories: Categories, category_id: str) -> tuple[Expense, ...]:
    """Return the expenses owned by a category, in insertion order.

    Raises:
        NotFoundError: If the category does not exist (e.g. it was deleted).
    """
    return find_category(categories, category_id).expenses


def all_expenses(categories: Categories) -> list[Expense]:
    """Every expense across categories, newest date first."""
    expenses = [expense for category in categories for expense in category.expenses]
    return sorted(expenses, key=lambda expense: expense.date, reverse=True)


# =============================================================================
# Helpers
# =============================================================================


def _with_expenses(category: Category, expenses: tuple[Expense, ...]) -> Category:
    """Replace a category's expenses and re-derive actual_spent from them."""
    return replace(category, expenses=expenses, actual_spent=sum_expenses(expenses))


def _replace_at(categories: Categories, index: int, category: Category) -> Categories:
    return tuple(categories[:index]) + (category,) + tuple(categories[index + 1 :])


def _check_unique_name(
    categories: Categories, name: str, exclude_id: str | None = None
) -> None:
    lowered = name.lower()
    for category in categories:
        if category.id != exclude_id and category.name.lower() == lowered:
            raise DuplicateNameError(name)


def _validated_category_fields(
    name: str, planned_amount: NumericInput
) -> tuple[str, Decimal]:
    raise_for_invalid(
        validate_category_name(name),
        validate_planned_amount(planned_amount),
    )
    return name.strip(), round_currency(parse_decimal(planned_amount))


def _validated_expense_fields(
    amount: NumericInput,
    description: str,
    expense_date: DateInput,
    today: date | None,
) -> tuple[Decimal, str, date]:
    raise_for_invalid(
        validate_expense_amount(amount),
        validate_expense_description(description),
        validate_expense_date(expense_date, today=today),
    )
    money = round_currency(parse_decimal(amount))
    if money <= 0:
        raise ValidationError("amount", "Expense amount must be greater than zero")
    return money, description.strip(), parse_date(expense_date)


def default_categories(names: Iterable[str], id_factory: IdFactory = new_id) -> Categories:
    """Build the first-run categories with nothing planned or spent."""
    return tuple(
        Category(id=id_factory(), name=name, planned_amount=Decimal("0.00"))
        for name in names
    )


# =============================================================================
# Category Mutations
# =============================================================================


def create_category(
    categories: Categories,
    name: str,
    planned_amount: NumericInput,
    *,
    category_id: str | None = None,
    id_factory: IdFactory = new_id,
) -> Categories:
    """Append a new, empty category.

    Args:
        categories: Current snapshot.
        name: 2-50 characters, no < > " ' &, unique ignoring case.
        planned_amount: Zero or more.
        category_id: Keep a caller-assigned id instead of generating one.
        id_factory: Id generator used when category_id is not given.

    Returns:
        New snapshot with the category appended.

    Raises:
        ValidationError: If a field is malformed.
        DuplicateNameError: If the name is already taken.
    """
    clean_name, planned = _validated_category_fields(name, planned_amount)
    _check_unique_name(categories, clean_name)

    category = Category(
        id=category_id or id_factory(),
        name=clean_name,
        planned_amount=planned,
    )
    return tuple(categories) + (category,)


def update_category(
    categories: Categories,
    category_id: str,
    name: str,
    planned_amount: NumericInput,
) -> Categories:
    """Rename and/or replan a category, keeping its expenses.

    Raises:
        NotFoundError: If the category does not exist.
        ValidationError: If a field is malformed.
        DuplicateNameError: If another category already uses the name.
    """
    index = _category_index(categories, category_id)
    clean_name, planned = _validated_category_fields(name, planned_amount)
    _check_unique_name(categories, clean_name, exclude_id=category_id)

    updated = replace(categories[index], name=clean_name, planned_amount=planned)
    return _replace_at(categories, index, updated)


def delete_category(categories: Categories, category_id: str) -> Categories:
    """Remove a category together with all of its expenses.

    Raises:
        NotFoundError: If the category does not exist.
    """
    index = _category_index(categories, category_id)
    return tuple(categories[:index]) + tuple(categories[index + 1 :])


# =============================================================================
# Expense Mutations
# =============================================================================


def add_expense(
    categories: Categories,
    category_id: str,
    amount: NumericInput,
    description: str,
    expense_date: DateInput,
    *,
    expense_id: str | None = None,
    id_factory: IdFactory = new_id,
    today: date | None = None,
) -> Categories:
    """Record an expense against a category.

    Raises:
        ValidationError: If amount, description or date is malformed.
        NotFoundError: If the category does not exist.
    """
    money, clean_description, parsed_date = _validated_expense_fields(
        amount, description, expense_date, today
    )
    index = _category_index(categories, category_id)
    category = categories[index]

    expense = Expense(
        id=expense_id or id_factory(),
        category_id=category_id,
        amount=money,
        description=clean_description,
        date=parsed_date,
    )
    return _replace_at(
        categories, index, _with_expenses(category, category.expenses + (expense,))
    )


def update_expense(
    categories: Categories,
    expense_id: str,
    amount: NumericInput,
    description: str,
    expense_date: DateInput,
    *,
    today: date | None = None,
) -> Categories:
    """Replace an expense's amount, description and date.

    Raises:
        ValidationError: If a field is malformed.
        NotFoundError: If no category holds the expense.
    """
    money, clean_description, parsed_date = _validated_expense_fields(
        amount, description, expense_date, today
    )
    category_index, expense_index = _expense_position(categories, expense_id)
    category = categories[category_index]

    updated = replace(
        category.expenses[expense_index],
        amount=money,
        description=clean_description,
        date=parsed_date,
    )
    expenses = (
        category.expenses[:expense_index]
        + (updated,)
        + category.expenses[expense_index + 1 :]
    )
    return _replace_at(categories, category_index, _with_expenses(category, expenses))


def delete_expense(categories: Categories, expense_id: str) -> Categories:
    """Remove an expense from its owning category.

    Raises:
        NotFoundError: If no category holds the expense.
    """
    category_index, expense_index = _expense_position(categories, expense_id)
    category = categories[category_index]

    expenses = category.expenses[:expense_index] + category.expenses[expense_index + 1 :]
    return _replace_at(categories, category_index, _with_expenses(category, expenses))
