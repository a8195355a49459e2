"""Read-side budget queries over a ledger snapshot.

Pure functions, no mutation. Remaining budget may go negative; that is a
signal to the user, not an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from budget_planner.ledger.models import Categories, Category
from budget_planner.ledger.operations import find_category
from budget_planner.tax.calculator import PayBreakdown

NEAR_LIMIT_RATIO = Decimal("0.8")
ZERO = Decimal("0")


class CategoryStatus(str, Enum):
    """Spending status of a category against its plan."""

    OVER_BUDGET = "over_budget"
    NEAR_LIMIT = "near_limit"
    ON_TRACK = "on_track"


@dataclass(frozen=True)
class CategorySummary:
    """Immutable spending summary for a single category."""

    category_id: str
    name: str
    planned: Decimal
    spent: Decimal
    remaining: Decimal
    ratio: Decimal | None
    status: CategoryStatus


@dataclass(frozen=True)
class FinancialSummary:
    """Immutable budget summary combining income and the ledger."""

    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    total_allocated: Decimal
    remaining_budget: Decimal
    total_spent: Decimal
    unspent: Decimal
    over_allocated: bool
    categories: list[CategorySummary]


def total_allocated(categories: Categories) -> Decimal:
    """Sum of planned amounts across all categories."""
    return sum((category.planned_amount for category in categories), ZERO)


def remaining_budget(categories: Categories, net_pay: Decimal) -> Decimal:
    """Net pay left after planned allocations (negative when over-allocated)."""
    return net_pay - total_allocated(categories)


def total_spent(categories: Categories) -> Decimal:
    """Sum of actual spending across all categories."""
    return sum((category.actual_spent for category in categories), ZERO)


def category_spending(categories: Categories, category_id: str) -> Decimal:
    """Actual spending of one category.

    Raises:
        NotFoundError: If the category does not exist.
    """
    return find_category(categories, category_id).actual_spent


def spending_ratio(category: Category) -> Decimal | None:
    """Spent / planned, or None when nothing is planned."""
    if category.planned_amount == ZERO:
        return None
    return category.actual_spent / category.planned_amount


def classify_category(category: Category) -> CategoryStatus:
    """Classify a category as over budget, near its limit, or on track.

    A category with nothing planned is over budget as soon as anything is
    spent against it.
    """
    if category.actual_spent > category.planned_amount:
        return CategoryStatus.OVER_BUDGET

    ratio = spending_ratio(category)
    if ratio is not None and NEAR_LIMIT_RATIO <= ratio <= Decimal("1"):
        return CategoryStatus.NEAR_LIMIT

    return CategoryStatus.ON_TRACK


def summarize_category(category: Category) -> CategorySummary:
    """Build the summary row for one category."""
    return CategorySummary(
        category_id=category.id,
        name=category.name,
        planned=category.planned_amount,
        spent=category.actual_spent,
        remaining=category.planned_amount - category.actual_spent,
        ratio=spending_ratio(category),
        status=classify_category(category),
    )


def summarize(categories: Categories, income: PayBreakdown | None) -> FinancialSummary:
    """Compute the full budget summary.

    Args:
        categories: Ledger snapshot.
        income: Current pay breakdown, or None before any salary is entered.

    Returns:
        FinancialSummary with totals and per-category statuses.
    """
    gross = income.gross_pay if income is not None else ZERO
    deductions = income.total_deductions if income is not None else ZERO
    net = income.net_pay if income is not None else ZERO

    allocated = total_allocated(categories)
    spent = total_spent(categories)
    remaining = remaining_budget(categories, net)

    return FinancialSummary(
        gross_pay=gross,
        total_deductions=deductions,
        net_pay=net,
        total_allocated=allocated,
        remaining_budget=remaining,
        total_spent=spent,
        unspent=allocated - spent,
        over_allocated=remaining < ZERO,
        categories=[summarize_category(category) for category in categories],
    )
