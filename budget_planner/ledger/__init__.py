"""Budget ledger: categories, expenses and the queries over them."""

from budget_planner.ledger.aggregation import (
    CategoryStatus,
    CategorySummary,
    FinancialSummary,
    category_spending,
    classify_category,
    remaining_budget,
    spending_ratio,
    summarize,
    total_allocated,
    total_spent,
)
from budget_planner.ledger.models import BudgetSnapshot, Categories, Category, Expense
from budget_planner.ledger.operations import (
    add_expense,
    all_expenses,
    create_category,
    default_categories,
    delete_category,
    delete_expense,
    find_category,
    find_expense,
    get_expenses_by_category,
    update_category,
    update_expense,
)

__all__ = [
    # Models
    "BudgetSnapshot",
    "Categories",
    "Category",
    "Expense",
    # Mutations
    "add_expense",
    "create_category",
    "delete_category",
    "delete_expense",
    "update_category",
    "update_expense",
    "default_categories",
    # Lookups
    "all_expenses",
    "find_category",
    "find_expense",
    "get_expenses_by_category",
    # Aggregation
    "CategoryStatus",
    "CategorySummary",
    "FinancialSummary",
    "category_spending",
    "classify_category",
    "remaining_budget",
    "spending_ratio",
    "summarize",
    "total_allocated",
    "total_spent",
]
