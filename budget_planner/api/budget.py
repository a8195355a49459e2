"""Budget API endpoints: income, categories, expenses and the summary."""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from budget_planner.api.deps import get_planner
from budget_planner.core.config import settings
from budget_planner.ledger.aggregation import CategoryStatus, FinancialSummary
from budget_planner.ledger.models import Category, Expense
from budget_planner.orchestration.planner import BudgetPlanner
from budget_planner.tax.calculator import PayBreakdown

router = APIRouter(prefix="/api/budget", tags=["budget"])

# Amounts are accepted as numbers or numeric strings and validated by the ledger
AmountInput = str | int | float


class IncomeRequest(BaseModel):
    """Payload for setting the gross salary."""

    gross_pay: AmountInput


class CategoryRequest(BaseModel):
    """Payload for creating or updating a category."""

    name: str
    planned_amount: AmountInput = 0


class ExpenseRequest(BaseModel):
    """Payload for recording or updating an expense."""

    amount: AmountInput
    description: str
    date: str = Field(description="ISO date (YYYY-MM-DD)")


class IncomeResponse(BaseModel):
    """Pay breakdown response model."""

    gross_pay: Decimal
    sha: Decimal
    payee: Decimal
    housing_levy: Decimal
    total_deductions: Decimal
    net_pay: Decimal


class ExpenseResponse(BaseModel):
    """Expense response model."""

    id: str
    category_id: str
    amount: Decimal
    description: str
    date: date


class CategoryResponse(BaseModel):
    """Category response model with embedded expenses."""

    id: str
    name: str
    planned_amount: Decimal
    actual_spent: Decimal
    expenses: list[ExpenseResponse]


class CategorySummaryResponse(BaseModel):
    """Per-category spending summary."""

    category_id: str
    name: str
    planned: Decimal
    spent: Decimal
    remaining: Decimal
    ratio: Decimal | None
    status: CategoryStatus


class SummaryResponse(BaseModel):
    """Budget totals."""

    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    total_allocated: Decimal
    remaining_budget: Decimal
    total_spent: Decimal
    unspent: Decimal
    over_allocated: bool
    categories: list[CategorySummaryResponse]


class BudgetResponse(BaseModel):
    """Full budget: income, ledger and summary."""

    currency: str
    income: IncomeResponse | None
    categories: list[CategoryResponse]
    summary: SummaryResponse


def _to_income_response(breakdown: PayBreakdown) -> IncomeResponse:
    """Map a pay breakdown to its response model."""
    return IncomeResponse(
        gross_pay=breakdown.gross_pay,
        sha=breakdown.sha,
        payee=breakdown.payee,
        housing_levy=breakdown.housing_levy,
        total_deductions=breakdown.total_deductions,
        net_pay=breakdown.net_pay,
    )


def _to_expense_response(expense: Expense) -> ExpenseResponse:
    """Map a ledger expense to its response model."""
    return ExpenseResponse(
        id=expense.id,
        category_id=expense.category_id,
        amount=expense.amount,
        description=expense.description,
        date=expense.date,
    )


def _to_category_response(category: Category) -> CategoryResponse:
    """Map a ledger category to its response model."""
    return CategoryResponse(
        id=category.id,
        name=category.name,
        planned_amount=category.planned_amount,
        actual_spent=category.actual_spent,
        expenses=[_to_expense_response(expense) for expense in category.expenses],
    )


def _to_summary_response(summary: FinancialSummary) -> SummaryResponse:
    """Map a financial summary to its response model."""
    return SummaryResponse(
        gross_pay=summary.gross_pay,
        total_deductions=summary.total_deductions,
        net_pay=summary.net_pay,
        total_allocated=summary.total_allocated,
        remaining_budget=summary.remaining_budget,
        total_spent=summary.total_spent,
        unspent=summary.unspent,
        over_allocated=summary.over_allocated,
        categories=[
            CategorySummaryResponse(
                category_id=item.category_id,
                name=item.name,
                planned=item.planned,
                spent=item.spent,
                remaining=item.remaining,
                ratio=item.ratio,
                status=item.status,
            )
            for item in summary.categories
        ],
    )


@router.get("", response_model=BudgetResponse)
async def get_budget(
    planner: BudgetPlanner = Depends(get_planner),
) -> BudgetResponse:
    """Get income, categories with expenses, and the budget summary."""
    snapshot = planner.snapshot()
    return BudgetResponse(
        currency=settings.currency,
        income=_to_income_response(snapshot.income) if snapshot.income else None,
        categories=[_to_category_response(category) for category in snapshot.categories],
        summary=_to_summary_response(planner.summary()),
    )


@router.put("/income", response_model=IncomeResponse)
async def set_income(
    payload: IncomeRequest,
    planner: BudgetPlanner = Depends(get_planner),
) -> IncomeResponse:
    """Compute and store the deduction breakdown for a gross salary."""
    breakdown = await planner.set_gross_pay(payload.gross_pay)
    return _to_income_response(breakdown)


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    payload: CategoryRequest,
    planner: BudgetPlanner = Depends(get_planner),
) -> CategoryResponse:
    """Create a new category."""
    category = await planner.create_category(payload.name, payload.planned_amount)
    return _to_category_response(category)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    payload: CategoryRequest,
    planner: BudgetPlanner = Depends(get_planner),
) -> CategoryResponse:
    """Rename and replan a category."""
    category = await planner.update_category(
        category_id, payload.name, payload.planned_amount
    )
    return _to_category_response(category)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str,
    planner: BudgetPlanner = Depends(get_planner),
) -> Response:
    """Delete a category and all of its expenses."""
    await planner.delete_category(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/categories/{category_id}/expenses", response_model=list[ExpenseResponse])
async def list_category_expenses(
    category_id: str,
    planner: BudgetPlanner = Depends(get_planner),
) -> list[ExpenseResponse]:
    """List the expenses owned by a category."""
    return [_to_expense_response(expense) for expense in planner.expenses_for(category_id)]


@router.post(
    "/categories/{category_id}/expenses",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_expense(
    category_id: str,
    payload: ExpenseRequest,
    planner: BudgetPlanner = Depends(get_planner),
) -> ExpenseResponse:
    """Record an expense against a category."""
    expense = await planner.add_expense(
        category_id, payload.amount, payload.description, payload.date
    )
    return _to_expense_response(expense)


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse)
async def update_expense(
    expense_id: str,
    payload: ExpenseRequest,
    planner: BudgetPlanner = Depends(get_planner),
) -> ExpenseResponse:
    """Replace an expense's amount, description and date."""
    expense = await planner.update_expense(
        expense_id, payload.amount, payload.description, payload.date
    )
    return _to_expense_response(expense)


@router.delete("/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: str,
    planner: BudgetPlanner = Depends(get_planner),
) -> Response:
    """Delete an expense."""
    await planner.delete_expense(expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
