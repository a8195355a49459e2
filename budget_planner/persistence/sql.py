"""SQLAlchemy-backed budget store."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from budget_planner.core.errors import (
    BudgetError,
    DuplicateNameError,
    NotFoundError,
    PersistenceError,
)
from budget_planner.core.logging import get_logger
from budget_planner.ledger.models import Categories, Category, Expense, sum_expenses
from budget_planner.ledger.operations import new_id
from budget_planner.models import CategoryRecord, ExpenseRecord, IncomeRecord
from budget_planner.tax.calculator import PayBreakdown, round_currency

logger = get_logger(__name__)


def _to_expense(record: ExpenseRecord) -> Expense:
    return Expense(
        id=record.id,
        category_id=record.category_id,
        amount=Decimal(record.amount),
        description=record.description,
        date=record.expense_date,
    )


def _to_category(record: CategoryRecord, expenses: tuple[Expense, ...]) -> Category:
    return Category(
        id=record.id,
        name=record.name,
        planned_amount=Decimal(record.planned_amount),
        actual_spent=sum_expenses(expenses),
        expenses=expenses,
    )


def _to_breakdown(record: IncomeRecord) -> PayBreakdown:
    return PayBreakdown(
        gross_pay=Decimal(record.gross_pay),
        sha=Decimal(record.sha),
        payee=Decimal(record.payee),
        housing_levy=Decimal(record.housing_levy),
        total_deductions=Decimal(record.total_deductions),
        net_pay=Decimal(record.net_pay),
    )


class SqlBudgetStore:
    """Budget store over the incomes, categories and expenses tables.

    Each operation runs in its own transaction. The stored actual_spent column
    is rewritten from the expense rows after every expense change.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize store.

        Args:
            session_factory: Factory producing sessions bound to the database.
        """
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Open a session inside a transaction and map driver errors."""
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except BudgetError:
            raise
        except SQLAlchemyError as exc:
            logger.error("store_operation_failed", operation=operation, error=str(exc))
            raise PersistenceError(f"Failed to {operation}: {exc}") from exc

    # -------------------------------------------------------------------------
    # Income
    # -------------------------------------------------------------------------

    async def load_income(self) -> PayBreakdown | None:
        """Return the current pay breakdown, or None if none was saved."""
        async with self._transaction("load income") as session:
            result = await session.execute(
                select(IncomeRecord)
                .where(IncomeRecord.is_current.is_(True))
                .order_by(IncomeRecord.id.desc())
                .limit(1)
            )
            record = result.scalar_one_or_none()
            return _to_breakdown(record) if record is not None else None

    async def save_income(self, breakdown: PayBreakdown) -> PayBreakdown:
        """Store a breakdown as the current income, keeping prior rows as history."""
        async with self._transaction("save income") as session:
            await session.execute(
                update(IncomeRecord)
                .where(IncomeRecord.is_current.is_(True))
                .values(is_current=False)
            )
            session.add(
                IncomeRecord(
                    gross_pay=breakdown.gross_pay,
                    sha=breakdown.sha,
                    payee=breakdown.payee,
                    housing_levy=breakdown.housing_levy,
                    total_deductions=breakdown.total_deductions,
                    net_pay=breakdown.net_pay,
                    is_current=True,
                )
            )
        logger.info("income_saved", gross_pay=breakdown.gross_pay, net_pay=breakdown.net_pay)
        return breakdown

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def load_categories(self) -> Categories:
        """Return every category with its expenses, in display order."""
        async with self._transaction("load categories") as session:
            result = await session.execute(
                select(CategoryRecord)
                .options(selectinload(CategoryRecord.expenses))
                .order_by(CategoryRecord.display_order, CategoryRecord.created_at)
            )
            return tuple(
                _to_category(
                    record, tuple(_to_expense(expense) for expense in record.expenses)
                )
                for record in result.scalars().all()
            )

    async def _check_name_free(
        self, session: AsyncSession, name: str, exclude_id: str | None = None
    ) -> None:
        stmt = select(CategoryRecord.id).where(CategoryRecord.name_key == name.lower())
        if exclude_id is not None:
            stmt = stmt.where(CategoryRecord.id != exclude_id)
        result = await session.execute(stmt)
        if result.first() is not None:
            raise DuplicateNameError(name)

    async def _flush_category(self, session: AsyncSession, name: str) -> None:
        try:
            await session.flush()
        except IntegrityError as exc:
            raise DuplicateNameError(name) from exc

    async def create_category(
        self,
        name: str,
        planned_amount: Decimal,
        *,
        category_id: str | None = None,
    ) -> Category:
        """Insert a new category after the existing ones.

        Raises:
            DuplicateNameError: If the name is taken (case-insensitive).
        """
        async with self._transaction("create category") as session:
            await self._check_name_free(session, name)
            max_order = await session.scalar(
                select(func.coalesce(func.max(CategoryRecord.display_order), -1))
            )
            record = CategoryRecord(
                id=category_id or new_id(),
                name=name,
                name_key=name.lower(),
                planned_amount=planned_amount,
                actual_spent=Decimal("0.00"),
                display_order=int(max_order) + 1,
            )
            session.add(record)
            await self._flush_category(session, name)
            return _to_category(record, ())

    async def update_category(
        self, category_id: str, name: str, planned_amount: Decimal
    ) -> Category:
        """Rename and replan a category.

        Raises:
            NotFoundError: If the category does not exist.
            DuplicateNameError: If another category uses the name.
        """
        async with self._transaction("update category") as session:
            record = await session.get(
                CategoryRecord,
                category_id,
                options=[selectinload(CategoryRecord.expenses)],
            )
            if record is None:
                raise NotFoundError("category", category_id)
            await self._check_name_free(session, name, exclude_id=category_id)

            record.name = name
            record.name_key = name.lower()
            record.planned_amount = planned_amount
            await self._flush_category(session, name)
            return _to_category(
                record, tuple(_to_expense(expense) for expense in record.expenses)
            )

    async def delete_category(self, category_id: str) -> None:
        """Delete a category and every expense it owns.

        Raises:
            NotFoundError: If the category does not exist.
        """
        async with self._transaction("delete category") as session:
            record = await session.get(CategoryRecord, category_id)
            if record is None:
                raise NotFoundError("category", category_id)
            # sqlite only honours ON DELETE CASCADE with foreign_keys enabled
            await session.execute(
                delete(ExpenseRecord).where(ExpenseRecord.category_id == category_id)
            )
            await session.execute(
                delete(CategoryRecord).where(CategoryRecord.id == category_id)
            )

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    async def _refresh_spent(self, session: AsyncSession, category_id: str) -> None:
        await session.flush()
        total = await session.scalar(
            select(func.coalesce(func.sum(ExpenseRecord.amount), 0)).where(
                ExpenseRecord.category_id == category_id
            )
        )
        await session.execute(
            update(CategoryRecord)
            .where(CategoryRecord.id == category_id)
            .values(actual_spent=round_currency(Decimal(str(total))))
        )

    async def add_expense(
        self,
        category_id: str,
        amount: Decimal,
        description: str,
        expense_date: date,
        *,
        expense_id: str | None = None,
    ) -> Expense:
        """Append an expense to a category.

        Raises:
            NotFoundError: If the category does not exist.
        """
        async with self._transaction("add expense") as session:
            category = await session.get(CategoryRecord, category_id)
            if category is None:
                raise NotFoundError("category", category_id)
            max_position = await session.scalar(
                select(func.coalesce(func.max(ExpenseRecord.position), -1)).where(
                    ExpenseRecord.category_id == category_id
                )
            )
            record = ExpenseRecord(
                id=expense_id or new_id(),
                category_id=category_id,
                amount=amount,
                description=description,
                expense_date=expense_date,
                position=int(max_position) + 1,
            )
            session.add(record)
            await self._refresh_spent(session, category_id)
            return _to_expense(record)

    async def update_expense(
        self,
        expense_id: str,
        amount: Decimal,
        description: str,
        expense_date: date,
    ) -> Expense:
        """Replace an expense's amount, description and date.

        Raises:
            NotFoundError: If the expense does not exist.
        """
        async with self._transaction("update expense") as session:
            record = await session.get(ExpenseRecord, expense_id)
            if record is None:
                raise NotFoundError("expense", expense_id)
            record.amount = amount
            record.description = description
            record.expense_date = expense_date
            await self._refresh_spent(session, record.category_id)
            return _to_expense(record)

    async def delete_expense(self, expense_id: str) -> None:
        """Delete one expense.

        Raises:
            NotFoundError: If the expense does not exist.
        """
        async with self._transaction("delete expense") as session:
            record = await session.get(ExpenseRecord, expense_id)
            if record is None:
                raise NotFoundError("expense", expense_id)
            category_id = record.category_id
            await session.execute(
                delete(ExpenseRecord).where(ExpenseRecord.id == expense_id)
            )
            await self._refresh_spent(session, category_id)
