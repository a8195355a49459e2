"""Budget planner service.

Binds the pure ledger and tax functions to a durable store through the
optimistic reconciler. Callers see each mutation immediately; a failed write
rolls the ledger back to the last confirmed snapshot and re-raises.
"""

from collections.abc import Iterable
from datetime import date
from functools import partial

from budget_planner.core.errors import DuplicateNameError, ValidationError
from budget_planner.core.logging import get_logger
from budget_planner.ledger import operations
from budget_planner.ledger.aggregation import FinancialSummary, summarize
from budget_planner.ledger.models import BudgetSnapshot, Categories, Category, Expense
from budget_planner.ledger.validation import (
    DateInput,
    NumericInput,
    parse_decimal,
    raise_for_invalid,
    validate_gross_pay,
)
from budget_planner.orchestration.reconciler import OptimisticReconciler, PendingMutation
from budget_planner.persistence.base import BudgetStore
from budget_planner.tax.calculator import PayBreakdown, compute_net_pay
from budget_planner.tax.rates import DEFAULT_RATES, StatutoryRates

logger = get_logger(__name__)


class BudgetPlanner:
    """Application service holding the current income and ledger.

    Usage:
        planner = BudgetPlanner(SqlBudgetStore(session_factory))
        await planner.load()
        await planner.set_gross_pay("40000")
        category = await planner.create_category("Groceries", "8000")
    """

    def __init__(
        self,
        store: BudgetStore,
        default_names: Iterable[str] = (),
        rates: StatutoryRates = DEFAULT_RATES,
    ) -> None:
        """Initialize planner.

        Args:
            store: Durable store for income, categories and expenses.
            default_names: Categories created when the store holds none.
            rates: Statutory rates used for pay calculations.
        """
        self.store = store
        self.default_names = tuple(default_names)
        self.rates = rates
        self.income: PayBreakdown | None = None
        self.reconciler = OptimisticReconciler(on_rollback=self._log_rollback)

    @property
    def categories(self) -> Categories:
        """Visible ledger, including mutations whose writes are in flight."""
        return self.reconciler.visible

    def _log_rollback(self, pending: PendingMutation) -> None:
        logger.info(
            "ledger_reverted",
            mutation_id=pending.mutation_id,
            categories=len(self.reconciler.visible),
        )

    async def load(self) -> BudgetSnapshot:
        """Load income and categories, seeding the default categories on first run."""
        self.income = await self.store.load_income()
        categories = await self.store.load_categories()

        if not categories and self.default_names:
            categories = await self._seed_defaults()

        self.reconciler.reset(categories)
        return self.snapshot()

    async def _seed_defaults(self) -> Categories:
        categories = operations.default_categories(self.default_names)
        try:
            for category in categories:
                await self.store.create_category(
                    category.name, category.planned_amount, category_id=category.id
                )
        except DuplicateNameError:
            # another loader seeded first
            logger.info("default_categories_already_seeded")
            return await self.store.load_categories()
        logger.info("default_categories_seeded", count=len(categories))
        return categories

    def snapshot(self) -> BudgetSnapshot:
        return BudgetSnapshot(income=self.income, categories=self.categories)

    def summary(self) -> FinancialSummary:
        return summarize(self.categories, self.income)

    # -------------------------------------------------------------------------
    # Income
    # -------------------------------------------------------------------------

    async def set_gross_pay(self, gross_pay: NumericInput) -> PayBreakdown:
        """Compute and store the deduction breakdown for a gross salary.

        Raises:
            ValidationError: If gross pay is not a number between 0 and 10,000,000.
            PersistenceError: If the breakdown could not be saved.
        """
        raise_for_invalid(validate_gross_pay(gross_pay))
        amount = parse_decimal(gross_pay)
        if amount is None:
            raise ValidationError("gross_pay", "Gross pay must be a valid number")

        breakdown = compute_net_pay(amount, self.rates)
        self.income = await self.store.save_income(breakdown)
        logger.info("gross_pay_set", gross_pay=breakdown.gross_pay, net_pay=breakdown.net_pay)
        return self.income

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def create_category(self, name: str, planned_amount: NumericInput) -> Category:
        category_id = operations.new_id()

        async def write(snapshot: Categories) -> Category:
            category = operations.find_category(snapshot, category_id)
            return await self.store.create_category(
                category.name, category.planned_amount, category_id=category_id
            )

        categories = await self.reconciler.apply(
            partial(
                operations.create_category,
                name=name,
                planned_amount=planned_amount,
                category_id=category_id,
            ),
            write,
            description="create_category",
        )
        return operations.find_category(categories, category_id)

    async def update_category(
        self, category_id: str, name: str, planned_amount: NumericInput
    ) -> Category:
        async def write(snapshot: Categories) -> Category:
            category = operations.find_category(snapshot, category_id)
            return await self.store.update_category(
                category_id, category.name, category.planned_amount
            )

        categories = await self.reconciler.apply(
            partial(
                operations.update_category,
                category_id=category_id,
                name=name,
                planned_amount=planned_amount,
            ),
            write,
            description="update_category",
        )
        return operations.find_category(categories, category_id)

    async def delete_category(self, category_id: str) -> None:
        async def write(snapshot: Categories) -> None:
            await self.store.delete_category(category_id)

        await self.reconciler.apply(
            partial(operations.delete_category, category_id=category_id),
            write,
            description="delete_category",
        )

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    async def add_expense(
        self,
        category_id: str,
        amount: NumericInput,
        description: str,
        expense_date: DateInput,
        *,
        today: date | None = None,
    ) -> Expense:
        expense_id = operations.new_id()

        async def write(snapshot: Categories) -> Expense:
            _, expense = operations.find_expense(snapshot, expense_id)
            return await self.store.add_expense(
                category_id,
                expense.amount,
                expense.description,
                expense.date,
                expense_id=expense_id,
            )

        categories = await self.reconciler.apply(
            partial(
                operations.add_expense,
                category_id=category_id,
                amount=amount,
                description=description,
                expense_date=expense_date,
                expense_id=expense_id,
                today=today,
            ),
            write,
            description="add_expense",
        )
        return operations.find_expense(categories, expense_id)[1]

    async def update_expense(
        self,
        expense_id: str,
        amount: NumericInput,
        description: str,
        expense_date: DateInput,
        *,
        today: date | None = None,
    ) -> Expense:
        async def write(snapshot: Categories) -> Expense:
            _, expense = operations.find_expense(snapshot, expense_id)
            return await self.store.update_expense(
                expense_id, expense.amount, expense.description, expense.date
            )

        categories = await self.reconciler.apply(
            partial(
                operations.update_expense,
                expense_id=expense_id,
                amount=amount,
                description=description,
                expense_date=expense_date,
                today=today,
            ),
            write,
            description="update_expense",
        )
        return operations.find_expense(categories, expense_id)[1]

    async def delete_expense(self, expense_id: str) -> None:
        async def write(snapshot: Categories) -> None:
            await self.store.delete_expense(expense_id)

        await self.reconciler.apply(
            partial(operations.delete_expense, expense_id=expense_id),
            write,
            description="delete_expense",
        )

    def expenses_for(self, category_id: str) -> tuple[Expense, ...]:
        """Expenses owned by a category in the visible ledger.

        Raises:
            NotFoundError: If the category does not exist.
        """
        return operations.get_expenses_by_category(self.categories, category_id)
