"""Tests for the budget planner service."""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from budget_planner.core.errors import (
    DuplicateNameError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from budget_planner.ledger.aggregation import CategoryStatus
from budget_planner.orchestration.planner import BudgetPlanner
from budget_planner.persistence import SnapshotStore, SqlBudgetStore

DEFAULTS = ["House Rent", "Transport", "Food"]


class FlakySnapshotStore(SnapshotStore):
    """Snapshot store whose expense writes fail while offline."""

    offline = False

    async def add_expense(self, *args, **kwargs):
        if self.offline:
            raise PersistenceError("Storage offline")
        return await super().add_expense(*args, **kwargs)


class TestLoad:
    """Tests for loading and first-run seeding."""

    @pytest.mark.asyncio
    async def test_seeds_defaults_into_empty_store(self, sql_store: SqlBudgetStore) -> None:
        """First load creates the default categories durably."""
        planner = BudgetPlanner(sql_store, DEFAULTS)

        snapshot = await planner.load()

        assert [category.name for category in snapshot.categories] == DEFAULTS
        assert snapshot.income is None
        stored = await sql_store.load_categories()
        assert [category.id for category in stored] == [
            category.id for category in snapshot.categories
        ]

    @pytest.mark.asyncio
    async def test_does_not_reseed(self, sql_store: SqlBudgetStore) -> None:
        """An existing ledger is loaded as-is."""
        await BudgetPlanner(sql_store, DEFAULTS).load()

        snapshot = await BudgetPlanner(sql_store, ["Other"]).load()

        assert [category.name for category in snapshot.categories] == DEFAULTS

    @pytest.mark.asyncio
    async def test_concurrent_first_loads_seed_once(
        self, snapshot_store: SnapshotStore
    ) -> None:
        """Two first-run loads racing on an empty store both succeed."""
        first, second = await asyncio.gather(
            BudgetPlanner(snapshot_store, DEFAULTS).load(),
            BudgetPlanner(snapshot_store, DEFAULTS).load(),
        )

        stored = await snapshot_store.load_categories()
        assert [category.name for category in stored] == DEFAULTS
        assert first.categories == stored or second.categories == stored

    @pytest.mark.asyncio
    async def test_concurrent_first_loads_on_sql_store(
        self, sql_store: SqlBudgetStore
    ) -> None:
        """A racing loader reads the winner's categories instead of failing."""
        results = await asyncio.gather(
            BudgetPlanner(sql_store, DEFAULTS).load(),
            BudgetPlanner(sql_store, DEFAULTS).load(),
            return_exceptions=True,
        )

        assert [type(result).__name__ for result in results] == [
            "BudgetSnapshot",
            "BudgetSnapshot",
        ]
        stored = await sql_store.load_categories()
        assert [category.name for category in stored] == DEFAULTS

    @pytest.mark.asyncio
    async def test_no_defaults(self, snapshot_store: SnapshotStore) -> None:
        """Without default names the ledger starts empty."""
        snapshot = await BudgetPlanner(snapshot_store).load()
        assert snapshot.categories == ()


class TestIncome:
    """Tests for set_gross_pay."""

    @pytest.mark.asyncio
    async def test_sets_and_persists_breakdown(self, sql_store: SqlBudgetStore) -> None:
        """The computed breakdown is stored and reloaded."""
        planner = BudgetPlanner(sql_store)
        await planner.load()

        breakdown = await planner.set_gross_pay("40000")

        assert breakdown.net_pay == Decimal("33916.65")
        assert planner.summary().net_pay == Decimal("33916.65")
        reloaded = BudgetPlanner(sql_store)
        assert (await reloaded.load()).income == breakdown

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["abc", -5, "20000000", ""])
    async def test_rejects_invalid_gross_pay(
        self, snapshot_store: SnapshotStore, value
    ) -> None:
        """Invalid salaries are rejected before anything is saved."""
        planner = BudgetPlanner(snapshot_store)
        await planner.load()

        with pytest.raises(ValidationError) as exc_info:
            await planner.set_gross_pay(value)

        assert exc_info.value.field == "gross_pay"
        assert await snapshot_store.load_income() is None


class TestMutations:
    """Tests for reconciled category and expense mutations."""

    @pytest.mark.asyncio
    async def test_category_lifecycle(self, sql_store: SqlBudgetStore) -> None:
        """Create, update and delete round-trip through the store."""
        planner = BudgetPlanner(sql_store)
        await planner.load()

        category = await planner.create_category(" Groceries ", "8000")
        assert category.name == "Groceries"

        updated = await planner.update_category(category.id, "Food", 9000)
        assert updated.planned_amount == Decimal("9000.00")

        stored = await sql_store.load_categories()
        assert [(c.id, c.name) for c in stored] == [(category.id, "Food")]

        await planner.delete_category(category.id)
        assert planner.categories == ()
        assert await sql_store.load_categories() == ()

    @pytest.mark.asyncio
    async def test_duplicate_name(self, snapshot_store: SnapshotStore) -> None:
        """Duplicate names fail before the write is attempted."""
        planner = BudgetPlanner(snapshot_store, DEFAULTS)
        await planner.load()

        with pytest.raises(DuplicateNameError):
            await planner.create_category("food", 100)

    @pytest.mark.asyncio
    async def test_expense_lifecycle(self, sql_store: SqlBudgetStore) -> None:
        """Expenses update spending in memory and in the store."""
        planner = BudgetPlanner(sql_store)
        await planner.load()
        category = await planner.create_category("Food", 1000)
        today = date.today()

        expense = await planner.add_expense(category.id, "850", "Groceries", today)
        assert planner.expenses_for(category.id) == (expense,)
        summary = planner.summary()
        assert summary.categories[0].status == CategoryStatus.NEAR_LIMIT

        await planner.update_expense(expense.id, 1200, "Big shop", today.isoformat())
        assert planner.summary().categories[0].status == CategoryStatus.OVER_BUDGET

        stored = await sql_store.load_categories()
        assert stored[0].actual_spent == Decimal("1200.00")
        assert stored[0].expenses[0].description == "Big shop"

        await planner.delete_expense(expense.id)
        assert planner.expenses_for(category.id) == ()
        assert (await sql_store.load_categories())[0].actual_spent == Decimal("0")

    @pytest.mark.asyncio
    async def test_failed_write_rolls_back(self, storage_url: str) -> None:
        """The ledger reverts to the confirmed snapshot and the error surfaces."""
        store = FlakySnapshotStore(storage_url)
        planner = BudgetPlanner(store)
        await planner.load()
        category = await planner.create_category("Food", 1000)
        before = planner.categories

        store.offline = True
        with pytest.raises(PersistenceError):
            await planner.add_expense(category.id, 10, "Snacks", date.today())

        assert planner.categories == before
        assert planner.reconciler.confirmed == before

    @pytest.mark.asyncio
    async def test_unknown_ids(self, snapshot_store: SnapshotStore) -> None:
        """Stale ids raise NotFoundError."""
        planner = BudgetPlanner(snapshot_store)
        await planner.load()

        with pytest.raises(NotFoundError):
            await planner.delete_category("missing")
        with pytest.raises(NotFoundError):
            await planner.delete_expense("missing")
        with pytest.raises(NotFoundError):
            planner.expenses_for("missing")
