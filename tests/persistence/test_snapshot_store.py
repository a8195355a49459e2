"""Tests for the JSON snapshot store."""

from datetime import date
from decimal import Decimal
from unittest.mock import patch

import orjson
import pytest

from budget_planner.core.errors import DuplicateNameError, NotFoundError, PersistenceError
from budget_planner.integrations.storage import file_exists, read_file, write_file
from budget_planner.ledger.models import BudgetSnapshot
from budget_planner.persistence import SnapshotStore
from budget_planner.tax.calculator import compute_net_pay


class TestLoadAndSave:
    """Tests for reading and writing the document."""

    @pytest.mark.asyncio
    async def test_missing_document_is_empty(self, snapshot_store: SnapshotStore) -> None:
        """No document means an empty budget."""
        assert await snapshot_store.load() == BudgetSnapshot()

    @pytest.mark.asyncio
    async def test_round_trip(self, snapshot_store: SnapshotStore) -> None:
        """Income and categories survive a save and load."""
        await snapshot_store.save_income(compute_net_pay(40000))
        await snapshot_store.create_category("Food", Decimal("100"), category_id="food")

        snapshot = await snapshot_store.load()

        assert snapshot.income == compute_net_pay(40000)
        assert [category.id for category in snapshot.categories] == ["food"]

    @pytest.mark.asyncio
    async def test_document_layout(self, snapshot_store: SnapshotStore) -> None:
        """The document holds income and categories with embedded expenses."""
        await snapshot_store.create_category("Food", Decimal("100"), category_id="food")
        await snapshot_store.add_expense(
            "food", Decimal("12.5"), "Snacks", date.today(), expense_id="e1"
        )

        data = orjson.loads(await read_file(snapshot_store.storage_url, snapshot_store.name))

        assert data["income"] is None
        assert data["categories"][0]["expenses"][0]["id"] == "e1"
        assert data["categories"][0]["actualSpent"] == "12.50"

    @pytest.mark.asyncio
    async def test_corrupt_document_is_discarded(self, storage_url: str) -> None:
        """Unreadable JSON loads as empty and the file is removed."""
        await write_file(storage_url, "budget.json", b"{not json")
        store = SnapshotStore(storage_url, "budget.json")

        assert await store.load() == BudgetSnapshot()
        assert not file_exists(storage_url, "budget.json")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw", [b"[]", b"null", b"1", b"{\"categories\": [1]}"])
    async def test_non_object_document_is_discarded(
        self, storage_url: str, raw: bytes
    ) -> None:
        """Valid JSON with the wrong shape is treated as corrupt."""
        await write_file(storage_url, "budget.json", raw)
        store = SnapshotStore(storage_url, "budget.json")

        assert await store.load() == BudgetSnapshot()
        assert not file_exists(storage_url, "budget.json")

    @pytest.mark.asyncio
    async def test_corrupt_removal_failure_is_not_raised(self, storage_url: str) -> None:
        """Best-effort cleanup never raises."""
        await write_file(storage_url, "budget.json", b"[1, 2")
        store = SnapshotStore(storage_url, "budget.json")

        with patch(
            "budget_planner.persistence.snapshot.remove_file",
            side_effect=PermissionError("read-only"),
        ):
            assert await store.load() == BudgetSnapshot()

    @pytest.mark.asyncio
    async def test_write_failure_is_persistence_error(
        self, snapshot_store: SnapshotStore
    ) -> None:
        """Storage errors surface as PersistenceError."""
        with patch(
            "budget_planner.persistence.snapshot.write_file",
            side_effect=OSError("quota exceeded"),
        ):
            with pytest.raises(PersistenceError):
                await snapshot_store.save_income(compute_net_pay(100))


class TestMutations:
    """Tests for ledger operations applied to the document."""

    @pytest.mark.asyncio
    async def test_expense_lifecycle(self, snapshot_store: SnapshotStore) -> None:
        """Expense changes keep the stored spent total in sync."""
        await snapshot_store.create_category("Food", Decimal("100"), category_id="food")
        today = date.today()

        expense = await snapshot_store.add_expense(
            "food", Decimal("40"), "Snacks", today, expense_id="e1"
        )
        assert expense.id == "e1"

        await snapshot_store.update_expense("e1", Decimal("60"), "Lunch", today)
        categories = await snapshot_store.load_categories()
        assert categories[0].actual_spent == Decimal("60.00")

        await snapshot_store.delete_expense("e1")
        categories = await snapshot_store.load_categories()
        assert categories[0].expenses == ()

    @pytest.mark.asyncio
    async def test_category_errors(self, snapshot_store: SnapshotStore) -> None:
        """Duplicates and unknown ids are reported."""
        await snapshot_store.create_category("Food", Decimal("100"))

        with pytest.raises(DuplicateNameError):
            await snapshot_store.create_category("food", Decimal("1"))
        with pytest.raises(NotFoundError):
            await snapshot_store.update_category("missing", "Name", Decimal("1"))
        with pytest.raises(NotFoundError):
            await snapshot_store.delete_category("missing")

    @pytest.mark.asyncio
    async def test_update_and_delete_category(self, snapshot_store: SnapshotStore) -> None:
        """Categories can be renamed and removed."""
        await snapshot_store.create_category("Food", Decimal("100"), category_id="food")

        updated = await snapshot_store.update_category("food", "Groceries", Decimal("150"))
        assert updated.name == "Groceries"

        await snapshot_store.delete_category("food")
        assert await snapshot_store.load_categories() == ()
