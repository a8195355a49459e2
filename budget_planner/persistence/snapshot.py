"""Single-document budget store on any fsspec filesystem.

The whole budget (income plus categories with embedded expenses) lives in one
JSON document. Every write loads the document, applies the ledger operation
and rewrites it, so the stored document is always a valid snapshot.
"""

import asyncio
from collections.abc import Callable
from dataclasses import replace
from datetime import date
from decimal import Decimal

import orjson

from budget_planner.core.errors import PersistenceError
from budget_planner.core.logging import get_logger
from budget_planner.integrations.storage import read_file, remove_file, write_file
from budget_planner.ledger import operations
from budget_planner.ledger.models import BudgetSnapshot, Categories, Category, Expense
from budget_planner.tax.calculator import PayBreakdown

logger = get_logger(__name__)


class SnapshotStore:
    """Budget store persisting a BudgetSnapshot as JSON via fsspec.

    Usage:
        store = SnapshotStore("memory://budget")
        await store.create_category("Food", Decimal("5000"))
    """

    def __init__(self, storage_url: str, name: str = "budget_planner.json") -> None:
        """Initialize store.

        Args:
            storage_url: Base storage URL (local path, file://, memory://, s3://).
            name: Document name within the storage location.
        """
        self.storage_url = storage_url
        self.name = name
        self._lock = asyncio.Lock()

    async def load(self) -> BudgetSnapshot:
        """Read the stored snapshot.

        A missing document is an empty budget. A corrupt document is also
        treated as empty and removed best-effort.

        Raises:
            PersistenceError: If the storage cannot be read.
        """
        try:
            raw = await read_file(self.storage_url, self.name)
        except FileNotFoundError:
            return BudgetSnapshot()
        except OSError as exc:
            raise PersistenceError(f"Failed to read budget data: {exc}") from exc

        try:
            payload = orjson.loads(raw)
            if not isinstance(payload, dict):
                raise TypeError(f"expected a JSON object, got {type(payload).__name__}")
            return BudgetSnapshot.from_dict(payload)
        except (
            orjson.JSONDecodeError,
            AttributeError,
            KeyError,
            TypeError,
            ValueError,
            ArithmeticError,
        ) as exc:
            logger.warning("snapshot_corrupt", name=self.name, error=str(exc))
            await self._discard_corrupt()
            return BudgetSnapshot()

    async def _discard_corrupt(self) -> None:
        try:
            await remove_file(self.storage_url, self.name)
        except OSError as exc:
            logger.warning("snapshot_corrupt_remove_failed", name=self.name, error=str(exc))
        else:
            logger.info("snapshot_corrupt_removed", name=self.name)

    async def save(self, snapshot: BudgetSnapshot) -> None:
        """Write the full snapshot.

        Raises:
            PersistenceError: If the storage cannot be written.
        """
        payload = orjson.dumps(snapshot.to_dict(), option=orjson.OPT_INDENT_2)
        try:
            await write_file(self.storage_url, self.name, payload)
        except OSError as exc:
            raise PersistenceError(f"Failed to save budget data: {exc}") from exc

    async def _update(
        self, transition: Callable[[Categories], Categories]
    ) -> Categories:
        async with self._lock:
            snapshot = await self.load()
            categories = transition(snapshot.categories)
            await self.save(replace(snapshot, categories=categories))
            return categories

    async def load_income(self) -> PayBreakdown | None:
        return (await self.load()).income

    async def save_income(self, breakdown: PayBreakdown) -> PayBreakdown:
        async with self._lock:
            snapshot = await self.load()
            await self.save(replace(snapshot, income=breakdown))
        return breakdown

    async def load_categories(self) -> Categories:
        return (await self.load()).categories

    async def create_category(
        self,
        name: str,
        planned_amount: Decimal,
        *,
        category_id: str | None = None,
    ) -> Category:
        category_id = category_id or operations.new_id()
        categories = await self._update(
            lambda current: operations.create_category(
                current, name, planned_amount, category_id=category_id
            )
        )
        return operations.find_category(categories, category_id)

    async def update_category(
        self, category_id: str, name: str, planned_amount: Decimal
    ) -> Category:
        categories = await self._update(
            lambda current: operations.update_category(
                current, category_id, name, planned_amount
            )
        )
        return operations.find_category(categories, category_id)

    async def delete_category(self, category_id: str) -> None:
        await self._update(
            lambda current: operations.delete_category(current, category_id)
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
        expense_id = expense_id or operations.new_id()
        categories = await self._update(
            lambda current: operations.add_expense(
                current,
                category_id,
                amount,
                description,
                expense_date,
                expense_id=expense_id,
            )
        )
        return operations.find_expense(categories, expense_id)[1]

    async def update_expense(
        self,
        expense_id: str,
        amount: Decimal,
        description: str,
        expense_date: date,
    ) -> Expense:
        categories = await self._update(
            lambda current: operations.update_expense(
                current, expense_id, amount, description, expense_date
            )
        )
        return operations.find_expense(categories, expense_id)[1]

    async def delete_expense(self, expense_id: str) -> None:
        await self._update(
            lambda current: operations.delete_expense(current, expense_id)
        )
