"""Copy a budget from one store into another.

Typically used once to move a snapshot document into the database:

    report = await migrate_snapshot(SnapshotStore("./data"), SqlBudgetStore(factory))

backup_snapshot writes a dated copy of any store as a snapshot document.
"""

from dataclasses import dataclass
from datetime import date

from budget_planner.core.logging import get_logger
from budget_planner.ledger.models import BudgetSnapshot
from budget_planner.persistence.base import BudgetStore
from budget_planner.persistence.snapshot import SnapshotStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class MigrationReport:
    """Counts of what was copied."""

    income_migrated: bool
    categories: int
    expenses: int


async def migrate_snapshot(source: BudgetStore, target: BudgetStore) -> MigrationReport:
    """Copy income, categories and expenses from source into target.

    Ids are preserved. The source is never modified, so a failed run can be
    retried once the target is cleaned up.

    Raises:
        BudgetError: The first failure from either store; the copy stops there.
    """
    logger.info("migration_started")

    income = await source.load_income()
    if income is not None:
        await target.save_income(income)

    categories = await source.load_categories()
    expense_count = 0
    for category in categories:
        await target.create_category(
            category.name, category.planned_amount, category_id=category.id
        )
        for expense in category.expenses:
            await target.add_expense(
                category.id,
                expense.amount,
                expense.description,
                expense.date,
                expense_id=expense.id,
            )
            expense_count += 1
        logger.debug(
            "migration_category_copied",
            category_id=category.id,
            expenses=len(category.expenses),
        )

    report = MigrationReport(
        income_migrated=income is not None,
        categories=len(categories),
        expenses=expense_count,
    )
    logger.info(
        "migration_completed",
        income_migrated=report.income_migrated,
        categories=report.categories,
        expenses=report.expenses,
    )
    return report


async def backup_snapshot(
    source: BudgetStore, storage_url: str, *, today: date | None = None
) -> str | None:
    """Write the source budget to a dated snapshot document.

    Args:
        source: Store to read from.
        storage_url: fsspec location the backup is written to.
        today: Date used in the document name. Defaults to today.

    Returns:
        The backup document name, or None when there was nothing to back up.

    Raises:
        PersistenceError: If either store cannot be read or written.
    """
    snapshot = BudgetSnapshot(
        income=await source.load_income(),
        categories=await source.load_categories(),
    )
    if snapshot.income is None and not snapshot.categories:
        logger.info("backup_skipped_empty")
        return None

    name = f"budget-planner-backup-{(today or date.today()).isoformat()}.json"
    await SnapshotStore(storage_url, name).save(snapshot)
    logger.info(
        "backup_written",
        storage_url=storage_url,
        name=name,
        categories=len(snapshot.categories),
    )
    return name
