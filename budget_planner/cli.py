"""Command-line tools for moving and backing up budget data."""

import asyncio
import sys

import typer
from rich.console import Console

from budget_planner.core.config import settings
from budget_planner.core.database import create_engine, create_session_factory, create_tables
from budget_planner.core.errors import BudgetError
from budget_planner.core.logging import configure_logging
from budget_planner.persistence import (
    BudgetStore,
    MigrationReport,
    SnapshotStore,
    SqlBudgetStore,
    backup_snapshot,
    migrate_snapshot,
)

app = typer.Typer(
    name="budget-planner",
    help="Budget planner data tools",
    add_completion=False,
)

console = Console()


@app.callback()
def main() -> None:
    """Budget planner data tools."""
    configure_logging()


async def _migrate(source_url: str, name: str, database_url: str) -> MigrationReport:
    engine = create_engine(database_url)
    try:
        if database_url.startswith("sqlite"):
            await create_tables(engine)
        target = SqlBudgetStore(create_session_factory(engine))
        return await migrate_snapshot(SnapshotStore(source_url, name), target)
    finally:
        await engine.dispose()


async def _backup(backend: str, output_url: str, database_url: str) -> str | None:
    if backend == "snapshot":
        source: BudgetStore = SnapshotStore(settings.storage_url, settings.snapshot_name)
        return await backup_snapshot(source, output_url)

    engine = create_engine(database_url)
    try:
        if database_url.startswith("sqlite"):
            await create_tables(engine)
        source = SqlBudgetStore(create_session_factory(engine))
        return await backup_snapshot(source, output_url)
    finally:
        await engine.dispose()


@app.command(name="migrate")
def migrate(
    source_url: str = typer.Option(
        None, "--source-url", help="Snapshot storage URL (default: STORAGE_URL)"
    ),
    name: str = typer.Option(
        None, "--name", help="Snapshot document name (default: SNAPSHOT_NAME)"
    ),
    database_url: str = typer.Option(
        None, "--database-url", help="Target database URL (default: DATABASE_URL)"
    ),
) -> None:
    """Copy a snapshot document into the database, keeping its ids."""
    source_url = source_url or settings.storage_url
    name = name or settings.snapshot_name
    database_url = database_url or settings.database_url

    console.print(f"[cyan]Migrating {source_url}/{name} into the database...[/cyan]")
    try:
        report = asyncio.run(_migrate(source_url, name, database_url))
    except BudgetError as exc:
        console.print(f"[red]Migration failed: {exc.message}[/red]", style="bold")
        console.print("[dim]The snapshot document was not modified.[/dim]")
        sys.exit(1)

    console.print(f"[green]✓[/green] Income migrated: {'yes' if report.income_migrated else 'no'}")
    console.print(f"[green]✓[/green] Categories: {report.categories}")
    console.print(f"[green]✓[/green] Expenses: {report.expenses}")
    console.print("\n[green]Migration complete![/green]", style="bold")


@app.command(name="backup")
def backup(
    output_url: str = typer.Option(
        "./backups", "--output", "-o", help="Backup storage URL"
    ),
    backend: str = typer.Option(
        None, "--from", help="Store to back up: sql or snapshot (default: STORAGE_BACKEND)"
    ),
    database_url: str = typer.Option(
        None, "--database-url", help="Database URL (default: DATABASE_URL)"
    ),
) -> None:
    """Write the current budget to a dated JSON document."""
    backend = backend or settings.storage_backend
    if backend not in ("sql", "snapshot"):
        console.print(f"[red]Unknown store: {backend}[/red]", style="bold")
        sys.exit(2)

    try:
        name = asyncio.run(_backup(backend, output_url, database_url or settings.database_url))
    except BudgetError as exc:
        console.print(f"[red]Backup failed: {exc.message}[/red]", style="bold")
        sys.exit(1)

    if name is None:
        console.print("[yellow]No data to back up[/yellow]")
        return
    console.print(f"[green]✓[/green] Budget backed up to: {output_url}/{name}")


if __name__ == "__main__":
    app()
