"""Application configuration using Pydantic Settings."""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Annotated, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


DEFAULT_CATEGORY_NAMES = [
    "House Rent",
    "Transport",
    "Savings",
    "Food",
    "Other Expenditures",
]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./budget_planner.db"
    """Async SQLAlchemy connection URL (aiosqlite or asyncpg driver)."""

    # Snapshot storage
    storage_url: str = "./data"
    """Base storage URL for the JSON snapshot store (file://, s3://, gs://, memory://, or local)."""

    snapshot_name: str = "budget_planner.json"
    """Name of the snapshot document within storage_url."""

    storage_backend: Literal["sql", "snapshot"] = "sql"
    """Which store backs the planner: the relational database or the JSON snapshot."""

    # Error Tracking
    sentry_dsn: str | None = None
    """Sentry DSN for error tracking. Optional."""

    # Environment
    environment: str = "development"
    """Current environment (development, staging, production)."""

    debug: bool = False
    """Enable debug mode."""

    log_format: str | None = None
    """Logging format override (json or console). Defaults by environment."""

    # Budget defaults
    tax_year: int = 2024
    """Statutory rate table used for pay breakdowns."""

    currency: str = "KSh"
    """Currency label returned with the budget. Amounts are always single-currency."""

    # NoDecode lets us accept either a JSON array or a CSV string.
    default_categories: Annotated[list[str], NoDecode] = DEFAULT_CATEGORY_NAMES
    """Category names seeded for first-time users."""

    @field_validator("default_categories", mode="before")
    @classmethod
    def parse_default_categories(cls, value: object) -> list[str]:
        """Parse default category names from JSON array, CSV, or list."""
        if isinstance(value, str):
            text = value.strip()
            if not text:
                return DEFAULT_CATEGORY_NAMES.copy()

            try:
                decoded = json.loads(text)
            except json.JSONDecodeError:
                decoded = None

            if isinstance(decoded, list):
                return _normalize_category_names(decoded)
            if isinstance(decoded, str):
                text = decoded
            elif decoded is not None:
                raise ValueError(
                    "DEFAULT_CATEGORIES must be a JSON array or comma-separated string."
                )

            parsed = [item.strip() for item in text.split(",")]
            return _normalize_category_names(parsed)

        if isinstance(value, (list, tuple)):
            return _normalize_category_names(value)

        raise ValueError("DEFAULT_CATEGORIES must be a string, list, or tuple.")


def _normalize_category_names(values: Iterable[object]) -> list[str]:
    """Strip blanks and case-insensitive duplicates while preserving order."""
    normalized: list[str] = []
    seen: set[str] = set()
    for raw_item in values:
        item = str(raw_item).strip().strip("'").strip('"').strip()
        if not item:
            continue
        key = item.lower()
        if key in seen:
            continue
        normalized.append(item)
        seen.add(key)
    return normalized


try:
    settings = Settings()
except Exception as exc:
    env_file = Path(".env")
    root_error = str(exc)
    suggestions = [
        "Check DATABASE_URL and STORAGE_BACKEND.",
        "Allowed values for DEFAULT_CATEGORIES are:",
        '  1) ["House Rent","Transport","Savings"]',
        "  2) House Rent,Transport,Savings",
    ]

    raise RuntimeError(
        "Failed to initialize application settings. "
        f"Check environment variables in {env_file.resolve() if env_file.exists() else '.env'}.\n"
        + f"Error: {root_error}\n"
        + "\n".join(suggestions)
    ) from exc
