"""Field validators for budget input.

Each validator returns a tagged result, either Valid() or
Invalid(field, message), so callers can collect per-field messages for a form
or fail fast with raise_for_invalid.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Union

from budget_planner.core.errors import ValidationError

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
DESCRIPTION_MIN_LENGTH = 3
DESCRIPTION_MAX_LENGTH = 100
MAX_GROSS_PAY = Decimal("10000000")
MAX_PLANNED_AMOUNT = Decimal("1000000")
MAX_EXPENSE_AMOUNT = Decimal("1000000")
MAX_EXPENSE_AGE_YEARS = 2

_INVALID_NAME_CHARS = re.compile(r"[<>\"'&]")

NumericInput = Union[Decimal, int, float, str, None]
DateInput = Union[date, str, None]


@dataclass(frozen=True)
class Valid:
    """The value passed validation."""

    @property
    def is_valid(self) -> bool:
        return True


@dataclass(frozen=True)
class Invalid:
    """The value failed validation for a specific field."""

    field: str
    message: str

    @property
    def is_valid(self) -> bool:
        return False


ValidationResult = Union[Valid, Invalid]

VALID = Valid()


def parse_decimal(value: NumericInput) -> Decimal | None:
    """Parse a numeric form value; None when it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        value = str(value)
    try:
        parsed = Decimal(str(value).strip()) if not isinstance(value, Decimal) else value
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def _validate_amount(
    value: NumericInput,
    field: str,
    label: str,
    maximum: Decimal,
    allow_zero: bool,
) -> ValidationResult:
    if value is None or (isinstance(value, str) and not value.strip()):
        return Invalid(field, f"{label} is required")

    amount = parse_decimal(value)
    if amount is None:
        return Invalid(field, f"{label} must be a valid number")

    if allow_zero and amount < 0:
        return Invalid(field, f"{label} must be a positive number")
    if not allow_zero and amount <= 0:
        return Invalid(field, f"{label} must be greater than zero")

    if amount > maximum:
        return Invalid(field, f"{label} seems unusually high. Please verify the amount")

    return VALID


def validate_gross_pay(value: NumericInput) -> ValidationResult:
    """Gross pay must be a number between 0 and 10,000,000."""
    return _validate_amount(value, "gross_pay", "Gross pay", MAX_GROSS_PAY, allow_zero=True)


def validate_planned_amount(value: NumericInput) -> ValidationResult:
    """Planned amount must be a number between 0 and 1,000,000."""
    return _validate_amount(
        value, "planned_amount", "Planned amount", MAX_PLANNED_AMOUNT, allow_zero=True
    )


def validate_expense_amount(value: NumericInput) -> ValidationResult:
    """Expense amount must be greater than zero and at most 1,000,000."""
    return _validate_amount(
        value, "amount", "Expense amount", MAX_EXPENSE_AMOUNT, allow_zero=False
    )


def validate_category_name(
    name: str | None, existing_names: Iterable[str] = ()
) -> ValidationResult:
    """Validate a category name against length, characters and existing names.

    The duplicate check is case-insensitive. The ledger reports duplicates as
    DuplicateNameError rather than through this result, so it passes no
    existing names here.
    """
    if not name or not name.strip():
        return Invalid("name", "Category name is required")

    trimmed = name.strip()
    if len(trimmed) < NAME_MIN_LENGTH:
        return Invalid("name", "Category name must be at least 2 characters long")
    if len(trimmed) > NAME_MAX_LENGTH:
        return Invalid("name", "Category name must be at most 50 characters long")

    lowered = trimmed.lower()
    if any(existing.strip().lower() == lowered for existing in existing_names):
        return Invalid("name", "Category name already exists")

    if _INVALID_NAME_CHARS.search(trimmed):
        return Invalid("name", "Category name contains invalid characters")

    return VALID


def validate_expense_description(description: str | None) -> ValidationResult:
    """Description must be 3-100 characters once trimmed."""
    if not description or not description.strip():
        return Invalid("description", "Expense description is required")

    trimmed = description.strip()
    if len(trimmed) < DESCRIPTION_MIN_LENGTH:
        return Invalid("description", "Description must be at least 3 characters long")
    if len(trimmed) > DESCRIPTION_MAX_LENGTH:
        return Invalid("description", "Description must be at most 100 characters long")

    return VALID


def parse_date(value: DateInput) -> date | None:
    """Parse a date or ISO string; None when it cannot be read."""
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def _years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 -> Feb 28
        return day.replace(year=day.year - years, day=28)


def validate_expense_date(value: DateInput, today: date | None = None) -> ValidationResult:
    """Date must parse, not be after tomorrow, and not be over two years old.

    One day of slack past today absorbs clients in timezones ahead of the
    server.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return Invalid("date", "Date is required")

    parsed = parse_date(value)
    if parsed is None:
        return Invalid("date", "Please enter a valid date")

    today = today or date.today()
    if parsed > today + timedelta(days=1):
        return Invalid("date", "Date cannot be in the future")
    if parsed < _years_before(today, MAX_EXPENSE_AGE_YEARS):
        return Invalid("date", "Date cannot be more than 2 years in the past")

    return VALID


def validate_category_selection(
    category_id: str | None, available_ids: Iterable[str] = ()
) -> ValidationResult:
    """A category must be chosen, and must be one of the available ids if given."""
    if not category_id or not category_id.strip():
        return Invalid("category_id", "Please select a category")

    available = list(available_ids)
    if available and category_id not in available:
        return Invalid("category_id", "Selected category is not valid")

    return VALID


def collect_errors(results: dict[str, ValidationResult]) -> dict[str, str]:
    """Map each invalid field to its message."""
    return {
        key: result.message
        for key, result in results.items()
        if isinstance(result, Invalid)
    }


def raise_for_invalid(*results: ValidationResult) -> None:
    """Raise ValidationError for the first invalid result.

    Raises:
        ValidationError: Attributed to the failing field.
    """
    for result in results:
        if isinstance(result, Invalid):
            raise ValidationError(result.field, result.message)
