"""Tests for form validators."""

from datetime import date, timedelta

import pytest

from budget_planner.core.errors import ValidationError
from budget_planner.ledger.validation import (
    VALID,
    Invalid,
    collect_errors,
    parse_date,
    raise_for_invalid,
    validate_category_name,
    validate_category_selection,
    validate_expense_amount,
    validate_expense_date,
    validate_expense_description,
    validate_gross_pay,
    validate_planned_amount,
)


class TestAmountValidators:
    """Tests for gross pay, planned amount and expense amount."""

    def test_gross_pay_bounds(self) -> None:
        """Zero and ten million are valid; beyond is suspicious."""
        assert validate_gross_pay(0) == VALID
        assert validate_gross_pay("10000000") == VALID
        result = validate_gross_pay(10_000_001)
        assert isinstance(result, Invalid)
        assert "unusually high" in result.message

    def test_gross_pay_required(self) -> None:
        """Blank input is reported as required."""
        assert validate_gross_pay("  ") == Invalid("gross_pay", "Gross pay is required")
        assert validate_gross_pay(None) == Invalid("gross_pay", "Gross pay is required")

    def test_gross_pay_not_a_number(self) -> None:
        """Non-numeric strings are rejected."""
        assert validate_gross_pay("abc") == Invalid(
            "gross_pay", "Gross pay must be a valid number"
        )

    def test_planned_amount_negative(self) -> None:
        """Planned amounts cannot be negative."""
        result = validate_planned_amount(-1)
        assert not result.is_valid
        assert result.field == "planned_amount"

    def test_expense_amount_must_be_positive(self) -> None:
        """Zero is not a valid expense."""
        assert validate_expense_amount(0) == Invalid(
            "amount", "Expense amount must be greater than zero"
        )
        assert validate_expense_amount("12.50").is_valid

    def test_infinite_float_rejected(self) -> None:
        """Non-finite floats are not numbers."""
        assert not validate_expense_amount(float("inf")).is_valid


class TestCategoryName:
    """Tests for validate_category_name."""

    def test_required(self) -> None:
        """Empty names are reported as required."""
        assert validate_category_name("   ") == Invalid("name", "Category name is required")

    def test_too_short(self) -> None:
        """Single characters are too short."""
        assert validate_category_name(" a ") == Invalid(
            "name", "Category name must be at least 2 characters long"
        )

    @pytest.mark.parametrize("name", ["<b>", 'Say "hi"', "Tom's", "R&D"])
    def test_invalid_characters(self, name: str) -> None:
        """Markup characters are rejected."""
        assert validate_category_name(name) == Invalid(
            "name", "Category name contains invalid characters"
        )

    def test_existing_names_case_insensitive(self) -> None:
        """Existing names are compared ignoring case."""
        result = validate_category_name("food", existing_names=["Food"])
        assert result == Invalid("name", "Category name already exists")


class TestDescription:
    """Tests for validate_expense_description."""

    def test_length_limits(self) -> None:
        """3-100 characters once trimmed."""
        assert validate_expense_description("abc").is_valid
        assert not validate_expense_description("  ab  ").is_valid
        assert not validate_expense_description("x" * 101).is_valid
        assert not validate_expense_description(None).is_valid


class TestDates:
    """Tests for date parsing and range checks."""

    def test_parse_date(self) -> None:
        """Dates, ISO strings and ISO timestamps parse; garbage does not."""
        assert parse_date(date(2024, 1, 2)) == date(2024, 1, 2)
        assert parse_date("2024-01-02") == date(2024, 1, 2)
        assert parse_date("2024-01-02T10:00:00Z") == date(2024, 1, 2)
        assert parse_date("02/01/2024") is None
        assert parse_date(None) is None

    def test_range(self, today: date) -> None:
        """Tomorrow is allowed; later dates and very old dates are not."""
        assert validate_expense_date(today, today=today).is_valid
        assert validate_expense_date(today + timedelta(days=1), today=today).is_valid
        assert validate_expense_date(
            today + timedelta(days=2), today=today
        ) == Invalid("date", "Date cannot be in the future")
        assert validate_expense_date(
            date(2022, 6, 14), today=today
        ) == Invalid("date", "Date cannot be more than 2 years in the past")
        assert validate_expense_date(date(2022, 6, 15), today=today).is_valid

    def test_leap_day_reference(self) -> None:
        """Two years before Feb 29 is Feb 28."""
        leap = date(2024, 2, 29)
        assert validate_expense_date(date(2022, 2, 28), today=leap).is_valid
        assert not validate_expense_date(date(2022, 2, 27), today=leap).is_valid

    def test_invalid_string(self, today: date) -> None:
        """Unreadable dates get a clear message."""
        assert validate_expense_date("not a date", today=today) == Invalid(
            "date", "Please enter a valid date"
        )


class TestCategorySelection:
    """Tests for validate_category_selection."""

    def test_requires_selection(self) -> None:
        """An empty choice is rejected."""
        assert not validate_category_selection("").is_valid

    def test_must_be_available(self) -> None:
        """The id must be one of the available ones when given."""
        assert validate_category_selection("a", ["a", "b"]).is_valid
        assert validate_category_selection("c", ["a", "b"]) == Invalid(
            "category_id", "Selected category is not valid"
        )


class TestCollection:
    """Tests for collect_errors and raise_for_invalid."""

    def test_collect_errors(self) -> None:
        """Only invalid fields appear."""
        errors = collect_errors(
            {
                "name": validate_category_name("Food"),
                "planned_amount": validate_planned_amount(-1),
            }
        )
        assert list(errors) == ["planned_amount"]

    def test_raise_for_invalid_first_failure(self) -> None:
        """The first failing validator decides the error."""
        with pytest.raises(ValidationError) as exc_info:
            raise_for_invalid(
                VALID,
                Invalid("description", "bad description"),
                Invalid("date", "bad date"),
            )
        assert exc_info.value.field == "description"
        assert exc_info.value.to_dict() == {
            "kind": "validation",
            "message": "bad description",
            "field": "description",
        }

    def test_raise_for_invalid_all_valid(self) -> None:
        """Nothing is raised when every result is valid."""
        raise_for_invalid(VALID, validate_gross_pay(100))
