"""Tests for the budget error handler."""

import orjson
import pytest
from starlette.requests import Request

from budget_planner.api.errors import budget_error_handler
from budget_planner.core.errors import (
    BudgetError,
    DuplicateNameError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)


def _request(path: str = "/api/budget") -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": path,
            "headers": [],
            "query_string": b"",
        }
    )


class TestBudgetErrorHandler:
    """Tests for mapping error kinds onto responses."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error", "status_code"),
        [
            (ValidationError("name", "Category name is required"), 422),
            (DuplicateNameError("Food"), 409),
            (NotFoundError("category", "missing"), 404),
            (PersistenceError("Database unavailable"), 503),
        ],
    )
    async def test_status_by_kind(self, error: BudgetError, status_code: int) -> None:
        """Each error kind maps to its HTTP status and body."""
        response = await budget_error_handler(_request(), error)

        assert response.status_code == status_code
        assert orjson.loads(response.body) == error.to_dict()

    @pytest.mark.asyncio
    async def test_unknown_kind_is_server_error(self) -> None:
        """An unmapped kind renders as a 500 with the base body."""
        response = await budget_error_handler(_request(), BudgetError("Unexpected"))

        assert response.status_code == 500
        assert orjson.loads(response.body) == {
            "kind": "budget_error",
            "message": "Unexpected",
            "field": None,
        }
