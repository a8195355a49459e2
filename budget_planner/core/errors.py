"""Error taxonomy shared by the calculator, the ledger and the stores.

Every error carries a human-readable message and a machine-checkable kind so
callers (and the HTTP layer) can branch without parsing strings.
"""

from typing import Any


class BudgetError(Exception):
    """Base class for all budget planner errors."""

    kind: str = "budget_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for API responses."""
        return {"kind": self.kind, "message": self.message, "field": None}


class ValidationError(BudgetError):
    """Caller-supplied input has a bad shape or range."""

    kind = "validation"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "field": self.field}


class DuplicateNameError(BudgetError):
    """A category with the same name (case-insensitive) already exists."""

    kind = "duplicate_name"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Category name already exists: {name}")

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "field": "name"}


class NotFoundError(BudgetError):
    """A referenced category or expense id does not exist."""

    kind = "not_found"

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity.capitalize()} not found: {entity_id}")


class PersistenceError(BudgetError):
    """A durable write or read against a store failed."""

    kind = "persistence"


class InvalidInputError(BudgetError):
    """The tax calculator was given a negative, non-finite or non-numeric amount."""

    kind = "invalid_input"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "field": "gross_pay"}


__all__ = [
    "BudgetError",
    "DuplicateNameError",
    "InvalidInputError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
]
