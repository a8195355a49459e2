"""Map budget errors onto HTTP responses."""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from budget_planner.core.errors import BudgetError
from budget_planner.core.logging import get_logger

logger = get_logger(__name__)

STATUS_BY_KIND: dict[str, int] = {
    "validation": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "invalid_input": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "duplicate_name": status.HTTP_409_CONFLICT,
    "not_found": status.HTTP_404_NOT_FOUND,
    "persistence": status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def budget_error_handler(request: Request, exc: BudgetError) -> JSONResponse:
    """Render a BudgetError as {"kind", "message", "field"}."""
    status_code = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error(
            "budget_request_failed",
            path=request.url.path,
            kind=exc.kind,
            error=exc.message,
        )
    else:
        logger.info(
            "budget_request_rejected",
            path=request.url.path,
            kind=exc.kind,
            error=exc.message,
        )
    return JSONResponse(status_code=status_code, content=exc.to_dict())
