"""
Centralized error handlers for FastAPI.

Maps domain-specific errors to HTTP responses.
No stack traces or internal details are exposed to clients.
All error responses use the ErrorResponse schema.

Starlette resolves handlers along the exception's MRO, so a handler
registered for a base class also covers its subclasses unless a more
specific handler exists.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tradevault.domain.errors import (
    ConflictError,
    DomainError,
    ExternalServiceError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from tradevault.domain.ledger.errors import (
    InsufficientFundsError,
    InsufficientSharesError,
    PlanUnavailableError,
    WithdrawalLimitExceededError,
)

logger = logging.getLogger(__name__)

HTTP_400 = 400
HTTP_401 = 401
HTTP_403 = 403
HTTP_404 = 404
HTTP_409 = 409
HTTP_500 = 500
HTTP_502 = 502


def _error_response(
    status_code: int,
    error: str,
    detail: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build a consistent JSON error response."""
    body: dict[str, str | None] = {"error": error}
    if detail:
        body["detail"] = detail
    return JSONResponse(status_code=status_code, content=body, headers=headers)


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts)


def register_error_handlers(app: FastAPI) -> None:
    """Register all domain error handlers on the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Schema validation failures are client errors, reported as 400."""
        return _error_response(HTTP_400, "Validation error", _describe_validation(exc))

    @app.exception_handler(ValidationError)
    async def handle_validation(_request: Request, exc: ValidationError) -> JSONResponse:
        logger.info("Validation error on %s: %s", exc.field, exc.message)
        return _error_response(HTTP_400, "Validation error", exc.message)

    @app.exception_handler(InsufficientFundsError)
    async def handle_insufficient_funds(
        _request: Request, exc: InsufficientFundsError
    ) -> JSONResponse:
        """Handle insufficient funds errors."""
        logger.warning("Insufficient funds: required=%s", exc.required)
        return _error_response(HTTP_400, "Insufficient funds", exc.message)

    @app.exception_handler(InsufficientSharesError)
    async def handle_insufficient_shares(
        _request: Request, exc: InsufficientSharesError
    ) -> JSONResponse:
        logger.warning("Insufficient shares: %s", exc.symbol)
        return _error_response(HTTP_400, "Insufficient shares", exc.message)

    @app.exception_handler(WithdrawalLimitExceededError)
    async def handle_withdrawal_limit(
        _request: Request, exc: WithdrawalLimitExceededError
    ) -> JSONResponse:
        return _error_response(HTTP_400, "Withdrawal limit exceeded", exc.message)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(
        _request: Request, exc: UnauthorizedError
    ) -> JSONResponse:
        return _error_response(
            HTTP_401,
            "Unauthorized",
            exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(_request: Request, exc: ForbiddenError) -> JSONResponse:
        logger.warning("Forbidden: %s", exc.message)
        return _error_response(HTTP_403, "Forbidden", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(_request: Request, exc: NotFoundError) -> JSONResponse:
        """Handle every missing-resource error."""
        logger.info("%s not found: %s", exc.resource, exc.identifier)
        return _error_response(HTTP_404, f"{exc.resource} not found")

    @app.exception_handler(ConflictError)
    async def handle_conflict(_request: Request, exc: ConflictError) -> JSONResponse:
        """Covers duplicates, status transitions and concurrent updates."""
        logger.warning("Conflict: %s", exc.message)
        return _error_response(HTTP_409, "Conflict", exc.message)

    @app.exception_handler(PlanUnavailableError)
    async def handle_plan_unavailable(
        _request: Request, exc: PlanUnavailableError
    ) -> JSONResponse:
        return _error_response(HTTP_409, "Plan unavailable", exc.message)

    @app.exception_handler(ExternalServiceError)
    async def handle_external_service(
        _request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        logger.error("External service failure: %s (%s)", exc.service, exc.reason)
        return _error_response(HTTP_502, f"{exc.service} unavailable")

    @app.exception_handler(DomainError)
    async def handle_domain(_request: Request, exc: DomainError) -> JSONResponse:
        """Catch-all for unhandled domain errors."""
        logger.error("Unhandled domain error: %s", exc.message)
        return _error_response(HTTP_500, "Internal server error")

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unexpected errors. Never exposes internals."""
        logger.exception("Unexpected error: %s", type(exc).__name__)
        return _error_response(HTTP_500, "Internal server error")
