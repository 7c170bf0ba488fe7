# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Database outages are the one error this layer reports itself; everything
# else belongs to the routers mounted on top of it.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure

logger = logging.getLogger(__name__)


class ApiException(Exception):
    """
    Base exception for the API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "API_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Database Exceptions
# =============================================================================

class DatabaseUnavailableError(ApiException):
    """
    Raised when a request cannot be served because the database is down.

    Two response shapes exist:
    - strict: 503 {"error": "Internal Server Error", "message": "Database connection unavailable"}
    - loose:  500 {"error": "Database connection failed"}
    """

    def __init__(self, strict: bool = True):
        self.strict = strict
        super().__init__(
            message="Database connection unavailable" if strict else "Database connection failed",
            code="DATABASE_UNAVAILABLE",
            status_code=503 if strict else 500,
        )

    def to_dict(self) -> dict[str, Any]:
        if self.strict:
            return {
                "error": "Internal Server Error",
                "message": self.message,
            }
        return {"error": self.message}


# =============================================================================
# Exception Handlers
# =============================================================================

async def api_exception_handler(
    request: Request,
    exc: ApiException
) -> JSONResponse:
    """
    Convert ApiException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def connection_failure_handler(
    request: Request,
    exc: ConnectionFailure
) -> JSONResponse:
    """
    Handle a transport failure raised from inside a route handler.

    The guard is told the connection is gone, so the next request goes
    through a fresh connection attempt.
    """
    guard = request.app.state.connection_guard
    guard.mark_disconnected(exc)

    error = DatabaseUnavailableError(strict=request.app.state.settings.is_strict_unavailable_mode)
    return await api_exception_handler(request, error)


async def unexpected_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )
