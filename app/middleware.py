# =============================================================================
# app/middleware.py - Request Pipeline Middleware
# =============================================================================
# Runs after CORS and before the router. If the database is not connected,
# the request waits for a connection attempt; if that fails the request is
# answered here and never reaches a route handler.
#
# UnexpectedErrorMiddleware is the innermost stage: it maps errors no
# exception handler claimed to a 500 while CORS can still decorate it.
# =============================================================================

import logging
from collections.abc import Iterable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from app.exceptions import DatabaseUnavailableError, api_exception_handler, unexpected_exception_handler
from lib.database import ConnectionGuard, DatabaseConnectionError

logger = logging.getLogger(__name__)


class ConnectionGuardMiddleware(BaseHTTPMiddleware):
    """
    Reconnect-on-demand stage of the request pipeline.

    Args:
        app: The wrapped ASGI app
        guard: The application's ConnectionGuard
        strict: 503 responses when True, 500 when False
        exempt_paths: Paths that never wait for the database
    """

    def __init__(
        self,
        app: ASGIApp,
        guard: ConnectionGuard,
        strict: bool = True,
        exempt_paths: Iterable[str] = (),
    ):
        super().__init__(app)
        self.guard = guard
        self.strict = strict
        self.exempt_paths = frozenset(exempt_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.guard.is_connected and request.url.path not in self.exempt_paths:
            try:
                await self.guard.ensure_connected()
            except DatabaseConnectionError as e:
                logger.error(f"Failed to connect to DB: {e.message}")
                return await api_exception_handler(request, DatabaseUnavailableError(strict=self.strict))

        return await call_next(request)


class UnexpectedErrorMiddleware(BaseHTTPMiddleware):
    """
    Turns an unhandled handler error into the generic 500 JSON response.

    Sits inside CORSMiddleware, so the response still carries the CORS
    headers. Errors with a registered exception handler never get here.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await unexpected_exception_handler(request, exc)
