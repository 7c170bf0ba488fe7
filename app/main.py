# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# Builds the ASGI application: settings, the database connection guard,
# CORS, the connection check, exception handlers and the root router.
#
# Request pipeline (outermost first):
#   CORS -> connection check -> unexpected-error mapping -> router
# Unexpected errors become a 500 inside CORS so the frontend can read them.
# JSON / form bodies and cookies are decoded by FastAPI on demand.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import ConnectionFailure

from app.config import Settings
from app.config import settings as env_settings
from app.exceptions import (
    ApiException,
    DatabaseUnavailableError,
    api_exception_handler,
    connection_failure_handler,
    unexpected_exception_handler,
)
from app.middleware import ConnectionGuardMiddleware, UnexpectedErrorMiddleware
from app.routers import api_router
from lib.database import ConnectionGuard, DatabaseConnectionError

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if env_settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    - Startup: one connection attempt (failure is logged, the app still
      starts), then the health monitor if enabled
    - Shutdown: stop the monitor, close the connection
    """
    settings: Settings = app.state.settings
    guard: ConnectionGuard = app.state.connection_guard

    # Startup
    logger.info(f"Starting API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origin: {settings.FRONTEND_URL}")

    try:
        await guard.ensure_connected()
    except DatabaseConnectionError as e:
        logger.error(f"Initial DB connection failed: {e.message}")

    shutdown_event = asyncio.Event()
    monitor_task = None
    interval = settings.DB_HEALTH_CHECK_INTERVAL_SECONDS
    if interval > 0:
        monitor_task = asyncio.create_task(guard.run_health_monitor(interval, shutdown_event))

    try:
        yield
    finally:
        # Shutdown
        logger.info("Shutting down API")

        shutdown_event.set()
        try:
            if monitor_task:
                monitor_task.cancel()
                try:
                    await monitor_task
                except asyncio.CancelledError:
                    pass
        finally:
            guard.close()


def create_app(
    settings: Settings | None = None,
    guard: ConnectionGuard | None = None,
    router: APIRouter | None = None,
) -> FastAPI:
    """
    Assemble the application.

    Args:
        settings: Defaults to the cached environment settings
        guard: Defaults to a ConnectionGuard over `settings`
        router: Root router mounted at "/" (defaults to the health router)

    Returns:
        The configured FastAPI app. No port is bound here.
    """
    settings = settings or env_settings
    guard = guard or ConnectionGuard(settings)

    app = FastAPI(
        title="API",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.connection_guard = guard

    # =========================================================================
    # Middleware
    # =========================================================================
    # add_middleware wraps: the last one added runs first.

    # Innermost: unhandled handler errors become a 500 JSON response
    app.add_middleware(UnexpectedErrorMiddleware)

    # Reconnect-on-demand; runs after CORS, before the router
    app.add_middleware(
        ConnectionGuardMiddleware,
        guard=guard,
        strict=settings.is_strict_unavailable_mode,
        exempt_paths=settings.guard_exempt_paths,
    )

    # CORS middleware - one credentialed frontend origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(ApiException)
    async def handle_api_exception(request: Request, exc: ApiException):
        """Handle custom API exceptions."""
        return await api_exception_handler(request, exc)

    @app.exception_handler(DatabaseConnectionError)
    async def handle_database_connection_error(request: Request, exc: DatabaseConnectionError):
        """A handler touched the database while disconnected."""
        logger.error(f"Database unavailable in handler: {exc.message}")
        return await api_exception_handler(
            request, DatabaseUnavailableError(strict=settings.is_strict_unavailable_mode)
        )

    @app.exception_handler(ConnectionFailure)
    async def handle_connection_failure(request: Request, exc: ConnectionFailure):
        """The transport dropped underneath a handler."""
        return await connection_failure_handler(request, exc)

    # Last resort for errors raised by the middleware stack itself
    @app.exception_handler(Exception)
    async def handle_general_exception(request: Request, exc: Exception):
        """Handle unexpected exceptions."""
        return await unexpected_exception_handler(request, exc)

    # =========================================================================
    # Routers
    # =========================================================================

    app.include_router(router or api_router)

    return app


app = create_app()
