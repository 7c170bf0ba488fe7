# =============================================================================
# lib/database.py - MongoDB Connection Guard
# =============================================================================
# This module owns the process's MongoDB connection and its state:
# - Lazily connects on first need ("connect on first request")
# - Collapses concurrent connection attempts into one (single-flight)
# - Re-validates an established connection with periodic pings
# - Flips back to DISCONNECTED when the transport reports a failure
#
# There is no retry loop. A failed attempt is reported to whoever asked for
# it, and the next caller triggers a fresh attempt.
#
# Usage:
#   from lib.database import ConnectionGuard
#   guard = ConnectionGuard(settings)
#   await guard.ensure_connected()
#   users = guard.database["users"]
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from lib.utils import ApplicationError, ConfigurationMissingError, redact_uri

if TYPE_CHECKING:
    from app.config import Settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# Anything that builds a client from (uri, **options)
ClientFactory = Callable[..., Any]


class ConnectionState(str, Enum):
    """Lifecycle state of the database connection."""
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"


class DatabaseConnectionError(ApplicationError):
    """
    A connection attempt failed, or the connection is not available.

    The underlying driver/configuration error is kept in `cause` and is also
    chained as __cause__ when raised.
    """

    def __init__(
        self,
        message: str,
        cause: BaseException | None = None,
        suggestion: str | None = None,
    ):
        details = {}
        if cause is not None:
            details = {"cause": type(cause).__name__, "error": str(cause)}
        super().__init__(
            message=message,
            code="DATABASE_CONNECTION_ERROR",
            suggestion=suggestion or "Check MONGO_URI and that the database server is reachable",
            details=details,
        )
        self.cause = cause


class ConnectionGuard:
    """
    Explicit, injectable owner of the MongoDB connection.

    One instance per application. It is created by the app factory and shared
    with the request middleware, the lifespan handler and route dependencies
    through `app.state.connection_guard`.

    Example:
        guard = ConnectionGuard(settings)
        await guard.ensure_connected()   # one network round trip
        await guard.ensure_connected()   # no I/O, already connected
        guard.database["users"].find_one({"email": email})
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: ClientFactory | None = None,
    ):
        self._settings = settings
        self._client_factory = client_factory or AsyncIOMotorClient
        self._client: Any = None
        self._state = ConnectionState.DISCONNECTED
        self._pending: asyncio.Task | None = None
        self.attempts = 0

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def client(self) -> Any:
        """
        The live client.

        Raises:
            DatabaseConnectionError: If no connection is established
        """
        if not self.is_connected:
            raise DatabaseConnectionError("Database connection unavailable")
        return self._client

    @property
    def database(self) -> Any:
        """Handle to MONGO_DB_NAME on the live client."""
        return self.client[self._settings.MONGO_DB_NAME]

    # -------------------------------------------------------------------------
    # Connecting
    # -------------------------------------------------------------------------

    async def ensure_connected(self) -> None:
        """
        Make sure a connection is established.

        Returns immediately when already connected. Otherwise joins the
        in-flight attempt, or starts one if none is running. Every caller
        waiting on the same attempt sees the same outcome.

        Raises:
            DatabaseConnectionError: If the attempt fails
        """
        if self.is_connected:
            return

        if self._pending is None or self._pending.done():
            self._pending = asyncio.ensure_future(self._connect())
            self._pending.add_done_callback(self._clear_pending)

        # shield: a cancelled request must not cancel the shared attempt
        await asyncio.shield(self._pending)

    def _clear_pending(self, task: asyncio.Task) -> None:
        if self._pending is task:
            self._pending = None
        # Retrieve the exception so an attempt nobody awaited anymore
        # doesn't log "exception was never retrieved"
        if not task.cancelled():
            task.exception()

    async def _connect(self) -> None:
        """Perform exactly one connection attempt."""
        self.attempts += 1
        uri = self._settings.MONGO_URI

        if not uri:
            error = ConfigurationMissingError("MONGO_URI")
            self._state = ConnectionState.DISCONNECTED
            logger.error(f"Database connection error: {error.message}")
            raise DatabaseConnectionError(
                "Database connection failed: MONGO_URI is not set",
                cause=error,
                suggestion=error.suggestion,
            ) from error

        logger.debug(f"Connecting to database at {redact_uri(uri)} (attempt {self.attempts})")

        client = None
        try:
            client = self._client_factory(uri, **self._settings.mongo_client_options)
            # Client construction is lazy; the ping is the real round trip
            await client.admin.command("ping")
        except Exception as e:
            # Driver errors, bad option combinations (ValueError), DNS (OSError)
            self._state = ConnectionState.DISCONNECTED
            if client is not None:
                client.close()
            logger.error(f"Database connection error: {type(e).__name__}: {e}")
            raise DatabaseConnectionError(
                f"Database connection failed: {e}",
                cause=e,
            ) from e

        previous, self._client = self._client, client
        if previous is not None:
            previous.close()

        self._state = ConnectionState.CONNECTED
        logger.info("Connected to database")

    # -------------------------------------------------------------------------
    # Liveness
    # -------------------------------------------------------------------------

    def mark_disconnected(self, reason: str | BaseException | None = None) -> None:
        """
        Record that the established connection can no longer be trusted.

        The client is kept until the next successful attempt replaces it.
        """
        if self._state is ConnectionState.DISCONNECTED:
            return
        self._state = ConnectionState.DISCONNECTED
        logger.warning(f"Database marked disconnected: {reason or 'unknown reason'}")

    async def check_health(self) -> bool:
        """
        Ping the live connection.

        Never opens a new connection. A failed ping flips the guard to
        DISCONNECTED so the next request reconnects.

        Returns:
            True if connected and the ping succeeded
        """
        if not self.is_connected:
            return False

        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            self.mark_disconnected(e)
            return False
        return True

    async def run_health_monitor(self, interval: float, stop_event: asyncio.Event) -> None:
        """
        Background task: ping every `interval` seconds until `stop_event` is set.

        Only an established connection is probed; reconnecting stays lazy.
        """
        logger.info(f"Starting database health monitor (every {interval}s)")

        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                if not self.is_connected:
                    continue
                try:
                    healthy = await self.check_health()
                except Exception as e:
                    logger.exception(f"Database health check raised: {e}")
                    self.mark_disconnected(e)
                    healthy = False
                if not healthy:
                    logger.warning("Database health check failed")

        logger.info("Database health monitor stopped")

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the client (application shutdown)."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Database connection closed")
        self._state = ConnectionState.DISCONNECTED
