# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated, Any

from fastapi import Depends, Request

from app.config import Settings
from lib.database import ConnectionGuard


def get_app_settings(request: Request) -> Settings:
    """Settings the running app was built with."""
    return request.app.state.settings


def get_connection_guard(request: Request) -> ConnectionGuard:
    """
    Get the application's connection guard.

    Returns the instance created by create_app().
    """
    return request.app.state.connection_guard


def get_database(guard: Annotated[ConnectionGuard, Depends(get_connection_guard)]) -> Any:
    """
    Get a handle to the configured database.

    By the time a handler runs, the connection middleware has already
    connected (or answered the request itself).
    """
    return guard.database


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
GuardDep = Annotated[ConnectionGuard, Depends(get_connection_guard)]
DatabaseDep = Annotated[Any, Depends(get_database)]
