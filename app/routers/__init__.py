# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains the default root router:
# - root.py: API info
# - health.py: Health check endpoints
#
# `api_router` is mounted at "/" by create_app() unless another router is
# passed in.
# =============================================================================

from fastapi import APIRouter

from . import health
from . import root

api_router = APIRouter()
api_router.include_router(root.router, tags=["Root"])
api_router.include_router(health.router, tags=["Health"])

__all__ = [
    "api_router",
    "health",
    "root",
]
