# =============================================================================
# app/routers/root.py - Root Endpoint
# =============================================================================

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/")
async def root(request: Request):
    """
    Root endpoint - returns API info.
    """
    return {
        "name": request.app.title,
        "version": request.app.version,
        "docs": "/docs",
        "health": "/health",
    }
