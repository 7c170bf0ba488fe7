# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Provides health check endpoints for monitoring and load balancers.
# =============================================================================

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from app.dependencies import GuardDep, SettingsDep

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str
    database: str


class ChecksResponse(BaseModel):
    """Individual service checks."""
    database: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""
    status: str
    checks: ChecksResponse
    timestamp: str


class LivenessResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(settings: SettingsDep, guard: GuardDep):
    """
    Health check endpoint.

    Returns basic health status and the current database connection state.
    """
    return HealthResponse(
        status="healthy",
        timestamp=_now(),
        environment=settings.ENVIRONMENT,
        version="1.0.0",
        database=guard.state.value,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(guard: GuardDep):
    """
    Readiness check endpoint.

    Pings the database. A failed ping marks the connection as lost so the
    next request reconnects.
    """
    healthy = await guard.check_health()

    return ReadinessResponse(
        status="ready" if healthy else "degraded",
        checks=ChecksResponse(database="healthy" if healthy else "unhealthy"),
        timestamp=_now(),
    )


@router.get("/health/live", response_model=LivenessResponse)
async def liveness_check():
    """
    Liveness check endpoint.

    Returns whether the service process is alive. Served even while the
    database is unreachable.
    """
    return LivenessResponse(
        status="alive",
        timestamp=_now(),
    )
