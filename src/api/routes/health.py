"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

router = APIRouter(tags=["health"])

VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None
    identity_provider: str | None = None


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check(request: Request) -> HealthResponse:
    """
    Basic health check for load balancers.

    Returns service status without checking dependencies. Fast and lightweight.
    """
    return HealthResponse(
        status="healthy",
        version=VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=request.app.state.settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(request: Request) -> HealthResponse:
    """
    Detailed health check including profile store connectivity.

    Use for monitoring dashboards that need to verify all dependencies.
    """
    db_status = "unknown"
    try:
        async with request.app.state.session_factory() as session:
            await session.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {type(e).__name__}"

    identity = request.app.state.identity_provider
    identity_status = "configured" if identity.is_configured else "not_configured"

    overall_status = "healthy" if db_status == "healthy" else "degraded"

    return HealthResponse(
        status=overall_status,
        version=VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        environment=request.app.state.settings.app_env,
        database=db_status,
        identity_provider=identity_status,
    )
