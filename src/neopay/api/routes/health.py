"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from sqlalchemy.exc import SQLAlchemyError

from neopay.api.schemas import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/", response_model=MessageResponse)
async def root() -> MessageResponse:
    return MessageResponse(message="Welcome to NeoPay API")


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(request: Request) -> HealthResponse:
    """Check API and database health."""
    db_status = "unhealthy"
    try:
        await request.app.state.database.ping()
        db_status = "healthy"
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed: %s", e)

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=db_status,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check() -> dict[str, str]:
    """Readiness check for container orchestration."""
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
