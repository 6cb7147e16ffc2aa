"""
Health Check Endpoints

Health, readiness and liveness probes. Redis is optional for this
service (reminder markers fall back to memory), so only the database
decides readiness.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.config import settings
from app.infra.database import check_db_health
from app.infra.redis import check_redis_health

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])

# Track application start time for uptime calculation
_start_time: Optional[datetime] = None


def set_start_time() -> None:
    """Set application start time. Called once on startup."""
    global _start_time
    _start_time = datetime.now(timezone.utc)


def get_uptime_seconds() -> Optional[float]:
    """Get application uptime in seconds."""
    if _start_time is None:
        return None
    return (datetime.now(timezone.utc) - _start_time).total_seconds()


class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: datetime
    version: str
    environment: str


class ReadyResponse(BaseModel):
    """Readiness check response with dependency status."""
    status: str
    timestamp: datetime
    checks: dict[str, str]


class LiveResponse(BaseModel):
    """Liveness check response."""
    status: str
    timestamp: datetime
    uptime_seconds: Optional[float] = None
    queue_pending: Optional[int] = None


class DetailedHealthResponse(BaseModel):
    """Detailed health check with dependency and provider info."""
    status: str
    timestamp: datetime
    version: str
    environment: str
    uptime_seconds: Optional[float]
    checks: dict[str, str]
    providers: dict[str, str]


async def _dependency_checks() -> dict[str, str]:
    checks = {}

    db_ok = await check_db_health()
    checks["database"] = "ok" if db_ok else "failed"
    if not db_ok:
        logger.warning("Readiness check: Database unhealthy")

    redis_ok = await check_redis_health()
    checks["redis"] = "ok" if redis_ok else "degraded"
    if not redis_ok:
        logger.warning("Readiness check: Redis unavailable, reminder markers in memory")

    return checks


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the application is running. Does not check dependencies.",
)
async def health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version="1.0.0",
        environment=settings.app_env,
    )


@router.get(
    "/ready",
    response_model=ReadyResponse,
    summary="Readiness probe",
    description="Returns 503 if the appointment database is unreachable.",
    responses={
        200: {"description": "Ready to serve"},
        503: {"description": "Database unavailable"},
    },
)
async def ready() -> ReadyResponse:
    checks = await _dependency_checks()
    ready_ok = checks["database"] == "ok"

    response = ReadyResponse(
        status="ready" if ready_ok else "not_ready",
        timestamp=datetime.now(timezone.utc),
        checks=checks,
    )

    if not ready_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(mode="json"),
        )

    return response


@router.get(
    "/live",
    response_model=LiveResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
)
async def live(request: Request) -> LiveResponse:
    """Always 200 while the process runs. Reports the queue backlog."""
    service = getattr(request.app.state, "notification_service", None)
    return LiveResponse(
        status="alive",
        timestamp=datetime.now(timezone.utc),
        uptime_seconds=get_uptime_seconds(),
        queue_pending=service.pending if service else None,
    )


@router.get(
    "/detailed",
    response_model=DetailedHealthResponse,
    summary="Detailed health check",
    description="Dependency status and active providers. Only available in development.",
    include_in_schema=settings.is_development,
)
async def detailed(request: Request) -> DetailedHealthResponse:
    if not settings.is_development:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Not found",
        )

    checks = await _dependency_checks()

    providers = {}
    service = getattr(request.app.state, "notification_service", None)
    if service is not None:
        for provider in (service.sms_provider, service.email_provider, service.whatsapp_provider):
            label = "mock" if provider.is_mock else provider.name
            providers[provider.channel.value] = label

    all_ok = all(v == "ok" for v in checks.values())

    return DetailedHealthResponse(
        status="healthy" if all_ok else "degraded",
        timestamp=datetime.now(timezone.utc),
        version="1.0.0",
        environment=settings.app_env,
        uptime_seconds=get_uptime_seconds(),
        checks=checks,
        providers=providers,
    )
