"""Health check endpoints."""

import time
from datetime import datetime, timezone

from fastapi import APIRouter
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import __version__
from app.config import settings
from app.database import async_session_maker
from app.redis import get_redis
from app.schemas.common import HealthResponse

router = APIRouter()

STARTED_AT = time.monotonic()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get(
    "",
    response_model=HealthResponse,
    summary="Liveness check",
)
async def health_check() -> HealthResponse:
    """Report that the API process is up."""
    return HealthResponse(
        status="OK",
        message="Issue Tracker API is running",
        version=__version__,
        environment=settings.app_env,
        timestamp=_now(),
        uptime=round(time.monotonic() - STARTED_AT, 3),
    )


@router.get(
    "/live",
    response_model=HealthResponse,
    summary="Liveness probe",
)
async def liveness_check() -> HealthResponse:
    """Liveness probe - basic check that the application is running."""
    return HealthResponse(status="alive", version=__version__, timestamp=_now())


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness probe",
)
async def readiness_check() -> HealthResponse:
    """Readiness probe - checks database and Redis connectivity."""
    db_status = "healthy"
    redis_status = "healthy"

    try:
        async with async_session_maker() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = f"unhealthy: {e}"

    redis_client = await get_redis()
    if redis_client is None:
        redis_status = "unavailable"
    else:
        try:
            await redis_client.ping()
        except RedisError as e:
            redis_status = f"unhealthy: {e}"

    # Redis only backs rate limiting, so the API is ready without it
    overall_status = "healthy" if db_status == "healthy" else "unhealthy"

    return HealthResponse(
        status=overall_status,
        version=__version__,
        timestamp=_now(),
        database=db_status,
        redis=redis_status,
    )
