"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from labor_engine import __version__
from labor_engine.api.dependencies import DbSession, WageCache

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Service, store and wage-rate cache status."""

    status: str
    timestamp: datetime
    database: str
    version: str
    engine_version: str
    cached_wage_rates: int


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(request: Request, db: DbSession, cache: WageCache) -> HealthResponse:
    """Report whether the labor store answers; a failing store degrades status."""
    database = "unhealthy"
    try:
        await db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError:
        logger.warning("Labor store did not answer the health check", exc_info=True)

    return HealthResponse(
        status="healthy" if database == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        database=database,
        version=__version__,
        engine_version=request.app.state.settings.engine_version,
        cached_wage_rates=len(cache),
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check() -> dict[str, str]:
    return {"status": "ready"}


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    return {"status": "alive"}
