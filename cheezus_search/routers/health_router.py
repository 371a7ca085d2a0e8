"""
Health check router.

Provides the liveness and readiness probes, pool statistics and a summary
of the active search configuration.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .. import __version__
from ..database import get_db_stats, get_engine
from ..dependencies import get_search_service
from ..services.search_service import CatalogSearchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str = "cheezus-search"
    version: str = __version__


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Basic health check endpoint - returns 200 if service is running",
)
async def health_check():
    """
    Basic health check.

    Always returns 200 OK if the service is running.
    """
    return HealthResponse(status="healthy", timestamp=_now())


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Check that the catalogue database is reachable",
)
async def readiness_check():
    """
    Readiness check.

    Returns 200 if the database answers a trivial query, 503 otherwise.
    """
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
        checks = {"database": "healthy"}
    except SQLAlchemyError as e:
        logger.error(f"Database readiness check failed: {e}")
        checks = {"database": "unhealthy"}

    ready = all(check == "healthy" for check in checks.values())
    response = ReadinessResponse(ready=ready, checks=checks, timestamp=_now())
    if not ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=response.model_dump()
        )
    return response


@router.get(
    "/db/stats",
    summary="Database connection pool statistics",
    description="Get database pool health metrics",
)
async def database_stats():
    """Get database connection pool statistics."""
    return {"timestamp": _now(), "connection_pool": get_db_stats()}


@router.get(
    "/search/config",
    summary="Search configuration",
    description="Thresholds, caps and synonym settings currently in effect",
)
async def search_config(service: CatalogSearchService = Depends(get_search_service)):
    """Return the active ranking configuration."""
    return service.get_stats()
