"""
Health check endpoints.

Used for monitoring and load balancer health checks.
"""
from fastapi import APIRouter, Depends
import logging
import platform

from sqlalchemy.ext.asyncio import async_sessionmaker

from api.dependencies import get_session_factory, get_settings
from api.responses import json_response
from core.domain.clock import utc_now
from core.infrastructure.database.config import check_database
from core.settings import AppSettings


logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health")
async def health_check(settings: AppSettings = Depends(get_settings)):
    """
    Health check endpoint.

    Returns system health status.
    """
    return json_response({
        "status": "healthy",
        "timestamp": utc_now().isoformat(),
        "service": settings.service.name,
        "version": settings.service.version,
        "python_version": platform.python_version(),
    })


@router.get("/health/ready")
async def readiness_check(session_factory: async_sessionmaker = Depends(get_session_factory)):
    """
    Readiness check endpoint.

    Returns whether the service can reach its database.
    """
    try:
        await check_database(session_factory)
        database = "ok"
    except Exception as e:
        logger.warning(f"Readiness check failed: {e}")
        database = "unavailable"

    ready = database == "ok"
    return json_response(
        {
            "status": "ready" if ready else "not_ready",
            "timestamp": utc_now().isoformat(),
            "checks": {
                "api": "ok",
                "database": database,
            },
        },
        status_code=200 if ready else 503,
    )
