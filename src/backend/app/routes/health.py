"""
Health check endpoint handler.
"""

import logging

from fastapi import APIRouter

from core.database import ping_database
from core.decorators import DatabaseErrorHandler

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring.
    Checks that the record store answers a trivial query.
    """
    health_status = {
        "status": "healthy",
        "services": {}
    }

    try:
        database_healthy = await ping_database()
        health_status["services"]["database"] = {
            "status": "healthy" if database_healthy else "unhealthy",
        }
        if not database_healthy:
            health_status["status"] = "degraded"
    except DatabaseErrorHandler.DATABASE_EXCEPTIONS as e:
        logger.warning(f"Health check: database unreachable: {e}")
        health_status["services"]["database"] = {
            "status": "unhealthy",
            "error": str(e),
        }
        health_status["status"] = "degraded"

    return health_status
