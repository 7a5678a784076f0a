"""Health check endpoints for monitoring."""

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from degreeplan.api.deps import DB
from degreeplan.core.config import settings
from degreeplan.utils.envelopes import api_success

router = APIRouter(tags=["health"])
logger = logging.getLogger("degreeplan.api")


async def _database_reachable(db: DB) -> bool:
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Database health check failed", exc_info=True)
        return False
    return True


@router.get("/health", response_model=dict)
async def health_check(db: DB):
    """Health check endpoint for load balancers and monitoring."""
    healthy = await _database_reachable(db)
    return api_success({
        "status": "ok" if healthy else "degraded",
        "service": settings.APP_NAME,
        "database": "healthy" if healthy else "unhealthy",
    })


@router.get("/health/ready", response_model=dict)
async def readiness_check(db: DB):
    """Readiness probe."""
    return api_success({"ready": await _database_reachable(db)})


@router.get("/health/live", response_model=dict)
async def liveness_check():
    """Liveness probe."""
    return api_success({"alive": True})
