"""
Health Check Endpoints.

Provides:
- /health - Basic health check
- /health/ready - Readiness check (database)
- /health/live - Liveness check
"""

import logging
import os
from datetime import datetime, timezone

from fastapi import APIRouter, Response, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from tradewire.config import settings

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic health check for load balancers."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "tradewire-backend",
        "version": os.getenv("VERSION", "1.0.0"),
        "environment": settings.effective_env,
    }


@router.get("/health/ready")
async def readiness_check(response: Response):
    """Readiness check with dependency validation.

    Returns 503 if the database is unavailable.
    """
    from tradewire.database import engine

    checks = {"database": False}
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = True
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Readiness check failed: {e}")

    healthy = all(checks.values())
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": "ready" if healthy else "not_ready",
        "checks": checks,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/live")
async def liveness_check():
    """Liveness check. Always 200 while the process is running."""
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
