"""Liveness and readiness probes."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
async def health():
    """Basic health summary."""
    return {
        "status": "healthy",
        "timestamp": _now(),
        "environment": settings.environment,
    }


@router.get("/ready")
async def ready(db: AsyncSession = Depends(get_db)):
    """Readiness: the server is up and the database answers."""
    checks = {"server": True, "database": True}
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Readiness check failed: %s", e)
        checks["database"] = False

    all_healthy = all(checks.values())
    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content={
            "status": "ready" if all_healthy else "not_ready",
            "checks": checks,
            "timestamp": _now(),
        },
    )


@router.get("/live")
async def live():
    """Liveness: the process is serving requests."""
    return {"status": "alive"}
