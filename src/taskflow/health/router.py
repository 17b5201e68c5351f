"""Liveness and database probes."""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.config import get_settings
from taskflow.database import get_session

logger = structlog.get_logger()

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe: returns 200 if the process is alive."""
    settings = get_settings()
    return {"status": "UP", "version": settings.app_version}


@router.get("/health/database")
async def database_health(
    db: AsyncSession = Depends(get_session),  # noqa: B008
) -> JSONResponse:
    """Database probe: 200 when ``SELECT 1`` succeeds, 503 otherwise."""
    try:
        result = await db.execute(text("SELECT 1"))
        result.scalar()
    except Exception as exc:
        logger.warning("database_health_failed", error=str(exc))
        return JSONResponse(status_code=503, content={"status": "DOWN", "database": "unreachable"})
    return JSONResponse(status_code=200, content={"status": "UP", "database": "ok"})
