"""
Health check endpoints for monitoring and orchestration.

- /health: Basic liveness check (always returns 200)
- /health/db: Database connectivity check
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentwear.api.deps import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Basic liveness probe.

    Returns 200 OK if the application is running.
    """
    return {"status": "ok", "service": "rentwear-api"}


@router.get("/health/db")
async def health_check_db(session: AsyncSession = Depends(get_db_session)):
    """
    Database connectivity health check.

    Returns 503 Service Unavailable if the database does not answer.
    """
    try:
        result = await session.execute(text("SELECT 1"))
        result.scalar()
    except (SQLAlchemyError, OSError) as e:
        logger.error("Database health check failed", exc_info=e)
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "component": "database",
                "error": "Database connection failed",
            },
        )
    return {"status": "healthy", "component": "database"}
