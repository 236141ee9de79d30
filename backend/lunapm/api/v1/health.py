"""Liveness and readiness probes."""

from typing import Any

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import ORJSONResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lunapm.config import get_settings
from lunapm.db.session import get_db_session
from lunapm.models.enums import StatusState
from lunapm.models.task import TaskStatus

router = APIRouter()
logger = structlog.get_logger()
settings = get_settings()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check(db: AsyncSession = Depends(get_db_session)) -> ORJSONResponse:
    """Readiness: the store answers and the status catalog can take new tasks.

    ``unavailable`` (503) when the database fails, ``degraded`` when no active default
    task status exists, since task creation needs one.
    """
    try:
        result = await db.execute(
            select(
                func.count(TaskStatus.id),
                func.count(TaskStatus.id).filter(TaskStatus.is_default.is_(True)),
            ).where(TaskStatus.state == StatusState.ACTIVE.value)
        )
        active_statuses, default_statuses = result.one()
    except SQLAlchemyError as e:
        logger.error("readiness_database_failed", error=str(e))
        return ORJSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unavailable",
                "version": settings.app_version,
                "checks": {"database": "error"},
            },
        )

    checks = {
        "database": "ok",
        "task_statuses": "ok" if default_statuses else "no default status",
    }
    content: dict[str, Any] = {
        "status": "ready" if default_statuses else "degraded",
        "version": settings.app_version,
        "checks": checks,
        "active_statuses": active_statuses,
    }
    if not default_statuses:
        logger.warning("readiness_no_default_status", active_statuses=active_statuses)
    return ORJSONResponse(content=content)
