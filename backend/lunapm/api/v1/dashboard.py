"""Admin dashboard endpoint."""

from fastapi import APIRouter

from lunapm.api.v1.auth import AdminUser
from lunapm.api.v1.schemas import DashboardStatsResponse, stats_response
from lunapm.db.session import DBSession
from lunapm.services.stats import StatsService

router = APIRouter()


@router.get("", response_model=DashboardStatsResponse)
async def get_dashboard(db: DBSession, current_user: AdminUser) -> DashboardStatsResponse:
    """Workspace, active project, open task and pending approval counts."""
    return stats_response(await StatsService(db).dashboard())
