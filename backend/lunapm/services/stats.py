"""Aggregate statistics for the dashboard and workspace summaries."""

from dataclasses import asdict, dataclass
from uuid import UUID

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lunapm.exceptions import NotFoundError
from lunapm.models.enums import ApprovalStatus, ProjectStatus
from lunapm.models.project import Project
from lunapm.models.task import Task, TaskApproval
from lunapm.models.workspace import Workspace

logger = structlog.get_logger()


@dataclass(frozen=True)
class DashboardStats:
    workspaces: int
    active_projects: int
    open_tasks: int
    pending_approvals: int

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class StatsService:
    """Counts computed in a single statement.

    All four numbers come from one SELECT of scalar sub-selects, so they share one
    snapshot: a pending approval is never counted for a task missing from open tasks.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def dashboard(self) -> DashboardStats:
        """Counts across every workspace."""
        stmt = select(
            select(func.count(Workspace.id)).scalar_subquery(),
            select(func.count(Project.id))
            .where(Project.status == ProjectStatus.ACTIVE.value)
            .scalar_subquery(),
            select(func.count(Task.id))
            .where(Task.parent_task_id.is_(None))
            .scalar_subquery(),
            select(func.count(TaskApproval.id))
            .where(TaskApproval.status == ApprovalStatus.PENDING.value)
            .scalar_subquery(),
        )
        return await self._fetch(stmt)

    async def workspace(self, workspace_id: UUID) -> DashboardStats:
        """The same counts scoped to one workspace."""
        stmt = select(
            select(func.count(Workspace.id))
            .where(Workspace.id == workspace_id)
            .scalar_subquery(),
            select(func.count(Project.id))
            .where(
                Project.workspace_id == workspace_id,
                Project.status == ProjectStatus.ACTIVE.value,
            )
            .scalar_subquery(),
            select(func.count(Task.id))
            .where(Task.workspace_id == workspace_id, Task.parent_task_id.is_(None))
            .scalar_subquery(),
            select(func.count(TaskApproval.id))
            .join(Task, Task.id == TaskApproval.task_id)
            .where(
                Task.workspace_id == workspace_id,
                TaskApproval.status == ApprovalStatus.PENDING.value,
            )
            .scalar_subquery(),
        )
        stats = await self._fetch(stmt)
        if stats.workspaces == 0:
            raise NotFoundError("Workspace", workspace_id)
        return stats

    async def _fetch(self, stmt) -> DashboardStats:
        row = (await self.db.execute(stmt)).one()
        stats = DashboardStats(
            workspaces=row[0] or 0,
            active_projects=row[1] or 0,
            open_tasks=row[2] or 0,
            pending_approvals=row[3] or 0,
        )
        logger.debug("stats_computed", **stats.to_dict())
        return stats
