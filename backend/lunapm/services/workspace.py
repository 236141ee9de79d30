"""Workspace service: lookups, client portal scoping and aggregate deletion."""

from uuid import UUID

import structlog
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lunapm.exceptions import NotFoundError
from lunapm.models.asset import File, Folder
from lunapm.models.enums import WorkspaceType
from lunapm.models.project import ListTask, Project, TaskList
from lunapm.models.task import (
    Task,
    TaskApproval,
    TaskComment,
    TaskCommentFile,
    TaskDependency,
    TaskFile,
)
from lunapm.models.user import User
from lunapm.models.workspace import ProjectCustomFieldValue, Workspace, WorkspaceCustomField

logger = structlog.get_logger()


class WorkspaceService:
    """Service for workspaces."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_workspaces(self) -> list[tuple[Workspace, int, int]]:
        """Workspaces by name with their project and task counts."""
        project_count = (
            select(func.count(Project.id))
            .where(Project.workspace_id == Workspace.id)
            .correlate(Workspace)
            .scalar_subquery()
        )
        task_count = (
            select(func.count(Task.id))
            .where(Task.workspace_id == Workspace.id)
            .correlate(Workspace)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(Workspace, project_count, task_count).order_by(Workspace.name)
        )
        return [
            (workspace, projects or 0, tasks or 0)
            for workspace, projects, tasks in result.all()
        ]

    async def get_workspace(self, workspace_id: UUID) -> Workspace:
        result = await self.db.execute(
            select(Workspace)
            .where(Workspace.id == workspace_id)
            .options(
                selectinload(Workspace.primary_user),
                selectinload(Workspace.custom_fields),
            )
        )
        workspace = result.scalar_one_or_none()
        if workspace is None:
            raise NotFoundError("Workspace", workspace_id)
        return workspace

    async def get_client_workspace(self, slug: str, user: User | None = None) -> Workspace:
        """Resolve a client portal slug.

        Unknown slugs, COMPANY workspaces and workspaces the user may not open all
        raise NotFoundError.
        """
        result = await self.db.execute(
            select(Workspace)
            .where(Workspace.slug == slug)
            .options(selectinload(Workspace.custom_fields))
        )
        workspace = result.scalar_one_or_none()
        if workspace is None or workspace.type != WorkspaceType.CLIENT.value:
            raise NotFoundError("Workspace", slug)
        if user is not None and not user.is_admin and user.workspace_id != workspace.id:
            logger.warning(
                "client_portal_access_denied",
                user_id=str(user.id),
                workspace_id=str(workspace.id),
            )
            raise NotFoundError("Workspace", slug)
        return workspace

    async def delete_workspace(self, workspace_id: UUID) -> None:
        """Delete a workspace and everything it owns, children before parents.

        Runs inside the caller's transaction; nothing is removed if any step fails.
        """
        workspace = await self.db.get(Workspace, workspace_id)
        if workspace is None:
            raise NotFoundError("Workspace", workspace_id)

        task_ids = select(Task.id).where(Task.workspace_id == workspace_id)
        project_ids = select(Project.id).where(Project.workspace_id == workspace_id)
        comment_ids = select(TaskComment.id).where(TaskComment.task_id.in_(task_ids))

        # Self references first so parent rows can go in any order
        await self._bulk(
            update(TaskComment)
            .where(TaskComment.task_id.in_(task_ids))
            .values(parent_comment_id=None)
        )
        await self._bulk(
            update(Task).where(Task.workspace_id == workspace_id).values(parent_task_id=None)
        )
        await self._bulk(
            update(Folder).where(Folder.workspace_id == workspace_id).values(parent_id=None)
        )

        await self._bulk(
            delete(TaskCommentFile).where(TaskCommentFile.comment_id.in_(comment_ids))
        )
        await self._bulk(delete(TaskComment).where(TaskComment.task_id.in_(task_ids)))
        await self._bulk(delete(TaskApproval).where(TaskApproval.task_id.in_(task_ids)))
        await self._bulk(
            delete(TaskDependency).where(
                or_(
                    TaskDependency.task_id.in_(task_ids),
                    TaskDependency.depends_on_id.in_(task_ids),
                )
            )
        )
        await self._bulk(delete(TaskFile).where(TaskFile.task_id.in_(task_ids)))
        await self._bulk(delete(ListTask).where(ListTask.task_id.in_(task_ids)))
        await self._bulk(
            delete(ListTask).where(
                ListTask.list_id.in_(select(TaskList.id).where(TaskList.project_id.in_(project_ids)))
            )
        )
        tasks_deleted = await self._bulk(delete(Task).where(Task.workspace_id == workspace_id))
        await self._bulk(delete(TaskList).where(TaskList.project_id.in_(project_ids)))
        await self._bulk(
            delete(ProjectCustomFieldValue).where(ProjectCustomFieldValue.project_id.in_(project_ids))
        )
        await self._bulk(
            delete(WorkspaceCustomField).where(WorkspaceCustomField.workspace_id == workspace_id)
        )
        await self._bulk(
            delete(TaskFile).where(
                TaskFile.file_id.in_(select(File.id).where(File.workspace_id == workspace_id))
            )
        )
        await self._bulk(delete(File).where(File.workspace_id == workspace_id))
        await self._bulk(delete(Folder).where(Folder.workspace_id == workspace_id))
        projects_deleted = await self._bulk(
            delete(Project).where(Project.workspace_id == workspace_id)
        )

        await self._bulk(
            update(User).where(User.workspace_id == workspace_id).values(workspace_id=None)
        )
        await self._bulk(delete(Workspace).where(Workspace.id == workspace_id))
        self.db.expunge(workspace)

        logger.info(
            "workspace_deleted",
            workspace_id=str(workspace_id),
            projects=projects_deleted.rowcount,
            tasks=tasks_deleted.rowcount,
        )

    async def _bulk(self, stmt):
        return await self.db.execute(stmt, execution_options={"synchronize_session": False})
