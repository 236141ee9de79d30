"""Project and list queries."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lunapm.exceptions import NotFoundError
from lunapm.models.project import ListTask, Project, TaskList
from lunapm.models.task import Task
from lunapm.models.workspace import ProjectCustomFieldValue


class ProjectService:
    """Read access to projects and their lists."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_projects(self) -> Sequence[Project]:
        """All projects, newest first."""
        result = await self.db.execute(
            select(Project)
            .options(selectinload(Project.workspace))
            .order_by(Project.created_at.desc())
        )
        return result.scalars().all()

    async def get_project(self, project_id: UUID, workspace_id: UUID | None = None) -> Project:
        """Load a project with its workspace, lists and custom field values.

        With ``workspace_id`` the project must belong to that workspace.
        """
        result = await self.db.execute(
            select(Project)
            .where(Project.id == project_id)
            .options(
                selectinload(Project.workspace),
                selectinload(Project.lists),
                selectinload(Project.custom_field_values).selectinload(
                    ProjectCustomFieldValue.custom_field
                ),
            )
        )
        project = result.scalar_one_or_none()
        if project is None or (workspace_id is not None and project.workspace_id != workspace_id):
            raise NotFoundError("Project", project_id)
        return project

    async def workspace_projects(self, workspace_id: UUID) -> Sequence[Project]:
        """Projects of a workspace by name, with their lists."""
        result = await self.db.execute(
            select(Project)
            .where(Project.workspace_id == workspace_id)
            .options(selectinload(Project.lists))
            .order_by(Project.name)
        )
        return result.scalars().all()

    async def task_counts(self, project_ids: Sequence[UUID]) -> dict[UUID, int]:
        """Number of tasks (subtasks included) per project."""
        if not project_ids:
            return {}
        result = await self.db.execute(
            select(Task.project_id, func.count(Task.id))
            .where(Task.project_id.in_(project_ids))
            .group_by(Task.project_id)
        )
        return {project_id: count for project_id, count in result.all()}

    async def list_lists(self) -> list[tuple[TaskList, int]]:
        """All lists, newest first, with their member task counts."""
        member_count = (
            select(func.count(ListTask.id))
            .where(ListTask.list_id == TaskList.id)
            .correlate(TaskList)
            .scalar_subquery()
        )
        result = await self.db.execute(
            select(TaskList, member_count)
            .options(selectinload(TaskList.project).selectinload(Project.workspace))
            .order_by(TaskList.created_at.desc())
        )
        return [(task_list, count or 0) for task_list, count in result.all()]
