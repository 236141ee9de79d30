"""View assembly shared by the admin and client routers.

Each helper runs the queries a view needs, then hands the rows to the pure hierarchy,
kanban and custom field functions.
"""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lunapm.models.project import Project
from lunapm.models.task import Task
from lunapm.services.custom_field import (
    CustomFieldEntry,
    CustomFieldService,
    project_custom_fields,
)
from lunapm.services.hierarchy import TaskHierarchy, resolve_hierarchy
from lunapm.services.kanban import KanbanCard, KanbanColumn, build_board
from lunapm.services.task import TaskService


async def project_hierarchy(
    db: AsyncSession,
    project: Project,
    tasks: Sequence[Task] | None = None,
) -> TaskHierarchy:
    """Task hierarchy of one project. ``project.lists`` must be loaded."""
    service = TaskService(db)
    if tasks is None:
        tasks = await service.list_scope_tasks(project.workspace_id, project_id=project.id)
    counts = await service.subtask_counts([task.id for task in tasks])
    return resolve_hierarchy(tasks, project.lists, counts)


async def kanban_board(db: AsyncSession, cards: Sequence[KanbanCard]) -> list[KanbanColumn]:
    statuses = await TaskService(db).list_statuses()
    return build_board(statuses, cards)


async def custom_field_projection(
    db: AsyncSession, project: Project
) -> list[CustomFieldEntry]:
    """Workspace field definitions merged with the values of one project.

    ``project.custom_field_values`` must be loaded.
    """
    definitions = await CustomFieldService(db).get_workspace_fields(project.workspace_id)
    return project_custom_fields(definitions, project.custom_field_values)


def tasks_by_project(tasks: Sequence[Task]) -> dict[UUID | None, list[Task]]:
    """Group tasks by project id, keeping their order."""
    grouped: dict[UUID | None, list[Task]] = {}
    for task in tasks:
        grouped.setdefault(task.project_id, []).append(task)
    return grouped
