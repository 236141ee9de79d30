"""Workspace endpoints for the admin surface."""

from uuid import UUID

import structlog
from fastapi import APIRouter, status
from pydantic import BaseModel

from lunapm.api.v1.auth import AdminUser
from lunapm.api.v1.schemas import (
    BadgeResponse,
    CustomFieldDefinitionResponse,
    CustomFieldValueResponse,
    DashboardStatsResponse,
    FolderTreeResponse,
    KanbanColumnResponse,
    TaskHierarchyResponse,
    TaskRowResponse,
    UserSummary,
    badge_response,
    board_response,
    custom_field_definition_response,
    custom_fields_response,
    folder_tree_response,
    hierarchy_response,
    stats_response,
    task_row_response,
    user_summary,
)
from lunapm.api.v1.views import kanban_board, tasks_by_project
from lunapm.config import get_settings
from lunapm.db.session import DBSession
from lunapm.models.enums import WorkspaceType
from lunapm.services.asset import AssetService
from lunapm.services.custom_field import CustomFieldService, project_custom_fields
from lunapm.services.display import project_status_badge, workspace_type_badge
from lunapm.services.hierarchy import resolve_hierarchy, workspace_view_group_label
from lunapm.services.kanban import KanbanCard
from lunapm.services.project import ProjectService
from lunapm.services.stats import StatsService
from lunapm.services.task import TaskService
from lunapm.services.workspace import WorkspaceService

router = APIRouter()
logger = structlog.get_logger()
settings = get_settings()


class WorkspaceSummary(BaseModel):
    id: UUID
    name: str
    slug: str
    type: str
    type_badge: BadgeResponse
    project_count: int
    task_count: int


class ProjectSection(BaseModel):
    """A project inside the workspace view."""

    id: UUID
    name: str
    status: str
    status_badge: BadgeResponse
    custom_fields: list[CustomFieldValueResponse]
    hierarchy: TaskHierarchyResponse


class WorkspaceDetailResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    type: str
    type_badge: BadgeResponse
    address: str | None
    primary_contact: UserSummary | None
    client_portal_url: str | None
    custom_fields: list[CustomFieldDefinitionResponse]
    workspace_tasks: list[TaskRowResponse]
    projects: list[ProjectSection]
    kanban: list[KanbanColumnResponse]
    assets: FolderTreeResponse


def client_portal_url(slug: str) -> str:
    return f"{settings.client_portal_path.rstrip('/')}/{slug}"


@router.get("", response_model=list[WorkspaceSummary])
async def list_workspaces(db: DBSession, current_user: AdminUser) -> list[WorkspaceSummary]:
    """Workspaces by name with project and task counts."""
    rows = await WorkspaceService(db).list_workspaces()
    return [
        WorkspaceSummary(
            id=workspace.id,
            name=workspace.name,
            slug=workspace.slug,
            type=workspace.type,
            type_badge=badge_response(workspace_type_badge(workspace.type)),
            project_count=project_count,
            task_count=task_count,
        )
        for workspace, project_count, task_count in rows
    ]


@router.get("/{workspace_id}", response_model=WorkspaceDetailResponse)
async def get_workspace(
    workspace_id: UUID,
    db: DBSession,
    current_user: AdminUser,
) -> WorkspaceDetailResponse:
    """Workspace header, custom fields, tasks per project, kanban board and assets."""
    workspace = await WorkspaceService(db).get_workspace(workspace_id)
    task_service = TaskService(db)

    tasks = await task_service.list_scope_tasks(workspace_id)
    counts = await task_service.subtask_counts([task.id for task in tasks])
    grouped = tasks_by_project(tasks)

    # Project-less tasks have no lists, so every one of them is direct
    workspace_tasks = resolve_hierarchy(grouped.get(None, []), [], counts)

    projects = await ProjectService(db).workspace_projects(workspace_id)
    values = await CustomFieldService(db).get_project_values([project.id for project in projects])
    sections = [
        ProjectSection(
            id=project.id,
            name=project.name,
            status=project.status,
            status_badge=badge_response(project_status_badge(project.status)),
            custom_fields=custom_fields_response(
                project_custom_fields(workspace.custom_fields, values[project.id])
            ),
            hierarchy=hierarchy_response(
                resolve_hierarchy(grouped.get(project.id, []), project.lists, counts)
            ),
        )
        for project in projects
    ]

    cards = [KanbanCard.from_task(task, workspace_view_group_label(task)) for task in tasks]
    board = await kanban_board(db, cards)
    tree = await AssetService(db).folder_tree(workspace_id)

    is_client = workspace.type == WorkspaceType.CLIENT.value
    return WorkspaceDetailResponse(
        id=workspace.id,
        name=workspace.name,
        slug=workspace.slug,
        type=workspace.type,
        type_badge=badge_response(workspace_type_badge(workspace.type)),
        address=workspace.address,
        primary_contact=user_summary(workspace.primary_user),
        client_portal_url=client_portal_url(workspace.slug) if is_client else None,
        custom_fields=[custom_field_definition_response(field) for field in workspace.custom_fields],
        workspace_tasks=[task_row_response(row) for row in workspace_tasks.direct],
        projects=sections,
        kanban=board_response(board),
        assets=folder_tree_response(tree),
    )


@router.get("/{workspace_id}/stats", response_model=DashboardStatsResponse)
async def get_workspace_stats(
    workspace_id: UUID,
    db: DBSession,
    current_user: AdminUser,
) -> DashboardStatsResponse:
    """Dashboard counts scoped to one workspace."""
    return stats_response(await StatsService(db).workspace(workspace_id))


@router.delete("/{workspace_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_workspace(
    workspace_id: UUID,
    db: DBSession,
    current_user: AdminUser,
) -> None:
    """Delete a workspace with all of its projects, tasks, folders and files."""
    await WorkspaceService(db).delete_workspace(workspace_id)
    logger.info(
        "workspace_delete_requested",
        workspace_id=str(workspace_id),
        user_id=str(current_user.id),
    )
