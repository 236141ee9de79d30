"""Project endpoints for the admin surface."""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from lunapm.api.v1.auth import AdminUser
from lunapm.api.v1.schemas import (
    BadgeResponse,
    CustomFieldValueResponse,
    FolderTreeResponse,
    KanbanColumnResponse,
    TaskHierarchyResponse,
    badge_response,
    board_response,
    custom_fields_response,
    folder_tree_response,
    hierarchy_response,
)
from lunapm.api.v1.views import custom_field_projection, kanban_board, project_hierarchy
from lunapm.db.session import DBSession
from lunapm.services.asset import AssetService
from lunapm.services.custom_field import CustomFieldService
from lunapm.services.display import project_status_badge
from lunapm.services.hierarchy import project_view_group_label
from lunapm.services.kanban import KanbanCard
from lunapm.services.project import ProjectService
from lunapm.services.task import TaskService

router = APIRouter()


class ProjectSummary(BaseModel):
    id: UUID
    name: str
    workspace_id: UUID
    workspace_name: str
    status: str
    status_badge: BadgeResponse
    start_date: date | None
    end_date: date | None


class ProjectDetailResponse(ProjectSummary):
    description: str | None
    custom_fields: list[CustomFieldValueResponse]
    hierarchy: TaskHierarchyResponse
    kanban: list[KanbanColumnResponse]
    assets: FolderTreeResponse


class CustomFieldValueCreate(BaseModel):
    custom_field_id: UUID
    value: str = Field(..., min_length=1)


class CustomFieldValueUpdate(BaseModel):
    value: str = Field(..., min_length=1)


class CustomFieldValueWriteResponse(BaseModel):
    id: UUID
    project_id: UUID
    custom_field_id: UUID
    value: str

    model_config = {"from_attributes": True}


@router.get("", response_model=list[ProjectSummary])
async def list_projects(db: DBSession, current_user: AdminUser) -> list[ProjectSummary]:
    """All projects, newest first."""
    projects = await ProjectService(db).list_projects()
    return [
        ProjectSummary(
            id=project.id,
            name=project.name,
            workspace_id=project.workspace_id,
            workspace_name=project.workspace.name,
            status=project.status,
            status_badge=badge_response(project_status_badge(project.status)),
            start_date=project.start_date,
            end_date=project.end_date,
        )
        for project in projects
    ]


@router.get("/{project_id}", response_model=ProjectDetailResponse)
async def get_project(
    project_id: UUID,
    db: DBSession,
    current_user: AdminUser,
) -> ProjectDetailResponse:
    """Project header, custom fields, task hierarchy, kanban board and assets."""
    project = await ProjectService(db).get_project(project_id)
    tasks = await TaskService(db).list_scope_tasks(project.workspace_id, project_id=project.id)
    hierarchy = await project_hierarchy(db, project, tasks)

    cards = [KanbanCard.from_task(row.task, project_view_group_label(row)) for row in hierarchy.rows]
    board = await kanban_board(db, cards)
    tree = await AssetService(db).folder_tree(project.workspace_id, project.id)

    return ProjectDetailResponse(
        id=project.id,
        name=project.name,
        workspace_id=project.workspace_id,
        workspace_name=project.workspace.name,
        status=project.status,
        status_badge=badge_response(project_status_badge(project.status)),
        start_date=project.start_date,
        end_date=project.end_date,
        description=project.description,
        custom_fields=custom_fields_response(await custom_field_projection(db, project)),
        hierarchy=hierarchy_response(hierarchy),
        kanban=board_response(board),
        assets=folder_tree_response(tree),
    )


@router.post(
    "/{project_id}/custom-fields",
    response_model=CustomFieldValueWriteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_custom_field_value(
    project_id: UUID,
    data: CustomFieldValueCreate,
    db: DBSession,
    current_user: AdminUser,
):
    """Set a custom field value. Fails with 409 when the project already has one."""
    return await CustomFieldService(db).add_value(project_id, data.custom_field_id, data.value)


@router.put("/{project_id}/custom-fields/{field_id}", response_model=CustomFieldValueWriteResponse)
async def update_custom_field_value(
    project_id: UUID,
    field_id: UUID,
    data: CustomFieldValueUpdate,
    db: DBSession,
    current_user: AdminUser,
):
    """Replace an existing custom field value."""
    return await CustomFieldService(db).update_value(project_id, field_id, data.value)
