"""Client portal endpoints, scoped to one CLIENT workspace by slug."""

from datetime import date
from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from lunapm.api.v1.auth import CurrentUser
from lunapm.api.v1.schemas import (
    ApprovalResponse,
    BadgeResponse,
    ClientTaskDetailResponse,
    CommentResponse,
    CustomFieldValueResponse,
    StatusSummary,
    TaskHierarchyResponse,
    approval_response,
    badge_response,
    client_task_detail_response,
    comment_response,
    custom_fields_response,
    hierarchy_response,
)
from lunapm.api.v1.views import project_hierarchy
from lunapm.db.session import DBSession
from lunapm.models.enums import ProjectStatus
from lunapm.models.workspace import Workspace
from lunapm.services.approval import ApprovalService, approval_status
from lunapm.services.custom_field import CustomFieldService, project_custom_fields
from lunapm.services.display import approval_status_badge, project_status_badge
from lunapm.services.project import ProjectService
from lunapm.services.task import TaskService
from lunapm.services.workspace import WorkspaceService

router = APIRouter()


async def get_portal_workspace(slug: str, db: DBSession, current_user: CurrentUser) -> Workspace:
    """Resolve the slug to a CLIENT workspace the user may open, or 404."""
    return await WorkspaceService(db).get_client_workspace(slug, current_user)


PortalWorkspace = Annotated[Workspace, Depends(get_portal_workspace)]


class PendingApprovalItem(BaseModel):
    id: UUID
    name: str
    project_id: UUID | None
    project_name: str | None
    status: StatusSummary
    due_date: date | None
    approval_status: str
    approval_badge: BadgeResponse


class ClientProjectSummary(BaseModel):
    id: UUID
    name: str
    status: str
    status_badge: BadgeResponse
    task_count: int
    custom_fields: list[CustomFieldValueResponse]


class ClientOverviewResponse(BaseModel):
    name: str
    slug: str
    project_count: int
    active_project_count: int
    pending_approvals: list[PendingApprovalItem]
    projects: list[ClientProjectSummary]


class ClientProjectResponse(BaseModel):
    id: UUID
    name: str
    description: str | None
    status: str
    status_badge: BadgeResponse
    start_date: date | None
    end_date: date | None
    hierarchy: TaskHierarchyResponse


class ApprovalDecision(BaseModel):
    status: Literal["APPROVED", "REJECTED"]
    note: str | None = Field(default=None, max_length=5000)


class CommentCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=10000)
    parent_comment_id: UUID | None = None


async def _pending_items(db: DBSession, workspace: Workspace) -> list[PendingApprovalItem]:
    tasks = await ApprovalService(db).list_pending(workspace.id)
    return [
        PendingApprovalItem(
            id=task.id,
            name=task.name,
            project_id=task.project_id,
            project_name=task.project.name if task.project is not None else None,
            status=StatusSummary.model_validate(task.status),
            due_date=task.due_date,
            approval_status=approval_status(task),
            approval_badge=badge_response(approval_status_badge(approval_status(task))),
        )
        for task in tasks
    ]


@router.get("", response_model=ClientOverviewResponse)
async def get_overview(workspace: PortalWorkspace, db: DBSession) -> ClientOverviewResponse:
    """Projects, active project count and the pending approvals queue."""
    project_service = ProjectService(db)
    projects = await project_service.workspace_projects(workspace.id)
    project_ids = [project.id for project in projects]
    task_counts = await project_service.task_counts(project_ids)
    values = await CustomFieldService(db).get_project_values(project_ids)

    return ClientOverviewResponse(
        name=workspace.name,
        slug=workspace.slug,
        project_count=len(projects),
        active_project_count=sum(
            1 for project in projects if project.status == ProjectStatus.ACTIVE.value
        ),
        pending_approvals=await _pending_items(db, workspace),
        projects=[
            ClientProjectSummary(
                id=project.id,
                name=project.name,
                status=project.status,
                status_badge=badge_response(project_status_badge(project.status)),
                task_count=task_counts.get(project.id, 0),
                custom_fields=custom_fields_response(
                    project_custom_fields(workspace.custom_fields, values[project.id])
                ),
            )
            for project in projects
        ],
    )


@router.get("/approvals", response_model=list[PendingApprovalItem])
async def get_pending_approvals(
    workspace: PortalWorkspace, db: DBSession
) -> list[PendingApprovalItem]:
    """Tasks waiting for a client decision, across every project of the workspace."""
    return await _pending_items(db, workspace)


@router.get("/projects/{project_id}", response_model=ClientProjectResponse)
async def get_project(
    project_id: UUID,
    workspace: PortalWorkspace,
    db: DBSession,
) -> ClientProjectResponse:
    """Project task hierarchy with the approval status of every row."""
    project = await ProjectService(db).get_project(project_id, workspace_id=workspace.id)
    hierarchy = await project_hierarchy(db, project)
    return ClientProjectResponse(
        id=project.id,
        name=project.name,
        description=project.description,
        status=project.status,
        status_badge=badge_response(project_status_badge(project.status)),
        start_date=project.start_date,
        end_date=project.end_date,
        hierarchy=hierarchy_response(hierarchy, include_approval=True),
    )


@router.get("/tasks/{task_id}", response_model=ClientTaskDetailResponse)
async def get_task(
    task_id: UUID,
    workspace: PortalWorkspace,
    db: DBSession,
) -> ClientTaskDetailResponse:
    """Task with subtasks, comments and approval."""
    task = await TaskService(db).get_task_detail(task_id, workspace_id=workspace.id)
    return client_task_detail_response(task)


@router.post("/tasks/{task_id}/approval", response_model=ApprovalResponse)
async def decide_approval(
    task_id: UUID,
    data: ApprovalDecision,
    workspace: PortalWorkspace,
    db: DBSession,
    current_user: CurrentUser,
) -> ApprovalResponse:
    """Approve or reject a pending task."""
    # The task must belong to this workspace
    await TaskService(db).get_task(task_id, workspace_id=workspace.id)
    approval = await ApprovalService(db).decide(task_id, data.status, current_user.id, data.note)
    return approval_response(approval)


@router.post(
    "/tasks/{task_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    task_id: UUID,
    data: CommentCreate,
    workspace: PortalWorkspace,
    db: DBSession,
    current_user: CurrentUser,
) -> CommentResponse:
    """Comment on a task from the client portal."""
    comment = await TaskService(db).add_comment(
        task_id,
        current_user.id,
        data.body,
        parent_comment_id=data.parent_comment_id,
        workspace_id=workspace.id,
    )
    return comment_response(comment)
