"""Task endpoints for the admin surface."""

from datetime import date
from typing import Any
from uuid import UUID

import structlog
from fastapi import APIRouter, status
from pydantic import BaseModel, Field, field_validator

from lunapm.api.v1.auth import AdminUser
from lunapm.api.v1.schemas import (
    CommentResponse,
    StatusSummary,
    TaskDetailResponse,
    UserSummary,
    comment_response,
    task_detail_response,
    user_summary,
)
from lunapm.db.session import DBSession
from lunapm.services.hierarchy import join_list_names, list_names_for
from lunapm.services.task import TaskService

router = APIRouter()
logger = structlog.get_logger()


class TaskCreate(BaseModel):
    """Task creation request.

    Required fields are checked by the service so a missing one is reported the same
    way as any other validation failure, before anything is written.
    """

    name: str | None = None
    workspace_id: UUID | None = None
    status_id: UUID | None = None
    project_id: UUID | None = None
    list_id: UUID | None = None
    parent_task_id: UUID | None = None
    priority: str | None = None
    owner_id: UUID | None = None
    requestor_id: UUID | None = None
    due_date: date | None = None
    start_date: date | None = None
    description: str | None = None
    time_estimate: float | None = Field(default=None, ge=0)
    points: int | None = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)
    requires_approval: bool = False

    @field_validator(
        "workspace_id",
        "status_id",
        "project_id",
        "list_id",
        "parent_task_id",
        "priority",
        "owner_id",
        "requestor_id",
        "due_date",
        "start_date",
        "time_estimate",
        "points",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Form posts send empty strings for untouched inputs."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


class TaskCreatedResponse(BaseModel):
    id: UUID
    name: str
    workspace_id: UUID
    project_id: UUID | None
    parent_task_id: UUID | None
    status_id: UUID
    priority: str
    requires_approval: bool

    model_config = {"from_attributes": True}


class TaskListItem(BaseModel):
    id: UUID
    name: str
    workspace_id: UUID
    workspace_name: str
    project_id: UUID | None
    project_name: str | None
    lists: str
    owner: UserSummary | None
    status: StatusSummary
    due_date: date | None
    subtask_count: int


class ParentUpdate(BaseModel):
    parent_task_id: UUID | None = None


class DependencyCreate(BaseModel):
    depends_on_id: UUID


class DependencyResponse(BaseModel):
    task_id: UUID
    depends_on_id: UUID

    model_config = {"from_attributes": True}


class CommentCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=10000)
    parent_comment_id: UUID | None = None


@router.get("", response_model=list[TaskListItem])
async def list_tasks(db: DBSession, current_user: AdminUser) -> list[TaskListItem]:
    """Top-level tasks across every workspace, newest first."""
    service = TaskService(db)
    tasks = await service.list_tasks()
    counts = await service.subtask_counts([task.id for task in tasks])
    return [
        TaskListItem(
            id=task.id,
            name=task.name,
            workspace_id=task.workspace_id,
            workspace_name=task.workspace.name,
            project_id=task.project_id,
            project_name=task.project.name if task.project is not None else None,
            lists=join_list_names(list_names_for(task)),
            owner=user_summary(task.owner),
            status=StatusSummary.model_validate(task.status),
            due_date=task.due_date,
            subtask_count=counts.get(task.id, 0),
        )
        for task in tasks
    ]


@router.post("", response_model=TaskCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_task(data: TaskCreate, db: DBSession, current_user: AdminUser):
    """Create a task with its optional list membership and approval in one transaction."""
    fields = data.model_dump()
    fields["requestor_id"] = fields["requestor_id"] or current_user.id
    return await TaskService(db).create_task(**fields)


@router.get("/{task_id}", response_model=TaskDetailResponse)
async def get_task(task_id: UUID, db: DBSession, current_user: AdminUser) -> TaskDetailResponse:
    """Task detail with subtasks, approval, comments, files and dependencies."""
    task = await TaskService(db).get_task_detail(task_id)
    return task_detail_response(task)


@router.put("/{task_id}/parent", response_model=TaskCreatedResponse)
async def set_task_parent(
    task_id: UUID,
    data: ParentUpdate,
    db: DBSession,
    current_user: AdminUser,
):
    """Move a task under another task, or back to the top level."""
    return await TaskService(db).set_parent(task_id, data.parent_task_id)


@router.post(
    "/{task_id}/dependencies",
    response_model=DependencyResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_dependency(
    task_id: UUID,
    data: DependencyCreate,
    db: DBSession,
    current_user: AdminUser,
):
    """Mark the task as blocked by another task."""
    return await TaskService(db).add_dependency(task_id, data.depends_on_id)


@router.delete(
    "/{task_id}/dependencies/{depends_on_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_dependency(
    task_id: UUID,
    depends_on_id: UUID,
    db: DBSession,
    current_user: AdminUser,
) -> None:
    await TaskService(db).remove_dependency(task_id, depends_on_id)


@router.post(
    "/{task_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    task_id: UUID,
    data: CommentCreate,
    db: DBSession,
    current_user: AdminUser,
) -> CommentResponse:
    """Comment on a task or reply to a comment."""
    comment = await TaskService(db).add_comment(
        task_id,
        current_user.id,
        data.body,
        parent_comment_id=data.parent_comment_id,
    )
    return comment_response(comment)
