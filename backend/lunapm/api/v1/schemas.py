"""Response models shared by the admin and client routers, with their converters."""

from datetime import date, datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from lunapm.services.approval import approval_status
from lunapm.services.custom_field import CustomFieldEntry
from lunapm.services.display import (
    Badge,
    approval_status_badge,
    format_bytes,
    priority_badge,
)
from lunapm.services.folder_tree import FolderNode, FolderTree
from lunapm.services.hierarchy import (
    CommentThread,
    TaskHierarchy,
    TaskRow,
    list_names_for,
    order_subtasks,
    thread_comments,
)
from lunapm.services.kanban import KanbanColumn
from lunapm.services.stats import DashboardStats


class BadgeResponse(BaseModel):
    label: str
    tone: str

    @classmethod
    def from_badge(cls, badge: Badge) -> "BadgeResponse":
        return cls(label=badge.label, tone=badge.tone)


class UserSummary(BaseModel):
    id: UUID
    email: str
    name: str | None
    display_name: str

    model_config = ConfigDict(from_attributes=True)


class StatusSummary(BaseModel):
    id: UUID
    name: str
    color: str
    position: int

    model_config = ConfigDict(from_attributes=True)


class DashboardStatsResponse(BaseModel):
    workspaces: int
    active_projects: int
    open_tasks: int
    pending_approvals: int


class TaskRowResponse(BaseModel):
    """A top-level task in a hierarchy table."""

    id: UUID
    name: str
    status: StatusSummary
    owner: UserSummary | None
    priority: str
    priority_badge: BadgeResponse
    due_date: date | None
    subtask_count: int
    list_names: list[str]
    approval_status: str | None = None
    approval_badge: BadgeResponse | None = None


class ListGroupResponse(BaseModel):
    id: UUID
    name: str
    count: int
    tasks: list[TaskRowResponse]


class TaskHierarchyResponse(BaseModel):
    direct: list[TaskRowResponse]
    lists: list[ListGroupResponse]


class KanbanCardResponse(BaseModel):
    id: UUID
    name: str
    owner_name: str | None
    due_date: date | None
    priority: str


class KanbanGroupResponse(BaseModel):
    label: str
    cards: list[KanbanCardResponse]


class KanbanColumnResponse(BaseModel):
    status: StatusSummary
    count: int
    groups: list[KanbanGroupResponse]


class FileResponse(BaseModel):
    id: UUID
    filename: str
    size: int
    size_label: str
    mime_type: str | None


class FolderNodeResponse(BaseModel):
    id: UUID
    name: str
    files: list[FileResponse]
    children: list["FolderNodeResponse"]


FolderNodeResponse.model_rebuild()


class FolderTreeResponse(BaseModel):
    folders: list[FolderNodeResponse]
    root_files: list[FileResponse]


class CustomFieldValueResponse(BaseModel):
    field_id: UUID
    name: str
    value: str


class CustomFieldDefinitionResponse(BaseModel):
    id: UUID
    name: str
    field_type: str
    options: list[str]
    option_count: int
    position: int


class ApprovalResponse(BaseModel):
    status: str
    badge: BadgeResponse
    decided_by: UserSummary | None
    decided_at: datetime | None
    note: str | None


class CommentFileResponse(BaseModel):
    id: UUID
    filename: str
    size: int
    size_label: str
    mime_type: str | None


class CommentResponse(BaseModel):
    id: UUID
    body: str
    author: UserSummary | None
    parent_comment_id: UUID | None
    created_at: datetime
    files: list[CommentFileResponse]


class CommentThreadResponse(CommentResponse):
    replies: list[CommentResponse]


class SubtaskResponse(BaseModel):
    id: UUID
    name: str
    status: StatusSummary
    owner: UserSummary | None
    priority: str
    due_date: date | None
    approval_status: str | None
    created_at: datetime


# =============================================================================
# Converters
# =============================================================================


def badge_response(badge: Badge) -> BadgeResponse:
    return BadgeResponse.from_badge(badge)


def user_summary(user: Any) -> UserSummary | None:
    if user is None:
        return None
    return UserSummary.model_validate(user)


def stats_response(stats: DashboardStats) -> DashboardStatsResponse:
    return DashboardStatsResponse(**stats.to_dict())


def task_row_response(row: TaskRow, include_approval: bool = False) -> TaskRowResponse:
    task = row.task
    response = TaskRowResponse(
        id=task.id,
        name=task.name,
        status=StatusSummary.model_validate(task.status),
        owner=user_summary(task.owner),
        priority=task.priority,
        priority_badge=badge_response(priority_badge(task.priority)),
        due_date=task.due_date,
        subtask_count=row.subtask_count,
        list_names=row.list_names,
    )
    if include_approval:
        current = approval_status(task)
        response.approval_status = current
        response.approval_badge = (
            badge_response(approval_status_badge(current)) if current else None
        )
    return response


def hierarchy_response(
    hierarchy: TaskHierarchy, include_approval: bool = False
) -> TaskHierarchyResponse:
    return TaskHierarchyResponse(
        direct=[task_row_response(row, include_approval) for row in hierarchy.direct],
        lists=[
            ListGroupResponse(
                id=group.list.id,
                name=group.name,
                count=group.count,
                tasks=[task_row_response(row, include_approval) for row in group.rows],
            )
            for group in hierarchy.lists
        ],
    )


def board_response(columns: list[KanbanColumn]) -> list[KanbanColumnResponse]:
    return [
        KanbanColumnResponse(
            status=StatusSummary.model_validate(column.status),
            count=column.count,
            groups=[
                KanbanGroupResponse(
                    label=group.label,
                    cards=[
                        KanbanCardResponse(
                            id=card.id,
                            name=card.name,
                            owner_name=card.owner_name,
                            due_date=card.due_date,
                            priority=card.priority,
                        )
                        for card in group.cards
                    ],
                )
                for group in column.groups
            ],
        )
        for column in columns
    ]


def file_response(file: Any) -> FileResponse:
    return FileResponse(
        id=file.id,
        filename=file.filename,
        size=file.size,
        size_label=format_bytes(file.size),
        mime_type=file.mime_type,
    )


def _folder_node_response(node: FolderNode) -> FolderNodeResponse:
    return FolderNodeResponse(
        id=node.id,
        name=node.name,
        files=[file_response(file) for file in node.files],
        children=[_folder_node_response(child) for child in node.children],
    )


def folder_tree_response(tree: FolderTree) -> FolderTreeResponse:
    return FolderTreeResponse(
        folders=[_folder_node_response(node) for node in tree.folders],
        root_files=[file_response(file) for file in tree.root_files],
    )


def custom_fields_response(entries: list[CustomFieldEntry]) -> list[CustomFieldValueResponse]:
    return [
        CustomFieldValueResponse(field_id=entry.field.id, name=entry.name, value=entry.value)
        for entry in entries
    ]


def custom_field_definition_response(field: Any) -> CustomFieldDefinitionResponse:
    options = list(field.options or [])
    return CustomFieldDefinitionResponse(
        id=field.id,
        name=field.name,
        field_type=field.field_type,
        options=options,
        option_count=len(options),
        position=field.position,
    )


def approval_response(approval: Any) -> ApprovalResponse | None:
    if approval is None:
        return None
    return ApprovalResponse(
        status=approval.status,
        badge=badge_response(approval_status_badge(approval.status)),
        decided_by=user_summary(approval.decided_by),
        decided_at=approval.decided_at,
        note=approval.note,
    )


def comment_response(comment: Any) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        body=comment.body,
        author=user_summary(comment.author),
        parent_comment_id=comment.parent_comment_id,
        created_at=comment.created_at,
        files=[
            CommentFileResponse(
                id=file.id,
                filename=file.filename,
                size=file.size,
                size_label=format_bytes(file.size),
                mime_type=file.mime_type,
            )
            for file in comment.files
        ],
    )


def thread_response(thread: CommentThread) -> CommentThreadResponse:
    return CommentThreadResponse(
        **comment_response(thread.comment).model_dump(),
        replies=[comment_response(reply) for reply in thread.replies],
    )


def subtask_response(task: Any) -> SubtaskResponse:
    return SubtaskResponse(
        id=task.id,
        name=task.name,
        status=StatusSummary.model_validate(task.status),
        owner=user_summary(task.owner),
        priority=task.priority,
        due_date=task.due_date,
        approval_status=approval_status(task),
        created_at=task.created_at,
    )


# =============================================================================
# Task detail
# =============================================================================


class BreadcrumbResponse(BaseModel):
    id: UUID
    name: str
    kind: str  # workspace, project


class TaskReference(BaseModel):
    id: UUID
    name: str
    status: StatusSummary | None = None


class ClientTaskDetailResponse(BaseModel):
    """Task as the client portal shows it: no internal files or dependencies."""

    id: UUID
    name: str
    description: str | None
    status: StatusSummary
    priority: str
    priority_badge: BadgeResponse
    due_date: date | None
    start_date: date | None
    project_id: UUID | None
    project_name: str | None
    subtasks: list[SubtaskResponse]
    approval: ApprovalResponse | None
    comments: list[CommentThreadResponse]
    created_at: datetime


class TaskDetailResponse(ClientTaskDetailResponse):
    workspace_id: UUID
    breadcrumbs: list[BreadcrumbResponse]
    parent_task: TaskReference | None
    owner: UserSummary | None
    requestor: UserSummary | None
    time_estimate: float | None
    points: int | None
    tags: list[str]
    requires_approval: bool
    list_names: list[str]
    files: list[FileResponse]
    blocked_by: list[TaskReference]
    blocking: list[TaskReference]


def _task_reference(task: Any) -> TaskReference:
    return TaskReference(
        id=task.id,
        name=task.name,
        status=StatusSummary.model_validate(task.status),
    )


def _client_detail_fields(task: Any) -> dict[str, Any]:
    return {
        "id": task.id,
        "name": task.name,
        "description": task.description,
        "status": StatusSummary.model_validate(task.status),
        "priority": task.priority,
        "priority_badge": badge_response(priority_badge(task.priority)),
        "due_date": task.due_date,
        "start_date": task.start_date,
        "project_id": task.project_id,
        "project_name": task.project.name if task.project is not None else None,
        "subtasks": [subtask_response(subtask) for subtask in order_subtasks(task.subtasks)],
        "approval": approval_response(task.approval),
        "comments": [thread_response(thread) for thread in thread_comments(task.comments)],
        "created_at": task.created_at,
    }


def client_task_detail_response(task: Any) -> ClientTaskDetailResponse:
    return ClientTaskDetailResponse(**_client_detail_fields(task))


def task_detail_response(task: Any) -> TaskDetailResponse:
    breadcrumbs = [
        BreadcrumbResponse(id=task.workspace.id, name=task.workspace.name, kind="workspace")
    ]
    if task.project is not None:
        breadcrumbs.append(
            BreadcrumbResponse(id=task.project.id, name=task.project.name, kind="project")
        )
    parent = task.parent_task
    return TaskDetailResponse(
        **_client_detail_fields(task),
        workspace_id=task.workspace_id,
        breadcrumbs=breadcrumbs,
        parent_task=TaskReference(id=parent.id, name=parent.name) if parent is not None else None,
        owner=user_summary(task.owner),
        requestor=user_summary(task.requestor),
        time_estimate=task.time_estimate,
        points=task.points,
        tags=list(task.tags or []),
        requires_approval=task.requires_approval,
        list_names=list_names_for(task),
        files=[file_response(link.file) for link in task.files],
        blocked_by=[_task_reference(dep.depends_on) for dep in task.dependencies],
        blocking=[_task_reference(dep.task) for dep in task.dependents],
    )
