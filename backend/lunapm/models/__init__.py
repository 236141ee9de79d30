"""SQLAlchemy models package."""

from lunapm.models.enums import (
    ApprovalStatus,
    CustomFieldType,
    ProjectStatus,
    StatusState,
    TaskPriority,
    UserRole,
    WorkspaceType,
)
from lunapm.models.user import User
from lunapm.models.workspace import (
    ProjectCustomFieldValue,
    Workspace,
    WorkspaceCustomField,
)
from lunapm.models.project import ListTask, Project, TaskList
from lunapm.models.task import (
    Task,
    TaskApproval,
    TaskComment,
    TaskCommentFile,
    TaskDependency,
    TaskFile,
    TaskStatus,
)
from lunapm.models.asset import File, Folder

__all__ = [
    # Enums
    "ApprovalStatus",
    "CustomFieldType",
    "ProjectStatus",
    "StatusState",
    "TaskPriority",
    "UserRole",
    "WorkspaceType",
    # Identity
    "User",
    # Workspace
    "Workspace",
    "WorkspaceCustomField",
    "ProjectCustomFieldValue",
    # Project
    "Project",
    "TaskList",
    "ListTask",
    # Task
    "Task",
    "TaskStatus",
    "TaskDependency",
    "TaskApproval",
    "TaskComment",
    "TaskCommentFile",
    "TaskFile",
    # Assets
    "File",
    "Folder",
]
