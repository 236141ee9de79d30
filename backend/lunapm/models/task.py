"""Task models: statuses, tasks, dependencies, approvals, comments and attachments."""

from datetime import date, datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lunapm.db.base import BaseModel, JSONType
from lunapm.models.enums import ApprovalStatus, StatusState, TaskPriority

if TYPE_CHECKING:
    from lunapm.models.asset import File
    from lunapm.models.project import ListTask, Project
    from lunapm.models.user import User
    from lunapm.models.workspace import Workspace


class TaskStatus(BaseModel):
    """Global task status (kanban column)."""

    __tablename__ = "task_statuses"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str] = mapped_column(String(20), nullable=False, default="#6b7280")

    # Sort key for columns
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    state: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StatusState.ACTIVE.value
    )  # ACTIVE, ARCHIVED

    tasks: Mapped[list["Task"]] = relationship("Task", back_populates="status")

    @property
    def is_active(self) -> bool:
        return self.state == StatusState.ACTIVE.value

    def __repr__(self) -> str:
        return f"<TaskStatus {self.name}>"


class Task(BaseModel):
    """Task owned by a workspace, optionally inside a project."""

    __tablename__ = "tasks"

    # Basic info
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Scope
    workspace_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    project_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Parent task for subtasks
    parent_task_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Status and priority
    status_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("task_statuses.id"),
        nullable=False,
        index=True,
    )
    priority: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TaskPriority.NORMAL.value
    )  # URGENT, HIGH, NORMAL, LOW

    # People
    owner_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    requestor_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Timeline
    due_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Estimates (hours)
    time_estimate: Mapped[float | None] = mapped_column(Float, nullable=True)
    points: Mapped[int | None] = mapped_column(Integer, nullable=True)

    tags: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    requires_approval: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    workspace: Mapped["Workspace"] = relationship("Workspace")
    project: Mapped["Project | None"] = relationship("Project", back_populates="tasks")
    status: Mapped["TaskStatus"] = relationship("TaskStatus", back_populates="tasks")
    owner: Mapped["User | None"] = relationship("User", foreign_keys=[owner_id])
    requestor: Mapped["User | None"] = relationship("User", foreign_keys=[requestor_id])
    parent_task: Mapped["Task | None"] = relationship(
        "Task", remote_side="Task.id", back_populates="subtasks"
    )
    subtasks: Mapped[list["Task"]] = relationship(
        "Task",
        back_populates="parent_task",
        order_by="Task.created_at",
        passive_deletes=True,
    )
    list_memberships: Mapped[list["ListTask"]] = relationship(
        "ListTask", back_populates="task", passive_deletes=True
    )
    approval: Mapped["TaskApproval | None"] = relationship(
        "TaskApproval", back_populates="task", uselist=False, passive_deletes=True
    )
    comments: Mapped[list["TaskComment"]] = relationship(
        "TaskComment",
        back_populates="task",
        order_by="TaskComment.created_at",
        passive_deletes=True,
    )
    files: Mapped[list["TaskFile"]] = relationship(
        "TaskFile", back_populates="task", passive_deletes=True
    )
    dependencies: Mapped[list["TaskDependency"]] = relationship(
        "TaskDependency",
        foreign_keys="TaskDependency.task_id",
        back_populates="task",
        passive_deletes=True,
    )
    dependents: Mapped[list["TaskDependency"]] = relationship(
        "TaskDependency",
        foreign_keys="TaskDependency.depends_on_id",
        back_populates="depends_on",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        try:
            return f"<Task {self.name[:30]}>"
        except Exception:
            try:
                return f"<Task id={self.id}>"
            except Exception:
                return "<Task detached>"


class TaskDependency(BaseModel):
    """Directed edge: ``task`` is blocked by ``depends_on``."""

    __tablename__ = "task_dependencies"
    __table_args__ = (
        UniqueConstraint("task_id", "depends_on_id", name="uq_task_dependency"),
        CheckConstraint("task_id <> depends_on_id", name="ck_task_dependency_not_self"),
    )

    task_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    depends_on_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    task: Mapped["Task"] = relationship(
        "Task", foreign_keys=[task_id], back_populates="dependencies"
    )
    depends_on: Mapped["Task"] = relationship(
        "Task", foreign_keys=[depends_on_id], back_populates="dependents"
    )

    def __repr__(self) -> str:
        return f"<TaskDependency {self.task_id} -> {self.depends_on_id}>"


class TaskApproval(BaseModel):
    """Client approval of a task. Exists only when the task requires approval."""

    __tablename__ = "task_approvals"

    task_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ApprovalStatus.PENDING.value
    )  # PENDING, APPROVED, REJECTED

    # Set together with status by a decision
    decided_by_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    decided_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    task: Mapped["Task"] = relationship("Task", back_populates="approval")
    decided_by: Mapped["User | None"] = relationship("User")

    def __repr__(self) -> str:
        return f"<TaskApproval task={self.task_id} status={self.status}>"


class TaskComment(BaseModel):
    """Comment on a task, threaded one level deep."""

    __tablename__ = "task_comments"

    task_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)

    # For threaded comments
    parent_comment_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("task_comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    # Relationships
    task: Mapped["Task"] = relationship("Task", back_populates="comments")
    author: Mapped["User | None"] = relationship("User")
    files: Mapped[list["TaskCommentFile"]] = relationship(
        "TaskCommentFile", back_populates="comment", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<TaskComment {self.id} on task={self.task_id}>"


class TaskCommentFile(BaseModel):
    """Attachment metadata for a comment. Bytes live in the object store."""

    __tablename__ = "task_comment_files"

    comment_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("task_comments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    uploader_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    filename: Mapped[str] = mapped_column(String(500), nullable=False)
    storage_key: Mapped[str] = mapped_column(String(1000), nullable=False)
    size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    mime_type: Mapped[str | None] = mapped_column(String(255), nullable=True)

    comment: Mapped["TaskComment"] = relationship("TaskComment", back_populates="files")

    def __repr__(self) -> str:
        return f"<TaskCommentFile {self.filename}>"


class TaskFile(BaseModel):
    """Link between a task and a file."""

    __tablename__ = "task_files"
    __table_args__ = (
        UniqueConstraint("task_id", "file_id", name="uq_task_file"),
    )

    task_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("files.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    task: Mapped["Task"] = relationship("Task", back_populates="files")
    file: Mapped["File"] = relationship("File")

    def __repr__(self) -> str:
        return f"<TaskFile task={self.task_id} file={self.file_id}>"
