"""Project and list models."""

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Date, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lunapm.db.base import BaseModel
from lunapm.models.enums import ProjectStatus

if TYPE_CHECKING:
    from lunapm.models.task import Task
    from lunapm.models.workspace import ProjectCustomFieldValue, Workspace


class Project(BaseModel):
    """Project within a workspace."""

    __tablename__ = "projects"

    workspace_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProjectStatus.INTAKE.value
    )  # INTAKE, PENDING, ACTIVE, ON_HOLD, COMPLETE

    # Timeline
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Relationships
    workspace: Mapped["Workspace"] = relationship("Workspace", back_populates="projects")
    lists: Mapped[list["TaskList"]] = relationship(
        "TaskList",
        back_populates="project",
        order_by="TaskList.name",
        passive_deletes=True,
    )
    tasks: Mapped[list["Task"]] = relationship(
        "Task", back_populates="project", passive_deletes=True
    )
    custom_field_values: Mapped[list["ProjectCustomFieldValue"]] = relationship(
        "ProjectCustomFieldValue", back_populates="project", passive_deletes=True
    )

    def __repr__(self) -> str:
        try:
            return f"<Project {self.name}>"
        except Exception:
            return f"<Project id={self.id}>"


class TaskList(BaseModel):
    """Named grouping of tasks inside a project.

    A list does not own its tasks; membership is many-to-many through ListTask.
    """

    __tablename__ = "lists"

    project_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    project: Mapped["Project"] = relationship("Project", back_populates="lists")
    memberships: Mapped[list["ListTask"]] = relationship(
        "ListTask", back_populates="list", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<TaskList {self.name}>"


class ListTask(BaseModel):
    """Membership of a task in a list."""

    __tablename__ = "list_tasks"
    __table_args__ = (
        UniqueConstraint("list_id", "task_id", name="uq_list_task"),
    )

    list_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("lists.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    task_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tasks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    list: Mapped["TaskList"] = relationship("TaskList", back_populates="memberships")
    task: Mapped["Task"] = relationship("Task", back_populates="list_memberships")

    def __repr__(self) -> str:
        return f"<ListTask list={self.list_id} task={self.task_id}>"
