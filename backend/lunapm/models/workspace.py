"""Workspace and custom field models."""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lunapm.db.base import BaseModel, JSONType
from lunapm.models.enums import CustomFieldType, WorkspaceType

if TYPE_CHECKING:
    from lunapm.models.project import Project
    from lunapm.models.user import User


class Workspace(BaseModel):
    """Top-level aggregate: a client account or the agency itself."""

    __tablename__ = "workspaces"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=WorkspaceType.CLIENT.value
    )  # CLIENT, COMPANY
    address: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Primary client contact
    primary_user_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Relationships
    primary_user: Mapped["User | None"] = relationship(
        "User", foreign_keys=[primary_user_id]
    )
    projects: Mapped[list["Project"]] = relationship(
        "Project", back_populates="workspace", passive_deletes=True
    )
    custom_fields: Mapped[list["WorkspaceCustomField"]] = relationship(
        "WorkspaceCustomField",
        back_populates="workspace",
        order_by="WorkspaceCustomField.position",
        passive_deletes=True,
    )

    @property
    def is_client(self) -> bool:
        return self.type == WorkspaceType.CLIENT.value

    def __repr__(self) -> str:
        try:
            return f"<Workspace {self.slug}>"
        except Exception:
            return f"<Workspace id={self.id}>"


class WorkspaceCustomField(BaseModel):
    """Custom field definition shared by every project of a workspace."""

    __tablename__ = "workspace_custom_fields"

    workspace_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    field_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CustomFieldType.TEXT.value
    )  # TEXT, NUMBER, DATE, SELECT, URL
    options: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)

    # Display order
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    workspace: Mapped["Workspace"] = relationship("Workspace", back_populates="custom_fields")

    def __repr__(self) -> str:
        return f"<WorkspaceCustomField {self.name} workspace={self.workspace_id}>"


class ProjectCustomFieldValue(BaseModel):
    """Value of a workspace custom field for one project."""

    __tablename__ = "project_custom_field_values"
    __table_args__ = (
        UniqueConstraint("project_id", "custom_field_id", name="uq_project_custom_field_value"),
    )

    project_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    custom_field_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("workspace_custom_fields.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value: Mapped[str] = mapped_column(Text, nullable=False)

    project: Mapped["Project"] = relationship("Project", back_populates="custom_field_values")
    custom_field: Mapped["WorkspaceCustomField"] = relationship("WorkspaceCustomField")

    def __repr__(self) -> str:
        return f"<ProjectCustomFieldValue project={self.project_id} field={self.custom_field_id}>"
