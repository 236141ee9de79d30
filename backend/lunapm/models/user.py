"""User model."""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from lunapm.db.base import BaseModel
from lunapm.models.enums import UserRole

if TYPE_CHECKING:
    from lunapm.models.workspace import Workspace


class User(BaseModel):
    """User signed in through the email link provider.

    CLIENT users belong to exactly one client workspace; ADMIN users are agency staff.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default=UserRole.ADMIN.value
    )  # ADMIN, CLIENT

    workspace_id: Mapped[UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey(
            "workspaces.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_users_workspace_id",
        ),
        nullable=True,
        index=True,
    )

    workspace: Mapped["Workspace | None"] = relationship(
        "Workspace", foreign_keys=[workspace_id]
    )

    @property
    def display_name(self) -> str:
        return self.name or self.email

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    def __repr__(self) -> str:
        return f"<User {self.email}>"
