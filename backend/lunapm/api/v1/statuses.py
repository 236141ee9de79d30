"""Task status endpoints for the admin surface."""

from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from lunapm.api.v1.auth import AdminUser
from lunapm.db.session import DBSession
from lunapm.services.display import format_label
from lunapm.services.task import TaskService

router = APIRouter()


class StatusResponse(BaseModel):
    id: UUID
    name: str
    color: str
    position: int
    is_default: bool
    state: str
    state_label: str
    task_count: int


@router.get("", response_model=list[StatusResponse])
async def list_statuses(db: DBSession, current_user: AdminUser) -> list[StatusResponse]:
    """Statuses by position, archived ones included."""
    service = TaskService(db)
    statuses = await service.list_statuses()
    counts = await service.status_task_counts()
    return [
        StatusResponse(
            id=task_status.id,
            name=task_status.name,
            color=task_status.color,
            position=task_status.position,
            is_default=task_status.is_default,
            state=task_status.state,
            state_label=format_label(task_status.state),
            task_count=counts.get(task_status.id, 0),
        )
        for task_status in statuses
    ]
