"""List endpoints for the admin surface."""

from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from lunapm.api.v1.auth import AdminUser
from lunapm.db.session import DBSession
from lunapm.services.project import ProjectService

router = APIRouter()


class ListSummary(BaseModel):
    id: UUID
    name: str
    project_id: UUID
    project_name: str
    workspace_id: UUID
    workspace_name: str
    task_count: int


@router.get("", response_model=list[ListSummary])
async def list_lists(db: DBSession, current_user: AdminUser) -> list[ListSummary]:
    """All lists, newest first, with their task counts."""
    rows = await ProjectService(db).list_lists()
    return [
        ListSummary(
            id=task_list.id,
            name=task_list.name,
            project_id=task_list.project_id,
            project_name=task_list.project.name,
            workspace_id=task_list.project.workspace_id,
            workspace_name=task_list.project.workspace.name,
            task_count=task_count,
        )
        for task_list, task_count in rows
    ]
