"""Folder endpoints for the admin surface."""

from uuid import UUID

from fastapi import APIRouter
from pydantic import BaseModel

from lunapm.api.v1.auth import AdminUser
from lunapm.db.session import DBSession
from lunapm.services.asset import AssetService

router = APIRouter()


class FolderParentUpdate(BaseModel):
    parent_id: UUID | None = None


class FolderResponse(BaseModel):
    id: UUID
    name: str
    workspace_id: UUID
    project_id: UUID | None
    parent_id: UUID | None

    model_config = {"from_attributes": True}


@router.put("/{folder_id}/parent", response_model=FolderResponse)
async def move_folder(
    folder_id: UUID,
    data: FolderParentUpdate,
    db: DBSession,
    current_user: AdminUser,
):
    """Move a folder under another folder of the same scope, or to the scope root."""
    return await AssetService(db).move_folder(folder_id, data.parent_id)
