"""Folder and file queries for the asset tree."""

from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lunapm.exceptions import DomainValidationError, HierarchyCycleError, NotFoundError
from lunapm.models.asset import File, Folder
from lunapm.services.folder_tree import FolderTree, build_folder_tree
from lunapm.services.graph import load_folder_parents, would_create_parent_cycle

logger = structlog.get_logger()


class AssetService:
    """Service for folders and file metadata."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def folder_tree(self, workspace_id: UUID, project_id: UUID | None = None) -> FolderTree:
        """Asset tree of one scope.

        Without ``project_id`` the scope is the workspace root (folders and files that
        belong to no project).
        """
        folder_query = select(Folder).where(Folder.workspace_id == workspace_id)
        file_query = select(File).where(File.workspace_id == workspace_id)
        if project_id is None:
            folder_query = folder_query.where(Folder.project_id.is_(None))
            file_query = file_query.where(File.project_id.is_(None))
        else:
            folder_query = folder_query.where(Folder.project_id == project_id)
            file_query = file_query.where(File.project_id == project_id)

        folders = (await self.db.execute(folder_query.order_by(Folder.name))).scalars().all()
        files = (await self.db.execute(file_query.order_by(File.filename))).scalars().all()
        return build_folder_tree(folders, files)

    async def move_folder(self, folder_id: UUID, parent_id: UUID | None) -> Folder:
        """Re-parent a folder within its scope, refusing moves that close a cycle.

        The parent chain is read before the write without a lock, so two concurrent
        moves can still close a cycle between them. The tree builder breaks such
        cycles on read.
        """
        folder = await self.db.get(Folder, folder_id)
        if folder is None:
            raise NotFoundError("Folder", folder_id)

        if parent_id is not None:
            parent = await self.db.get(Folder, parent_id)
            if parent is None:
                raise NotFoundError("Folder", parent_id)
            if parent.workspace_id != folder.workspace_id or parent.project_id != folder.project_id:
                raise DomainValidationError("Parent folder must be in the same scope")
            parents = await load_folder_parents(self.db, folder.workspace_id)
            if would_create_parent_cycle(folder.id, parent_id, parents.get):
                logger.warning(
                    "folder_parent_cycle_rejected",
                    folder_id=str(folder_id),
                    parent_id=str(parent_id),
                )
                raise HierarchyCycleError("A folder cannot be moved into itself or its subfolders")

        folder.parent_id = parent_id
        await self.db.flush()

        logger.info(
            "folder_moved",
            folder_id=str(folder_id),
            parent_id=str(parent_id) if parent_id else None,
        )
        return folder
