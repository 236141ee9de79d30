"""Folder tree reconstruction.

Turns the flat, parent-pointer folder rows of one (workspace, project) scope into a
nested forest with each folder's files attached.
"""

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

import structlog

logger = structlog.get_logger()


@dataclass
class FolderNode:
    """A folder with its files and child folders.

    Attributes:
        folder: The folder row (anything with ``id``, ``name`` and ``parent_id``)
        files: File rows attached directly to this folder
        children: Child folder nodes, in input order
    """

    folder: Any
    files: list[Any] = field(default_factory=list)
    children: list["FolderNode"] = field(default_factory=list)

    @property
    def id(self) -> UUID:
        return self.folder.id

    @property
    def name(self) -> str:
        return self.folder.name


@dataclass
class FolderTree:
    """Forest of root folders plus the files that sit at the scope root."""

    folders: list[FolderNode] = field(default_factory=list)
    root_files: list[Any] = field(default_factory=list)


def build_folder_tree(folders: Sequence[Any], files: Sequence[Any]) -> FolderTree:
    """Build the folder forest for one scope.

    A folder is a root when its parent is null or not among ``folders``. A file is a
    root file when its folder is null or not among ``folders``. Folders caught in a
    parent cycle are unreachable from any root; each cycle is broken by promoting its
    first folder (in input order) to a root, so every folder appears exactly once.
    """
    by_id = {folder.id: folder for folder in folders}

    children_of: dict[UUID, list[Any]] = defaultdict(list)
    roots: list[Any] = []
    for folder in folders:
        if folder.parent_id is None or folder.parent_id not in by_id:
            if folder.parent_id is not None:
                logger.warning(
                    "folder_orphan_promoted",
                    folder_id=str(folder.id),
                    parent_id=str(folder.parent_id),
                )
            roots.append(folder)
        else:
            children_of[folder.parent_id].append(folder)

    files_of: dict[UUID, list[Any]] = defaultdict(list)
    root_files: list[Any] = []
    for file in files:
        if file.folder_id is not None and file.folder_id in by_id:
            files_of[file.folder_id].append(file)
        else:
            root_files.append(file)

    visited: set[UUID] = set()

    def attach(folder: Any) -> FolderNode:
        # Iterative so deep chains never hit the recursion limit
        root = FolderNode(folder=folder, files=files_of.get(folder.id, []))
        visited.add(folder.id)
        stack = [root]
        while stack:
            node = stack.pop()
            for child in children_of.get(node.id, []):
                if child.id in visited:
                    continue
                visited.add(child.id)
                child_node = FolderNode(folder=child, files=files_of.get(child.id, []))
                node.children.append(child_node)
                stack.append(child_node)
        return root

    tree = FolderTree(root_files=root_files)
    for folder in roots:
        tree.folders.append(attach(folder))

    for folder in folders:
        if folder.id not in visited:
            logger.warning("folder_cycle_broken", folder_id=str(folder.id))
            tree.folders.append(attach(folder))

    return tree
