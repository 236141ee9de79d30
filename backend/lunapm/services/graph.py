"""Acyclicity checks for task parents, folder parents and task dependencies."""

from collections.abc import Callable, Iterable, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from lunapm.models.asset import Folder
from lunapm.models.task import Task, TaskDependency


def would_create_parent_cycle(
    node_id: UUID,
    new_parent_id: UUID | None,
    parent_of: Callable[[UUID], UUID | None],
) -> bool:
    """Return True when making ``new_parent_id`` the parent of ``node_id`` closes a cycle.

    Walks up from the proposed parent; reaching ``node_id`` means the parent is the node
    itself or one of its descendants.
    """
    seen: set[UUID] = set()
    current = new_parent_id
    while current is not None:
        if current == node_id:
            return True
        if current in seen:
            # Pre-existing cycle above the node that does not include it
            return False
        seen.add(current)
        current = parent_of(current)
    return False


def has_path(start: UUID, target: UUID, edges: Mapping[UUID, Iterable[UUID]]) -> bool:
    """Return True when ``target`` is reachable from ``start`` following ``edges``."""
    stack = [start]
    seen: set[UUID] = set()
    while stack:
        current = stack.pop()
        if current == target:
            return True
        if current in seen:
            continue
        seen.add(current)
        stack.extend(edges.get(current, ()))
    return False


async def load_task_parents(db: AsyncSession, workspace_id: UUID) -> dict[UUID, UUID | None]:
    """Parent pointers of every task in a workspace."""
    result = await db.execute(
        select(Task.id, Task.parent_task_id).where(Task.workspace_id == workspace_id)
    )
    return {task_id: parent_id for task_id, parent_id in result.all()}


async def load_folder_parents(db: AsyncSession, workspace_id: UUID) -> dict[UUID, UUID | None]:
    """Parent pointers of every folder in a workspace."""
    result = await db.execute(
        select(Folder.id, Folder.parent_id).where(Folder.workspace_id == workspace_id)
    )
    return {folder_id: parent_id for folder_id, parent_id in result.all()}


async def load_dependency_edges(db: AsyncSession, workspace_id: UUID) -> dict[UUID, list[UUID]]:
    """Blocked-by edges (task -> depends_on) between tasks of a workspace."""
    result = await db.execute(
        select(TaskDependency.task_id, TaskDependency.depends_on_id)
        .join(Task, Task.id == TaskDependency.task_id)
        .where(Task.workspace_id == workspace_id)
    )
    edges: dict[UUID, list[UUID]] = {}
    for task_id, depends_on_id in result.all():
        edges.setdefault(task_id, []).append(depends_on_id)
    return edges
