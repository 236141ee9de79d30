"""Task service: creation, detail loading, re-parenting, dependencies and comments."""

from collections.abc import Iterable, Sequence
from datetime import date
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lunapm.exceptions import (
    ConstraintViolationError,
    DomainValidationError,
    HierarchyCycleError,
    NotFoundError,
)
from lunapm.models.enums import ApprovalStatus, TaskPriority
from lunapm.models.project import ListTask, Project, TaskList
from lunapm.models.task import (
    Task,
    TaskApproval,
    TaskComment,
    TaskDependency,
    TaskFile,
    TaskStatus,
)
from lunapm.models.user import User
from lunapm.models.workspace import Workspace
from lunapm.services.graph import (
    has_path,
    load_dependency_edges,
    load_task_parents,
    would_create_parent_cycle,
)

logger = structlog.get_logger()

VALID_PRIORITIES = {priority.value for priority in TaskPriority}


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Tags form a set: stripped, blanks dropped, duplicates removed in first-seen order."""
    return list(dict.fromkeys(tag.strip() for tag in tags or [] if tag.strip()))


def task_detail_options() -> list:
    """Loader options for the task detail view."""
    return [
        selectinload(Task.workspace),
        selectinload(Task.project),
        selectinload(Task.status),
        selectinload(Task.owner),
        selectinload(Task.requestor),
        selectinload(Task.parent_task),
        selectinload(Task.subtasks).selectinload(Task.status),
        selectinload(Task.subtasks).selectinload(Task.owner),
        selectinload(Task.subtasks).selectinload(Task.approval),
        selectinload(Task.list_memberships).selectinload(ListTask.list),
        selectinload(Task.approval).selectinload(TaskApproval.decided_by),
        selectinload(Task.comments).selectinload(TaskComment.author),
        selectinload(Task.comments).selectinload(TaskComment.files),
        selectinload(Task.files).selectinload(TaskFile.file),
        selectinload(Task.dependencies)
        .selectinload(TaskDependency.depends_on)
        .selectinload(Task.status),
        selectinload(Task.dependents)
        .selectinload(TaskDependency.task)
        .selectinload(Task.status),
    ]


def task_row_options() -> list:
    """Loader options for task rows in hierarchy tables and boards."""
    return [
        selectinload(Task.status),
        selectinload(Task.owner),
        selectinload(Task.project),
        selectinload(Task.approval),
        selectinload(Task.list_memberships).selectinload(ListTask.list),
    ]


class TaskService:
    """Service for task writes and task reads shared by the admin and client views."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # =========================================================================
    # Creation
    # =========================================================================

    async def create_task(
        self,
        *,
        name: str | None,
        workspace_id: UUID | None,
        status_id: UUID | None,
        project_id: UUID | None = None,
        list_id: UUID | None = None,
        parent_task_id: UUID | None = None,
        priority: str | None = None,
        owner_id: UUID | None = None,
        requestor_id: UUID | None = None,
        due_date: date | None = None,
        start_date: date | None = None,
        description: str | None = None,
        time_estimate: float | None = None,
        points: int | None = None,
        tags: Sequence[str] | None = None,
        requires_approval: bool = False,
    ) -> Task:
        """Create a task, its optional list membership and its optional approval.

        Every check runs before anything is added to the session, and the rows are
        flushed together so they commit or roll back as one unit.
        """
        if _blank(name) or workspace_id is None or status_id is None:
            raise DomainValidationError("Missing required fields.")

        priority = priority or TaskPriority.NORMAL.value
        if priority not in VALID_PRIORITIES:
            raise DomainValidationError(f"Invalid priority: {priority}")

        if await self.db.get(Workspace, workspace_id) is None:
            raise DomainValidationError("Workspace does not exist")
        if await self.db.get(TaskStatus, status_id) is None:
            raise DomainValidationError("Status does not exist")

        if project_id is not None:
            project = await self.db.get(Project, project_id)
            if project is None or project.workspace_id != workspace_id:
                raise DomainValidationError("Project does not belong to the workspace")

        if list_id is not None:
            task_list = await self.db.get(TaskList, list_id)
            if task_list is None or project_id is None or task_list.project_id != project_id:
                raise DomainValidationError("List does not belong to the project")

        if parent_task_id is not None:
            parent = await self.db.get(Task, parent_task_id)
            if (
                parent is None
                or parent.workspace_id != workspace_id
                or parent.project_id != project_id
            ):
                raise DomainValidationError(
                    "Parent task must be in the same workspace and project"
                )

        for user_id in (owner_id, requestor_id):
            if user_id is not None and await self.db.get(User, user_id) is None:
                raise DomainValidationError("User does not exist")

        task = Task(
            name=name.strip(),
            workspace_id=workspace_id,
            project_id=project_id,
            parent_task_id=parent_task_id,
            status_id=status_id,
            priority=priority,
            owner_id=owner_id,
            requestor_id=requestor_id,
            due_date=due_date,
            start_date=start_date,
            description=None if _blank(description) else description,
            time_estimate=time_estimate,
            points=points,
            tags=normalize_tags(tags),
            requires_approval=requires_approval,
        )
        self.db.add(task)
        # Assigns task.id for the dependent rows
        await self.db.flush()

        if list_id is not None:
            self.db.add(ListTask(list_id=list_id, task_id=task.id))
        if requires_approval:
            self.db.add(TaskApproval(task_id=task.id, status=ApprovalStatus.PENDING.value))
        await self.db.flush()

        logger.info(
            "task_created",
            task_id=str(task.id),
            workspace_id=str(workspace_id),
            project_id=str(project_id) if project_id else None,
            list_id=str(list_id) if list_id else None,
            requires_approval=requires_approval,
        )
        return task

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_task(self, task_id: UUID, workspace_id: UUID | None = None) -> Task:
        task = await self.db.get(Task, task_id)
        if task is None or (workspace_id is not None and task.workspace_id != workspace_id):
            raise NotFoundError("Task", task_id)
        return task

    async def get_task_detail(self, task_id: UUID, workspace_id: UUID | None = None) -> Task:
        """Load a task with everything the detail view shows.

        With ``workspace_id`` the task must belong to that workspace.
        """
        result = await self.db.execute(
            select(Task)
            .where(Task.id == task_id)
            .options(*task_detail_options())
            .execution_options(populate_existing=True)
        )
        task = result.scalar_one_or_none()
        if task is None or (workspace_id is not None and task.workspace_id != workspace_id):
            raise NotFoundError("Task", task_id)
        return task

    async def list_tasks(self) -> Sequence[Task]:
        """Top-level tasks across all workspaces, newest first."""
        result = await self.db.execute(
            select(Task)
            .where(Task.parent_task_id.is_(None))
            .options(selectinload(Task.workspace), *task_row_options())
            .order_by(Task.created_at.desc())
        )
        return result.scalars().all()

    async def list_scope_tasks(
        self,
        workspace_id: UUID,
        project_id: UUID | None = None,
        project_less: bool = False,
    ) -> Sequence[Task]:
        """Top-level tasks of a workspace, newest first.

        ``project_id`` narrows to one project; ``project_less`` to tasks without one.
        """
        query = select(Task).where(
            Task.workspace_id == workspace_id,
            Task.parent_task_id.is_(None),
        )
        if project_id is not None:
            query = query.where(Task.project_id == project_id)
        elif project_less:
            query = query.where(Task.project_id.is_(None))
        result = await self.db.execute(
            query.options(*task_row_options()).order_by(Task.created_at.desc())
        )
        return result.scalars().all()

    async def subtask_counts(self, task_ids: Sequence[UUID]) -> dict[UUID, int]:
        """Number of direct subtasks per task."""
        if not task_ids:
            return {}
        result = await self.db.execute(
            select(Task.parent_task_id, func.count(Task.id))
            .where(Task.parent_task_id.in_(task_ids))
            .group_by(Task.parent_task_id)
        )
        return {parent_id: count for parent_id, count in result.all()}

    async def list_statuses(self) -> Sequence[TaskStatus]:
        """Every status, archived ones included, by position."""
        result = await self.db.execute(
            select(TaskStatus).order_by(TaskStatus.position, TaskStatus.name)
        )
        return result.scalars().all()

    async def status_task_counts(self) -> dict[UUID, int]:
        result = await self.db.execute(
            select(Task.status_id, func.count(Task.id)).group_by(Task.status_id)
        )
        return {status_id: count for status_id, count in result.all()}

    # =========================================================================
    # Hierarchy
    # =========================================================================

    async def set_parent(self, task_id: UUID, parent_task_id: UUID | None) -> Task:
        """Move a task under another task, or to the top level with None.

        The parent must share the task's workspace and project, and must not be the
        task itself or one of its descendants.
        The cycle check reads the parent chain before the write without a lock, so two
        concurrent moves can still close a cycle between them.
        """
        task = await self.db.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)

        if parent_task_id is not None:
            parent = await self.db.get(Task, parent_task_id)
            if parent is None:
                raise NotFoundError("Task", parent_task_id)
            if parent.workspace_id != task.workspace_id or parent.project_id != task.project_id:
                raise DomainValidationError(
                    "Parent task must be in the same workspace and project"
                )
            parents = await load_task_parents(self.db, task.workspace_id)
            if would_create_parent_cycle(task.id, parent_task_id, parents.get):
                logger.warning(
                    "task_parent_cycle_rejected",
                    task_id=str(task_id),
                    parent_task_id=str(parent_task_id),
                )
                raise HierarchyCycleError("A task cannot be moved under itself or its subtasks")

        task.parent_task_id = parent_task_id
        await self.db.flush()

        logger.info(
            "task_parent_changed",
            task_id=str(task_id),
            parent_task_id=str(parent_task_id) if parent_task_id else None,
        )
        return task

    # =========================================================================
    # Dependencies
    # =========================================================================

    async def add_dependency(self, task_id: UUID, depends_on_id: UUID) -> TaskDependency:
        """Record that ``task_id`` is blocked by ``depends_on_id``.

        Self-dependencies and edges that would close a cycle are rejected.
        The cycle check reads the edges before the insert without a lock, so two
        concurrent requests adding A->B and B->A can both succeed.
        """
        task = await self.db.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        blocker = await self.db.get(Task, depends_on_id)
        if blocker is None:
            raise NotFoundError("Task", depends_on_id)
        if blocker.workspace_id != task.workspace_id:
            raise DomainValidationError("Dependent tasks must share a workspace")
        if task_id == depends_on_id:
            raise HierarchyCycleError("A task cannot depend on itself")

        edges = await load_dependency_edges(self.db, task.workspace_id)
        if depends_on_id in edges.get(task_id, []):
            raise ConstraintViolationError("Dependency already exists")
        # The new edge closes a cycle when the blocker already waits on the task
        if has_path(depends_on_id, task_id, edges):
            logger.warning(
                "task_dependency_cycle_rejected",
                task_id=str(task_id),
                depends_on_id=str(depends_on_id),
            )
            raise HierarchyCycleError("Dependency would create a cycle")

        dependency = TaskDependency(task_id=task_id, depends_on_id=depends_on_id)
        self.db.add(dependency)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConstraintViolationError("Dependency already exists") from e

        logger.info(
            "task_dependency_added",
            task_id=str(task_id),
            depends_on_id=str(depends_on_id),
        )
        return dependency

    async def remove_dependency(self, task_id: UUID, depends_on_id: UUID) -> None:
        result = await self.db.execute(
            delete(TaskDependency).where(
                TaskDependency.task_id == task_id,
                TaskDependency.depends_on_id == depends_on_id,
            )
        )
        if result.rowcount == 0:
            raise NotFoundError("Dependency", depends_on_id)
        logger.info(
            "task_dependency_removed",
            task_id=str(task_id),
            depends_on_id=str(depends_on_id),
        )

    # =========================================================================
    # Comments
    # =========================================================================

    async def add_comment(
        self,
        task_id: UUID,
        author_id: UUID,
        body: str | None,
        parent_comment_id: UUID | None = None,
        workspace_id: UUID | None = None,
    ) -> TaskComment:
        """Add a comment, keeping threads one level deep.

        A reply to a reply is attached to the top-level comment of that thread.
        """
        task = await self.get_task(task_id, workspace_id)
        if _blank(body):
            raise DomainValidationError("Comment body is required")

        if parent_comment_id is not None:
            parent = await self.db.get(TaskComment, parent_comment_id)
            if parent is None:
                raise NotFoundError("Comment", parent_comment_id)
            if parent.task_id != task_id:
                raise DomainValidationError("Parent comment belongs to another task")
            if parent.parent_comment_id is not None:
                parent_comment_id = parent.parent_comment_id

        comment = TaskComment(
            task_id=task_id,
            author_id=author_id,
            body=body.strip(),
            parent_comment_id=parent_comment_id,
        )
        self.db.add(comment)
        await self.db.flush()

        result = await self.db.execute(
            select(TaskComment)
            .where(TaskComment.id == comment.id)
            .options(selectinload(TaskComment.author), selectinload(TaskComment.files))
        )
        comment = result.scalar_one()

        logger.info(
            "task_comment_added",
            task_id=str(task_id),
            comment_id=str(comment.id),
            parent_comment_id=str(parent_comment_id) if parent_comment_id else None,
        )
        return comment
