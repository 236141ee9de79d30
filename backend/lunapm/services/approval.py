"""Approval gate: which tasks wait on the client, and the decision write."""

from collections.abc import Iterable
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from lunapm.db.base import utcnow
from lunapm.exceptions import ConstraintViolationError, DomainValidationError, NotFoundError
from lunapm.models.enums import ApprovalStatus
from lunapm.models.task import Task, TaskApproval

logger = structlog.get_logger()

DECISIONS = {ApprovalStatus.APPROVED.value, ApprovalStatus.REJECTED.value}


def approval_status(task: Any) -> str | None:
    """Current approval status, or None when the task has no approval record."""
    approval = task.approval
    return approval.status if approval is not None else None


def is_pending_approval(task: Any) -> bool:
    return approval_status(task) == ApprovalStatus.PENDING.value


def pending_approval_queue(tasks: Iterable[Any]) -> list[Any]:
    """Tasks whose approval is exactly PENDING, in input order."""
    return [task for task in tasks if is_pending_approval(task)]


class ApprovalService:
    """Reads the pending queue and records client decisions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_pending(self, workspace_id: UUID) -> list[Task]:
        """Pending approvals across every project of a workspace, project-less tasks included.

        Loads every task of the workspace that carries an approval record and lets
        ``pending_approval_queue`` decide which of them wait on the client.
        """
        result = await self.db.execute(
            select(Task)
            .join(TaskApproval, TaskApproval.task_id == Task.id)
            .where(Task.workspace_id == workspace_id)
            .options(
                selectinload(Task.approval),
                selectinload(Task.status),
                selectinload(Task.project),
            )
            .order_by(Task.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return pending_approval_queue(result.scalars().all())

    async def decide(
        self,
        task_id: UUID,
        status: str,
        decided_by_id: UUID,
        note: str | None = None,
    ) -> TaskApproval:
        """Approve or reject a pending approval.

        Status, decider and decision time change in one conditional UPDATE that only
        matches a PENDING row, so two concurrent decisions cannot both succeed.
        """
        if status not in DECISIONS:
            raise DomainValidationError(f"Invalid approval decision: {status}")

        result = await self.db.execute(
            update(TaskApproval)
            .where(
                TaskApproval.task_id == task_id,
                TaskApproval.status == ApprovalStatus.PENDING.value,
            )
            .values(
                status=status,
                decided_by_id=decided_by_id,
                decided_at=utcnow(),
                note=note,
                updated_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            existing = await self.db.execute(
                select(TaskApproval.status).where(TaskApproval.task_id == task_id)
            )
            current = existing.scalar_one_or_none()
            if current is None:
                raise NotFoundError("Approval", task_id)
            raise ConstraintViolationError(
                f"Approval already decided ({current})", code="APPROVAL_DECIDED"
            )

        approval_result = await self.db.execute(
            select(TaskApproval)
            .where(TaskApproval.task_id == task_id)
            .options(selectinload(TaskApproval.decided_by))
            .execution_options(populate_existing=True)
        )
        approval = approval_result.scalar_one()

        logger.info(
            "approval_decided",
            task_id=str(task_id),
            status=status,
            decided_by_id=str(decided_by_id),
        )
        return approval
