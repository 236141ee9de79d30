"""Kanban grouping: a status by group-label grid over already-labelled tasks."""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any
from uuid import UUID

from lunapm.models.enums import StatusState


@dataclass
class KanbanCard:
    """A task on the board. ``group_label`` is computed by the caller."""

    id: UUID
    name: str
    status_id: UUID
    priority: str
    group_label: str
    owner_name: str | None = None
    due_date: date | None = None

    @classmethod
    def from_task(cls, task: Any, group_label: str) -> "KanbanCard":
        owner = task.owner
        return cls(
            id=task.id,
            name=task.name,
            status_id=task.status_id,
            priority=task.priority,
            group_label=group_label,
            owner_name=(owner.name or owner.email) if owner is not None else None,
            due_date=task.due_date,
        )


@dataclass
class KanbanGroup:
    label: str
    cards: list[KanbanCard] = field(default_factory=list)


@dataclass
class KanbanColumn:
    """One active status and its cards, grouped by label."""

    status: Any
    groups: list[KanbanGroup] = field(default_factory=list)

    @property
    def count(self) -> int:
        return sum(len(group.cards) for group in self.groups)


def build_board(statuses: Iterable[Any], cards: Sequence[KanbanCard]) -> list[KanbanColumn]:
    """Build the kanban grid.

    Columns are the ACTIVE statuses ordered by position. Within a column, groups are the
    distinct labels of its cards sorted alphabetically, and cards keep input order.
    Cards whose status is archived or unknown land in no column.
    """
    active = sorted(
        (status for status in statuses if status.state == StatusState.ACTIVE.value),
        key=lambda status: status.position,
    )

    columns: list[KanbanColumn] = []
    for status in active:
        by_label: dict[str, KanbanGroup] = {}
        for card in cards:
            if card.status_id != status.id:
                continue
            by_label.setdefault(card.group_label, KanbanGroup(label=card.group_label))
            by_label[card.group_label].cards.append(card)
        groups = [by_label[label] for label in sorted(by_label)]
        columns.append(KanbanColumn(status=status, groups=groups))
    return columns
