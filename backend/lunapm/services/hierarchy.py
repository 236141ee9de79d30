"""Task hierarchy resolution for workspace, project and client views.

Everything here is a pure transformation over rows that were already loaded: tasks
with their ``list_memberships``, the lists of the scope, and subtask counts.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

DIRECT_GROUP_LABEL = "Direct"
WORKSPACE_GROUP_LABEL = "Workspace"


@dataclass
class TaskRow:
    """A top-level task as shown in a hierarchy table."""

    task: Any
    subtask_count: int = 0
    list_names: list[str] = field(default_factory=list)

    @property
    def id(self) -> UUID:
        return self.task.id

    @property
    def is_direct(self) -> bool:
        return not self.list_names


@dataclass
class ListGroup:
    """A list and the tasks that are members of it."""

    list: Any
    rows: list[TaskRow] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.list.name

    @property
    def count(self) -> int:
        return len(self.rows)


@dataclass
class TaskHierarchy:
    """Direct tasks plus one group per list of the scope.

    ``rows`` holds every top-level task exactly once, in input order.
    """

    rows: list[TaskRow] = field(default_factory=list)
    direct: list[TaskRow] = field(default_factory=list)
    lists: list[ListGroup] = field(default_factory=list)


def resolve_hierarchy(
    tasks: Iterable[Any],
    task_lists: Iterable[Any],
    subtask_counts: Mapping[UUID, int] | None = None,
) -> TaskHierarchy:
    """Partition top-level tasks into direct tasks and per-list groups.

    A task belonging to N lists of the scope appears once under each of them and never
    under direct. Memberships of lists outside ``task_lists`` are ignored. Subtasks
    (tasks with a parent) are skipped. Lists are sorted by name; rows keep the order of
    ``tasks``.
    """
    counts = subtask_counts or {}
    groups = [
        ListGroup(list=task_list)
        for task_list in sorted(task_lists, key=lambda task_list: task_list.name)
    ]
    group_by_list_id = {group.list.id: group for group in groups}

    hierarchy = TaskHierarchy(lists=groups)
    for task in tasks:
        if task.parent_task_id is not None:
            continue

        member_groups = [
            group_by_list_id[membership.list_id]
            for membership in task.list_memberships
            if membership.list_id in group_by_list_id
        ]
        row = TaskRow(
            task=task,
            subtask_count=counts.get(task.id, 0),
            list_names=sorted(group.name for group in member_groups),
        )
        hierarchy.rows.append(row)

        if not member_groups:
            hierarchy.direct.append(row)
            continue
        # A task listed twice in the same list still shows once
        placed: set[UUID] = set()
        for group in member_groups:
            if group.list.id not in placed:
                placed.add(group.list.id)
                group.rows.append(row)

    return hierarchy


def list_names_for(task: Any) -> list[str]:
    """Sorted names of every list the task belongs to. Needs ``membership.list`` loaded."""
    return sorted(membership.list.name for membership in task.list_memberships)


def join_list_names(names: Sequence[str]) -> str:
    return ", ".join(sorted(names))


def project_view_group_label(row: TaskRow) -> str:
    """Kanban group for the project view: the task's lists, or ``Direct``."""
    if row.list_names:
        return join_list_names(row.list_names)
    return DIRECT_GROUP_LABEL


def workspace_view_group_label(task: Any) -> str:
    """Kanban group for the workspace view: the project name, or ``Workspace``."""
    if task.project is not None:
        return task.project.name
    return WORKSPACE_GROUP_LABEL


def order_subtasks(subtasks: Iterable[Any]) -> list[Any]:
    """Subtasks oldest first."""
    return sorted(subtasks, key=lambda task: task.created_at)


@dataclass
class CommentThread:
    """A top-level comment and its replies, both oldest first."""

    comment: Any
    replies: list[Any] = field(default_factory=list)


def thread_comments(comments: Iterable[Any]) -> list[CommentThread]:
    """Group comments into one-level threads.

    Replies whose parent is missing from ``comments`` are shown as top-level comments.
    A reply to a reply is attached to the thread of its top-level ancestor.
    """
    ordered = sorted(comments, key=lambda comment: comment.created_at)
    by_id = {comment.id: comment for comment in ordered}

    def top_level_id(comment: Any) -> UUID:
        seen = {comment.id}
        current = comment
        while current.parent_comment_id is not None and current.parent_comment_id in by_id:
            if current.parent_comment_id in seen:
                break
            current = by_id[current.parent_comment_id]
            seen.add(current.id)
        return current.id

    root_ids = {comment.id: top_level_id(comment) for comment in ordered}
    threads: dict[UUID, CommentThread] = {
        comment.id: CommentThread(comment=comment)
        for comment in ordered
        if root_ids[comment.id] == comment.id
    }
    for comment in ordered:
        root_id = root_ids[comment.id]
        if root_id == comment.id:
            continue
        if root_id in threads:
            threads[root_id].replies.append(comment)
        else:
            threads[comment.id] = CommentThread(comment=comment)
    return sorted(threads.values(), key=lambda thread: thread.comment.created_at)
