# tests/test_hierarchy.py
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from uuid import uuid4

from lunapm.services.hierarchy import (
    DIRECT_GROUP_LABEL,
    WORKSPACE_GROUP_LABEL,
    join_list_names,
    list_names_for,
    order_subtasks,
    project_view_group_label,
    resolve_hierarchy,
    thread_comments,
    workspace_view_group_label,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def task_list(name):
    return SimpleNamespace(id=uuid4(), name=name)


def task(name, lists=(), parent=None, project=None, minutes=0):
    return SimpleNamespace(
        id=uuid4(),
        name=name,
        parent_task_id=parent.id if parent else None,
        project=project,
        created_at=T0 + timedelta(minutes=minutes),
        list_memberships=[SimpleNamespace(list_id=l.id, list=l) for l in lists],
    )


def test_task_in_two_lists_appears_under_both_and_not_direct():
    """A task in L1 and L2 shows once per list and never as direct"""
    l1, l2 = task_list("L1"), task_list("L2")
    t = task("T", lists=[l1, l2])

    hierarchy = resolve_hierarchy([t], [l1, l2])

    assert hierarchy.direct == []
    assert [[row.id for row in group.rows] for group in hierarchy.lists] == [[t.id], [t.id]]
    assert hierarchy.rows[0].list_names == ["L1", "L2"]


def test_direct_and_grouped_partition_the_top_level_tasks():
    design, build = task_list("Design"), task_list("Build")
    direct_a = task("Direct A")
    listed = task("Listed", lists=[design])
    both = task("Both", lists=[design, build])
    direct_b = task("Direct B")
    sub = task("Sub", parent=listed)

    hierarchy = resolve_hierarchy([direct_a, listed, both, direct_b, sub], [design, build])

    direct_ids = {row.id for row in hierarchy.direct}
    grouped_ids = {row.id for group in hierarchy.lists for row in group.rows}
    assert direct_ids | grouped_ids == {direct_a.id, listed.id, both.id, direct_b.id}
    assert direct_ids & grouped_ids == set()
    assert sub.id not in direct_ids | grouped_ids


def test_lists_sorted_by_name_and_rows_keep_input_order():
    zeta, alpha = task_list("Zeta"), task_list("Alpha")
    newer = task("Newer", lists=[alpha], minutes=5)
    older = task("Older", lists=[alpha], minutes=1)

    hierarchy = resolve_hierarchy([newer, older], [zeta, alpha])

    assert [group.name for group in hierarchy.lists] == ["Alpha", "Zeta"]
    assert [row.task.name for row in hierarchy.lists[0].rows] == ["Newer", "Older"]
    assert hierarchy.lists[1].count == 0


def test_membership_outside_scope_is_ignored():
    """A membership of a list not in the scope does not make the task grouped"""
    inside = task_list("Inside")
    outside = task_list("Outside")
    t = task("T", lists=[outside])

    hierarchy = resolve_hierarchy([t], [inside])

    assert [row.id for row in hierarchy.direct] == [t.id]
    assert hierarchy.direct[0].is_direct


def test_duplicate_membership_shows_once():
    design = task_list("Design")
    t = task("T", lists=[design, design])

    hierarchy = resolve_hierarchy([t], [design])

    assert hierarchy.lists[0].count == 1


def test_subtask_counts_are_attached():
    t = task("T")

    hierarchy = resolve_hierarchy([t], [], {t.id: 3})

    assert hierarchy.direct[0].subtask_count == 3


def test_group_labels():
    procurement, design = task_list("Procurement"), task_list("Design")
    listed = task("Listed", lists=[procurement, design])
    loose = task("Loose")
    project = SimpleNamespace(name="Brooklyn")

    hierarchy = resolve_hierarchy([listed, loose], [procurement, design])
    labels = [project_view_group_label(row) for row in hierarchy.rows]

    assert labels == ["Design, Procurement", DIRECT_GROUP_LABEL]
    assert workspace_view_group_label(task("P", project=project)) == "Brooklyn"
    assert workspace_view_group_label(loose) == WORKSPACE_GROUP_LABEL


def test_list_names_helpers():
    t = task("T", lists=[task_list("b"), task_list("a")])

    assert list_names_for(t) == ["a", "b"]
    assert join_list_names(["b", "a"]) == "a, b"
    assert join_list_names([]) == ""


def test_order_subtasks_oldest_first():
    parent = task("Parent")
    late = task("Late", parent=parent, minutes=9)
    early = task("Early", parent=parent, minutes=1)

    assert [t.name for t in order_subtasks([late, early])] == ["Early", "Late"]


def comment(body, parent=None, minutes=0):
    return SimpleNamespace(
        id=uuid4(),
        body=body,
        parent_comment_id=parent.id if parent else None,
        created_at=T0 + timedelta(minutes=minutes),
    )


def test_thread_comments_one_level_deep():
    opening = comment("Opening", minutes=0)
    reply_b = comment("Reply B", parent=opening, minutes=2)
    reply_a = comment("Reply A", parent=opening, minutes=1)
    nested = comment("Nested", parent=reply_a, minutes=3)
    other = comment("Other", minutes=4)

    threads = thread_comments([other, reply_b, nested, opening, reply_a])

    assert [thread.comment.body for thread in threads] == ["Opening", "Other"]
    assert [reply.body for reply in threads[0].replies] == ["Reply A", "Reply B", "Nested"]
    assert threads[1].replies == []


def test_reply_with_missing_parent_is_top_level():
    missing = comment("Missing")
    orphan = comment("Orphan", parent=missing, minutes=1)

    threads = thread_comments([orphan])

    assert [thread.comment.body for thread in threads] == ["Orphan"]
