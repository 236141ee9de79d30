# tests/test_kanban.py
from types import SimpleNamespace
from uuid import uuid4

from lunapm.models.enums import StatusState
from lunapm.services.kanban import KanbanCard, build_board


def status(name, position, state=StatusState.ACTIVE.value):
    return SimpleNamespace(id=uuid4(), name=name, position=position, state=state)


def card(name, status_, label):
    return KanbanCard(
        id=uuid4(), name=name, status_id=status_.id, priority="NORMAL", group_label=label
    )


def test_columns_are_active_statuses_by_position():
    done = status("Done", 3)
    todo = status("To do", 1)
    doing = status("In progress", 2)

    board = build_board([done, todo, doing], [])

    assert [column.status.name for column in board] == ["To do", "In progress", "Done"]
    assert all(column.count == 0 for column in board)


def test_archived_status_has_no_column_and_its_tasks_are_hidden():
    """Two tasks on an archived status appear in no cell"""
    todo = status("To do", 1)
    archived = status("Archived Old Status", 2, state=StatusState.ARCHIVED.value)
    visible = card("Visible", todo, "Direct")
    hidden = [card("Old 1", archived, "Direct"), card("Old 2", archived, "Design")]

    board = build_board([todo, archived], [visible, *hidden])

    assert [column.status.name for column in board] == ["To do"]
    shown = [c.id for column in board for group in column.groups for c in group.cards]
    assert shown == [visible.id]


def test_every_active_card_lands_in_exactly_one_cell():
    todo, done = status("To do", 1), status("Done", 2)
    cards = [
        card("A", todo, "Procurement"),
        card("B", done, "Design"),
        card("C", todo, "Design"),
        card("D", todo, "Procurement"),
    ]

    board = build_board([todo, done], cards)

    shown = [c.id for column in board for group in column.groups for c in group.cards]
    assert sorted(shown) == sorted(c.id for c in cards)
    assert len(shown) == len(set(shown))


def test_groups_sorted_and_cards_keep_input_order():
    todo = status("To do", 1)
    cards = [
        card("First", todo, "Procurement"),
        card("Second", todo, "Design"),
        card("Third", todo, "Procurement"),
    ]

    column = build_board([todo], cards)[0]

    assert [group.label for group in column.groups] == ["Design", "Procurement"]
    assert [c.name for c in column.groups[1].cards] == ["First", "Third"]
    assert column.count == 3


def test_card_from_task_uses_owner_name_or_email():
    todo = status("To do", 1)
    owner = SimpleNamespace(name=None, email="sam@lunapm.local")
    task = SimpleNamespace(
        id=uuid4(),
        name="Task",
        status_id=todo.id,
        priority="HIGH",
        owner=owner,
        due_date=None,
    )

    result = KanbanCard.from_task(task, "Direct")

    assert result.owner_name == "sam@lunapm.local"
    assert result.group_label == "Direct"
    assert result.priority == "HIGH"
