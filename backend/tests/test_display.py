# tests/test_display.py
from types import SimpleNamespace
from uuid import uuid4

import pytest

from lunapm.services.display import (
    DEFAULT_TONE,
    approval_status_badge,
    format_bytes,
    format_label,
    priority_badge,
    project_status_badge,
    slugify,
    workspace_type_badge,
)
from lunapm.services.graph import has_path, would_create_parent_cycle


def test_format_label():
    assert format_label("ON_HOLD") == "On Hold"
    assert format_label("ACTIVE") == "Active"


def test_badges_share_one_lookup():
    assert project_status_badge("ACTIVE").tone == "emerald"
    assert project_status_badge("ON_HOLD").label == "On Hold"
    assert project_status_badge("ON_HOLD").tone == DEFAULT_TONE
    assert approval_status_badge("REJECTED").tone == "red"
    assert priority_badge("URGENT").label == "Urgent"
    assert priority_badge("NORMAL").tone == DEFAULT_TONE
    assert workspace_type_badge("COMPANY").tone == "purple"


@pytest.mark.parametrize(
    "size,expected",
    [(0, "0 B"), (1023, "1023 B"), (1536, "1.5 KB"), (3200000, "3.1 MB"), (5 * 1024**3, "5.0 GB")],
)
def test_format_bytes(size, expected):
    assert format_bytes(size) == expected


def test_slugify():
    assert slugify("Crescent Interiors!") == "crescent-interiors"
    assert slugify("  Internal -- Ops ") == "internal-ops"


def test_parent_cycle_detection():
    root, child, grandchild = uuid4(), uuid4(), uuid4()
    parents = {root: None, child: root, grandchild: child}

    assert would_create_parent_cycle(root, grandchild, parents.get)
    assert would_create_parent_cycle(child, child, parents.get)
    assert not would_create_parent_cycle(grandchild, root, parents.get)
    assert not would_create_parent_cycle(child, None, parents.get)


def test_has_path():
    a, b, c, d = uuid4(), uuid4(), uuid4(), uuid4()
    edges = {a: [b], b: [c], c: [a]}

    assert has_path(a, c, edges)
    assert has_path(c, b, edges)
    assert not has_path(a, d, edges)
