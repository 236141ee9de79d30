# tests/test_stats.py
from uuid import uuid4

import pytest

from lunapm.exceptions import NotFoundError
from lunapm.models.enums import ApprovalStatus, ProjectStatus
from lunapm.services.stats import StatsService

PENDING = ApprovalStatus.PENDING.value


async def seed_counts(factory, status):
    crescent = await factory.workspace("Crescent")
    internal = await factory.workspace("Internal", type="COMPANY")
    active = await factory.project(crescent, status=ProjectStatus.ACTIVE.value)
    await factory.project(crescent, status=ProjectStatus.INTAKE.value)
    await factory.project(internal, status=ProjectStatus.ACTIVE.value)

    parent = await factory.task(crescent, status, project=active, approval=PENDING)
    await factory.task(crescent, status, project=active, parent=parent, approval=PENDING)
    await factory.task(crescent, status, approval=ApprovalStatus.APPROVED.value)
    await factory.task(internal, status)
    await factory.commit()
    return crescent, internal


async def test_dashboard_counts(factory, todo_status):
    await seed_counts(factory, todo_status)

    stats = await StatsService(factory.session).dashboard()

    assert stats.to_dict() == {
        "workspaces": 2,
        "active_projects": 2,
        "open_tasks": 3,
        "pending_approvals": 2,
    }


async def test_workspace_counts(factory, todo_status):
    crescent, internal = await seed_counts(factory, todo_status)
    service = StatsService(factory.session)

    crescent_stats = await service.workspace(crescent.id)
    internal_stats = await service.workspace(internal.id)

    assert crescent_stats.to_dict() == {
        "workspaces": 1,
        "active_projects": 1,
        "open_tasks": 2,
        "pending_approvals": 2,
    }
    assert internal_stats.open_tasks == 1
    assert internal_stats.pending_approvals == 0


async def test_repeated_reads_are_identical(factory, todo_status):
    """Two reads with no writes in between agree"""
    await seed_counts(factory, todo_status)
    service = StatsService(factory.session)

    assert await service.dashboard() == await service.dashboard()


async def test_unknown_workspace_stats_not_found(factory):
    with pytest.raises(NotFoundError):
        await StatsService(factory.session).workspace(uuid4())


async def test_dashboard_endpoint(client, factory, admin_headers, todo_status):
    await seed_counts(factory, todo_status)

    response = await client.get("/api/v1/dashboard", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["open_tasks"] == 3
