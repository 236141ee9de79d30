# tests/test_workspaces_api.py
from uuid import uuid4

from sqlalchemy import func, select

from conftest import at
from lunapm.models import (
    File,
    Folder,
    ListTask,
    Project,
    Task,
    TaskApproval,
    TaskComment,
    TaskDependency,
    User,
    Workspace,
)
from lunapm.models.enums import ApprovalStatus, StatusState, UserRole, WorkspaceType


def cells(kanban):
    """(status name, group label, card name) for every visible card"""
    return [
        (column["status"]["name"], group["label"], card["name"])
        for column in kanban
        for group in column["groups"]
        for card in group["cards"]
    ]


async def test_list_workspaces_with_counts(client, factory, admin_headers, todo_status):
    internal = await factory.workspace("Internal Ops", type=WorkspaceType.COMPANY.value)
    crescent = await factory.workspace("Crescent Interiors")
    project = await factory.project(crescent)
    await factory.task(crescent, todo_status, project=project)
    await factory.task(crescent, todo_status)
    await factory.commit()

    response = await client.get("/api/v1/workspaces", headers=admin_headers)

    assert response.status_code == 200
    rows = response.json()
    assert [row["name"] for row in rows] == ["Crescent Interiors", "Internal Ops"]
    assert (rows[0]["project_count"], rows[0]["task_count"]) == (1, 2)
    assert rows[1]["type_badge"] == {"label": "Company", "tone": "purple"}
    assert rows[1]["id"] == str(internal.id)


async def test_project_detail_groups_tasks_by_list(client, factory, admin_headers, todo_status):
    """A task in two lists shows under both and not as direct"""
    workspace = await factory.workspace()
    project = await factory.project(workspace, name="Brooklyn")
    design = await factory.task_list(project, "Design Planning")
    procurement = await factory.task_list(project, "Procurement")
    await factory.task_list(project, "Installation")
    multi = await factory.task(
        workspace, todo_status, "Source pendants", project=project,
        lists=[design, procurement], created_at=at(2),
    )
    await factory.task(workspace, todo_status, "Kickoff", project=project, created_at=at(1))
    await factory.task(workspace, todo_status, "Palette", project=project, parent=multi, created_at=at(3))
    await factory.commit()

    response = await client.get(f"/api/v1/projects/{project.id}", headers=admin_headers)

    assert response.status_code == 200
    hierarchy = response.json()["hierarchy"]
    assert [row["name"] for row in hierarchy["direct"]] == ["Kickoff"]
    groups = {group["name"]: [row["name"] for row in group["tasks"]] for group in hierarchy["lists"]}
    assert groups == {
        "Design Planning": ["Source pendants"],
        "Installation": [],
        "Procurement": ["Source pendants"],
    }
    assert hierarchy["lists"][0]["tasks"][0]["subtask_count"] == 1

    assert cells(response.json()["kanban"]) == [
        ("To do", "Design Planning, Procurement", "Source pendants"),
        ("To do", "Direct", "Kickoff"),
    ]


async def test_archived_status_is_hidden_from_board(client, factory, db_session, admin_headers, todo_status):
    """Archived column absent, its tasks hidden but still stored"""
    archived = await factory.status(
        "Archived Old Status", position=9, state=StatusState.ARCHIVED.value
    )
    workspace = await factory.workspace()
    project = await factory.project(workspace, name="Tribeca")
    await factory.task(workspace, todo_status, "Visible", project=project)
    await factory.task(workspace, archived, "Old one", project=project)
    await factory.task(workspace, archived, "Old two", project=project)
    await factory.commit()

    project_view = (await client.get(f"/api/v1/projects/{project.id}", headers=admin_headers)).json()
    workspace_view = (await client.get(f"/api/v1/workspaces/{workspace.id}", headers=admin_headers)).json()

    for kanban in (project_view["kanban"], workspace_view["kanban"]):
        assert [column["status"]["name"] for column in kanban] == ["To do"]
        assert [name for _, _, name in cells(kanban)] == ["Visible"]
    assert await db_session.scalar(select(func.count(Task.id))) == 3

    statuses = (await client.get("/api/v1/statuses", headers=admin_headers)).json()
    archived_row = next(row for row in statuses if row["name"] == "Archived Old Status")
    assert archived_row["state_label"] == "Archived"
    assert archived_row["task_count"] == 2


async def test_workspace_detail(client, factory, admin_headers, todo_status):
    contact = await factory.user(role=UserRole.CLIENT.value, name="Ava Martinez")
    workspace = await factory.workspace(
        "Crescent Interiors", slug="crescent-interiors", primary_user_id=contact.id
    )
    brooklyn = await factory.project(workspace, name="Brooklyn")
    await factory.custom_field(workspace, "Style", field_type="SELECT", options=["Modern"], position=2)
    await factory.custom_field(workspace, "Contractor", position=1)
    await factory.task(workspace, todo_status, "Vendor follow-up", created_at=at(1))
    await factory.task(workspace, todo_status, "Kickoff", project=brooklyn, created_at=at(2))

    docs = await factory.folder(workspace, "Client Docs")
    await factory.file(workspace, "Client brief.pdf", folder=docs, size=245000)
    assets = await factory.folder(workspace, "Project Assets", project=brooklyn)
    await factory.file(workspace, "Floor plan.pdf", folder=assets, project=brooklyn)
    await factory.commit()

    response = await client.get(f"/api/v1/workspaces/{workspace.id}", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["client_portal_url"] == "/client/crescent-interiors"
    assert data["primary_contact"]["name"] == "Ava Martinez"
    assert [field["name"] for field in data["custom_fields"]] == ["Contractor", "Style"]
    assert data["custom_fields"][1]["option_count"] == 1
    assert [row["name"] for row in data["workspace_tasks"]] == ["Vendor follow-up"]
    assert [project["name"] for project in data["projects"]] == ["Brooklyn"]
    assert [row["name"] for row in data["projects"][0]["hierarchy"]["direct"]] == ["Kickoff"]
    assert sorted(cells(data["kanban"])) == [
        ("To do", "Brooklyn", "Kickoff"),
        ("To do", "Workspace", "Vendor follow-up"),
    ]

    # Workspace assets exclude project folders
    assert [folder["name"] for folder in data["assets"]["folders"]] == ["Client Docs"]
    brief = data["assets"]["folders"][0]["files"][0]
    assert brief["size_label"] == "239.3 KB"


async def test_company_workspace_has_no_portal_url(client, factory, admin_headers):
    workspace = await factory.workspace("Internal Ops", type=WorkspaceType.COMPANY.value)
    await factory.commit()

    response = await client.get(f"/api/v1/workspaces/{workspace.id}", headers=admin_headers)

    assert response.json()["client_portal_url"] is None


async def test_project_assets_tree(client, factory, admin_headers):
    workspace = await factory.workspace()
    project = await factory.project(workspace)
    assets = await factory.folder(workspace, "Project Assets", project=project)
    concepts = await factory.folder(workspace, "Concepts", project=project, parent=assets)
    await factory.file(workspace, "Render.png", folder=concepts, project=project)
    await factory.file(workspace, "Loose.pdf", project=project)
    await factory.folder(workspace, "Workspace Docs")
    await factory.commit()

    tree = (await client.get(f"/api/v1/projects/{project.id}", headers=admin_headers)).json()["assets"]

    assert [folder["name"] for folder in tree["folders"]] == ["Project Assets"]
    child = tree["folders"][0]["children"][0]
    assert child["name"] == "Concepts"
    assert [file["filename"] for file in child["files"]] == ["Render.png"]
    assert [file["filename"] for file in tree["root_files"]] == ["Loose.pdf"]


async def test_move_folder_rejects_cycles(client, factory, admin_headers):
    workspace = await factory.workspace()
    outer = await factory.folder(workspace, "Outer")
    inner = await factory.folder(workspace, "Inner", parent=outer)
    other = await factory.folder(workspace, "Other")
    await factory.commit()

    cycle = await client.put(
        f"/api/v1/folders/{outer.id}/parent", json={"parent_id": str(inner.id)}, headers=admin_headers
    )
    moved = await client.put(
        f"/api/v1/folders/{inner.id}/parent", json={"parent_id": str(other.id)}, headers=admin_headers
    )
    missing = await client.put(
        f"/api/v1/folders/{uuid4()}/parent", json={"parent_id": None}, headers=admin_headers
    )

    assert cycle.status_code == 409
    assert moved.status_code == 200
    assert moved.json()["parent_id"] == str(other.id)
    assert missing.status_code == 404


async def test_projects_and_lists_endpoints(client, factory, admin_headers, todo_status):
    workspace = await factory.workspace("Crescent")
    older = await factory.project(workspace, name="Older", created_at=at(1))
    await factory.project(workspace, name="Newer", created_at=at(2))
    design = await factory.task_list(older, "Design")
    await factory.task(workspace, todo_status, project=older, lists=[design])
    await factory.commit()

    projects = (await client.get("/api/v1/projects", headers=admin_headers)).json()
    lists = (await client.get("/api/v1/lists", headers=admin_headers)).json()

    assert [project["name"] for project in projects] == ["Newer", "Older"]
    assert projects[0]["workspace_name"] == "Crescent"
    assert lists == [
        {
            "id": str(design.id),
            "name": "Design",
            "project_id": str(older.id),
            "project_name": "Older",
            "workspace_id": str(workspace.id),
            "workspace_name": "Crescent",
            "task_count": 1,
        }
    ]


async def test_delete_workspace_cascades(client, factory, db_session, admin_user, admin_headers, todo_status):
    workspace = await factory.workspace("Doomed", slug="doomed")
    keep = await factory.workspace("Keep", slug="keep")
    member = await factory.user(role=UserRole.CLIENT.value, workspace=workspace)
    project = await factory.project(workspace)
    design = await factory.task_list(project, "Design")
    parent = await factory.task(
        workspace, todo_status, project=project, lists=[design], approval=ApprovalStatus.PENDING.value
    )
    child = await factory.task(workspace, todo_status, project=project, parent=parent)
    kept_task = await factory.task(keep, todo_status, "Survivor")
    field = await factory.custom_field(workspace, "Contractor")
    folder = await factory.folder(workspace, "Docs")
    await factory.folder(workspace, "Nested", parent=folder)
    await factory.file(workspace, "brief.pdf", folder=folder)
    db_session.add(TaskDependency(task_id=kept_task.id, depends_on_id=child.id))
    db_session.add(TaskComment(task_id=parent.id, author_id=admin_user.id, body="Hello"))
    await factory.commit()
    await client.post(
        f"/api/v1/projects/{project.id}/custom-fields",
        json={"custom_field_id": str(field.id), "value": "Atlas"},
        headers=admin_headers,
    )
    member_id = member.id

    response = await client.delete(f"/api/v1/workspaces/{workspace.id}", headers=admin_headers)

    assert response.status_code == 204
    for model in (Project, ListTask, TaskApproval, TaskComment, TaskDependency, Folder, File):
        assert await db_session.scalar(select(func.count(model.id))) == 0, model.__name__
    remaining = (await db_session.execute(select(Task.name))).scalars().all()
    assert remaining == ["Survivor"]
    assert await db_session.scalar(select(func.count(Workspace.id))) == 1
    assert await db_session.scalar(select(User.workspace_id).where(User.id == member_id)) is None

    again = await client.delete(f"/api/v1/workspaces/{workspace.id}", headers=admin_headers)
    assert again.status_code == 404


async def test_workspace_stats_endpoint(client, factory, admin_headers, todo_status):
    workspace = await factory.workspace()
    await factory.task(workspace, todo_status, approval=ApprovalStatus.PENDING.value)
    await factory.commit()

    found = await client.get(f"/api/v1/workspaces/{workspace.id}/stats", headers=admin_headers)
    missing = await client.get(f"/api/v1/workspaces/{uuid4()}/stats", headers=admin_headers)

    assert found.json() == {
        "workspaces": 1,
        "active_projects": 0,
        "open_tasks": 1,
        "pending_approvals": 1,
    }
    assert missing.status_code == 404
