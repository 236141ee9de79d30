"""Seed script that loads the agency demo data set.

Clears every table first, then creates:
- A CLIENT workspace (Crescent Interiors) and a COMPANY workspace (Internal Ops)
- Admin and client users, custom fields and per-project values
- Global task statuses, projects and lists
- Direct, listed, multi-list and subtask rows, two pending approvals
- A dependency, a threaded comment discussion with attachments
- Folders and file records for the asset trees

Usage:
    python -m lunapm.scripts.seed_demo
"""

import asyncio
from datetime import date

import structlog
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession

from lunapm.db.session import async_session_factory
from lunapm.models import (
    File,
    Folder,
    ListTask,
    Project,
    ProjectCustomFieldValue,
    Task,
    TaskApproval,
    TaskComment,
    TaskCommentFile,
    TaskDependency,
    TaskFile,
    TaskList,
    TaskStatus,
    User,
    Workspace,
    WorkspaceCustomField,
)
from lunapm.models.enums import (
    ApprovalStatus,
    CustomFieldType,
    ProjectStatus,
    TaskPriority,
    UserRole,
    WorkspaceType,
)
from lunapm.services.display import slugify

logger = structlog.get_logger()

# Delete order respects foreign keys
CLEAR_ORDER = [
    TaskCommentFile,
    TaskComment,
    TaskApproval,
    TaskDependency,
    TaskFile,
    ListTask,
    Task,
    TaskList,
    ProjectCustomFieldValue,
    WorkspaceCustomField,
    File,
    Folder,
    Project,
]

STATUSES = [
    {"key": "todo", "name": "To do", "color": "#E4E4E7", "position": 1, "is_default": True},
    {"key": "in_progress", "name": "In progress", "color": "#BFDBFE", "position": 2},
    {"key": "review", "name": "Ready for review", "color": "#FDE68A", "position": 3},
    {"key": "on_hold", "name": "On hold", "color": "#FCA5A5", "position": 4},
    {"key": "done", "name": "Done", "color": "#BBF7D0", "position": 5},
]

PROJECTS = [
    {
        "key": "brooklyn",
        "workspace": "crescent",
        "name": "Brooklyn Brownstone Refresh",
        "status": ProjectStatus.ACTIVE,
        "description": (
            "Full interior refresh of a classic Brooklyn brownstone. "
            "Living room, kitchen, and master bedroom."
        ),
        "start_date": date(2026, 1, 15),
        "end_date": date(2026, 6, 30),
    },
    {
        "key": "tribeca",
        "workspace": "crescent",
        "name": "Tribeca Loft Styling",
        "status": ProjectStatus.PENDING,
        "description": "Modern styling for a converted warehouse loft in Tribeca.",
        "start_date": date(2026, 3, 1),
        "end_date": date(2026, 8, 15),
    },
    {
        "key": "soho",
        "workspace": "crescent",
        "name": "SoHo Showroom Launch",
        "status": ProjectStatus.INTAKE,
        "description": "Design and setup of a new retail showroom in SoHo.",
    },
    {
        "key": "website",
        "workspace": "internal",
        "name": "Website Redesign",
        "status": ProjectStatus.ACTIVE,
        "description": "Redesign the company website with updated branding and portfolio.",
        "start_date": date(2026, 2, 1),
        "end_date": date(2026, 4, 30),
    },
]

LISTS = [
    {"key": "design", "project": "brooklyn", "name": "Design Planning"},
    {"key": "procurement", "project": "brooklyn", "name": "Procurement"},
    {"key": "installation", "project": "brooklyn", "name": "Installation"},
    {"key": "styling", "project": "tribeca", "name": "Styling"},
    {"key": "design_phase", "project": "website", "name": "Design Phase"},
]

# Tasks are created in order; "parent" and "lists" refer to earlier keys
TASKS = [
    {
        "key": "vendor_followup",
        "workspace": "crescent",
        "status": "todo",
        "name": "General vendor follow-up",
        "description": "Follow up with all active vendors on pricing and availability.",
        "owner": "admin",
    },
    {
        "key": "kickoff",
        "workspace": "crescent",
        "project": "brooklyn",
        "status": "done",
        "name": "Initial client meeting",
        "description": "Kickoff meeting with the client to discuss vision and budget.",
        "owner": "admin",
        "due_date": date(2026, 1, 20),
        "priority": TaskPriority.HIGH,
    },
    {
        "key": "floor_plan",
        "workspace": "crescent",
        "project": "brooklyn",
        "status": "done",
        "name": "Review floor plan measurements",
        "owner": "admin",
        "due_date": date(2026, 1, 25),
    },
    {
        "key": "moodboard",
        "workspace": "crescent",
        "project": "brooklyn",
        "status": "in_progress",
        "name": "Finalize mood board",
        "description": "Create and finalize the mood board for the living room and kitchen.",
        "owner": "sam",
        "due_date": date(2026, 2, 28),
        "priority": TaskPriority.HIGH,
        "lists": ["design"],
    },
    {
        "key": "palette",
        "workspace": "crescent",
        "project": "brooklyn",
        "status": "done",
        "name": "Select color palette",
        "owner": "sam",
        "parent": "moodboard",
    },
    {
        "key": "fabrics",
        "workspace": "crescent",
        "project": "brooklyn",
        "status": "in_progress",
        "name": "Choose fabric samples",
        "owner": "sam",
        "parent": "moodboard",
    },
    {
        "key": "deck",
        "workspace": "crescent",
        "project": "brooklyn",
        "status": "todo",
        "name": "Create presentation deck",
        "owner": "sam",
        "parent": "moodboard",
        "due_date": date(2026, 2, 25),
    },
    {
        "key": "pendant_approval",
        "workspace": "crescent",
        "project": "brooklyn",
        "status": "review",
        "name": "Approve pendant light selection",
        "description": "Client needs to approve final pendant light options for the kitchen island.",
        "owner": "admin",
        "due_date": date(2026, 3, 10),
        "priority": TaskPriority.URGENT,
        "requires_approval": True,
        "lists": ["procurement"],
    },
    {
        "key": "source_pendants",
        "workspace": "crescent",
        "project": "brooklyn",
        "status": "in_progress",
        "name": "Source pendant lights",
        "description": "Research and source pendant light options from three vendors.",
        "owner": "sam",
        "due_date": date(2026, 3, 1),
        "priority": TaskPriority.HIGH,
        "lists": ["design", "procurement"],
    },
    {
        "key": "kitchen_install",
        "workspace": "crescent",
        "project": "brooklyn",
        "status": "todo",
        "name": "Schedule kitchen island installation",
        "description": "Coordinate with Atlas Build Co on kitchen island delivery and install dates.",
        "owner": "admin",
        "due_date": date(2026, 4, 15),
        "lists": ["installation"],
    },
    {
        "key": "lighting_install",
        "workspace": "crescent",
        "project": "brooklyn",
        "status": "on_hold",
        "name": "Install living room lighting",
        "description": "Waiting on pendant approval before scheduling electrician.",
        "lists": ["installation"],
    },
    {
        "key": "artwork",
        "workspace": "crescent",
        "project": "tribeca",
        "status": "todo",
        "name": "Artwork shortlist",
        "description": "Curate a shortlist of artwork pieces for the main living area.",
        "owner": "sam",
        "due_date": date(2026, 4, 1),
        "requires_approval": True,
        "lists": ["styling"],
    },
    {
        "key": "furniture",
        "workspace": "crescent",
        "project": "tribeca",
        "status": "todo",
        "name": "Select furniture pieces",
        "description": "Choose sofa, dining table, and accent chairs.",
        "owner": "admin",
        "due_date": date(2026, 3, 20),
        "priority": TaskPriority.HIGH,
        "lists": ["styling"],
    },
    {
        "key": "site_survey",
        "workspace": "crescent",
        "project": "tribeca",
        "status": "in_progress",
        "name": "Complete site survey",
        "description": "Measure all rooms and document existing conditions.",
        "owner": "admin",
        "due_date": date(2026, 2, 20),
        "priority": TaskPriority.URGENT,
    },
    {
        "key": "showroom_scope",
        "workspace": "crescent",
        "project": "soho",
        "status": "todo",
        "name": "Define showroom scope",
        "description": "Outline square footage needs, fixture requirements, and layout.",
        "owner": "admin",
    },
    {
        "key": "wireframes",
        "workspace": "internal",
        "project": "website",
        "status": "in_progress",
        "name": "Create wireframes",
        "description": "Design wireframes for homepage, portfolio, and contact pages.",
        "owner": "sam",
        "due_date": date(2026, 2, 28),
        "priority": TaskPriority.HIGH,
        "lists": ["design_phase"],
    },
    {
        "key": "brand_guide",
        "workspace": "internal",
        "project": "website",
        "status": "done",
        "name": "Finalize brand guidelines",
        "description": "Complete the updated brand guide with new color palette and typography.",
        "owner": "admin",
        "lists": ["design_phase"],
    },
    {
        "key": "website_copy",
        "workspace": "internal",
        "project": "website",
        "status": "todo",
        "name": "Write website copy",
        "description": "Draft copy for all pages including About, Services, and Contact.",
        "owner": "admin",
        "due_date": date(2026, 3, 15),
    },
]

FOLDERS = [
    {"key": "client_docs", "workspace": "crescent", "name": "Client Docs"},
    {"key": "brooklyn_assets", "workspace": "crescent", "project": "brooklyn", "name": "Project Assets"},
    {
        "key": "concepts",
        "workspace": "crescent",
        "project": "brooklyn",
        "parent": "brooklyn_assets",
        "name": "Concepts",
    },
    {"key": "tribeca_assets", "workspace": "crescent", "project": "tribeca", "name": "Project Assets"},
    {"key": "internal_docs", "workspace": "internal", "name": "Internal Docs"},
]

FILES = [
    {
        "key": "client_brief",
        "filename": "Client brief.pdf",
        "storage_key": "crescent/client-docs/client-brief.pdf",
        "size": 245000,
        "mime_type": "application/pdf",
        "uploader": "admin",
        "workspace": "crescent",
        "folder": "client_docs",
    },
    {
        "key": "render",
        "filename": "Living room render v3.png",
        "storage_key": "crescent/brooklyn/concepts/living-room-v3.png",
        "size": 3200000,
        "mime_type": "image/png",
        "uploader": "sam",
        "workspace": "crescent",
        "project": "brooklyn",
        "folder": "concepts",
    },
    {
        "key": "floor_plan",
        "filename": "Floor plan measurements.pdf",
        "storage_key": "crescent/brooklyn/floor-plan.pdf",
        "size": 890000,
        "mime_type": "application/pdf",
        "uploader": "admin",
        "workspace": "crescent",
        "project": "brooklyn",
        "folder": "brooklyn_assets",
    },
    {
        "key": "style_guide",
        "filename": "Loft style guide.pdf",
        "storage_key": "crescent/tribeca/style-guide.pdf",
        "size": 1500000,
        "mime_type": "application/pdf",
        "uploader": "admin",
        "workspace": "crescent",
        "project": "tribeca",
        "folder": "tribeca_assets",
    },
    {
        "key": "brand_pdf",
        "filename": "Brand guidelines.pdf",
        "storage_key": "internal/brand-guidelines.pdf",
        "size": 2100000,
        "mime_type": "application/pdf",
        "uploader": "admin",
        "workspace": "internal",
        "folder": "internal_docs",
    },
]


async def clear_store(db: AsyncSession) -> None:
    """Delete every row, children before parents."""
    # Break the users <-> workspaces reference cycle first
    await db.execute(update(Workspace).values(primary_user_id=None))
    await db.execute(update(User).values(workspace_id=None))
    for model in CLEAR_ORDER:
        await db.execute(delete(model))
    await db.execute(delete(Workspace))
    await db.execute(delete(User))
    await db.execute(delete(TaskStatus))
    await db.flush()


async def seed_demo_data(db: AsyncSession) -> dict[str, Workspace]:
    """Clear the store and load the demo data set.

    Returns the created workspaces keyed by ``crescent`` and ``internal``.
    The caller owns the transaction.
    """
    await clear_store(db)

    users = {
        "admin": User(name="Luna Admin", email="admin@lunapm.local", role=UserRole.ADMIN.value),
        "sam": User(name="Sam Chen", email="sam@lunapm.local", role=UserRole.ADMIN.value),
        "ava": User(name="Ava Martinez", email="ava@crescent.local", role=UserRole.CLIENT.value),
    }
    db.add_all(users.values())
    await db.flush()

    workspaces = {
        "crescent": Workspace(
            name="Crescent Interiors",
            slug=slugify("Crescent Interiors"),
            type=WorkspaceType.CLIENT.value,
            address="120 Wythe Ave, Brooklyn, NY 11249",
            primary_user_id=users["ava"].id,
        ),
        "internal": Workspace(
            name="Internal Ops",
            slug=slugify("Internal Ops"),
            type=WorkspaceType.COMPANY.value,
            address="85 Broad St, New York, NY 10004",
        ),
    }
    db.add_all(workspaces.values())
    await db.flush()
    users["ava"].workspace_id = workspaces["crescent"].id

    contractor = WorkspaceCustomField(
        workspace_id=workspaces["crescent"].id,
        name="Contractor",
        field_type=CustomFieldType.TEXT.value,
        options=[],
        position=1,
    )
    style = WorkspaceCustomField(
        workspace_id=workspaces["crescent"].id,
        name="Style Preference",
        field_type=CustomFieldType.SELECT.value,
        options=["Modern", "Traditional", "Transitional", "Minimalist"],
        position=2,
    )
    db.add_all([contractor, style])

    statuses = {}
    for status_data in STATUSES:
        status_data = dict(status_data)
        key = status_data.pop("key")
        statuses[key] = TaskStatus(**status_data)
    db.add_all(statuses.values())

    projects = {}
    for project_data in PROJECTS:
        projects[project_data["key"]] = Project(
            workspace_id=workspaces[project_data["workspace"]].id,
            name=project_data["name"],
            status=project_data["status"].value,
            description=project_data.get("description"),
            start_date=project_data.get("start_date"),
            end_date=project_data.get("end_date"),
        )
    db.add_all(projects.values())
    await db.flush()
    print(f"  Created {len(projects)} projects and {len(statuses)} statuses")

    db.add_all(
        [
            ProjectCustomFieldValue(
                project_id=projects["brooklyn"].id, custom_field_id=contractor.id, value="Atlas Build Co"
            ),
            ProjectCustomFieldValue(
                project_id=projects["brooklyn"].id, custom_field_id=style.id, value="Transitional"
            ),
            ProjectCustomFieldValue(
                project_id=projects["tribeca"].id, custom_field_id=style.id, value="Modern"
            ),
        ]
    )

    task_lists = {
        list_data["key"]: TaskList(project_id=projects[list_data["project"]].id, name=list_data["name"])
        for list_data in LISTS
    }
    db.add_all(task_lists.values())
    await db.flush()

    tasks: dict[str, Task] = {}
    for task_data in TASKS:
        project = projects.get(task_data.get("project"))
        parent = tasks.get(task_data.get("parent"))
        owner = users.get(task_data.get("owner"))
        task = Task(
            workspace_id=workspaces[task_data["workspace"]].id,
            project_id=project.id if project is not None else None,
            parent_task_id=parent.id if parent is not None else None,
            status_id=statuses[task_data["status"]].id,
            name=task_data["name"],
            description=task_data.get("description"),
            owner_id=owner.id if owner is not None else None,
            due_date=task_data.get("due_date"),
            priority=task_data.get("priority", TaskPriority.NORMAL).value,
            requires_approval=task_data.get("requires_approval", False),
            tags=[],
        )
        db.add(task)
        # Flush per task so created_at follows creation order
        await db.flush()
        tasks[task_data["key"]] = task

        for list_key in task_data.get("lists", []):
            db.add(ListTask(list_id=task_lists[list_key].id, task_id=task.id))
        if task.requires_approval:
            db.add(TaskApproval(task_id=task.id, status=ApprovalStatus.PENDING.value))
    await db.flush()
    print(f"  Created {len(tasks)} tasks")

    db.add(TaskDependency(task_id=tasks["lighting_install"].id, depends_on_id=tasks["pendant_approval"].id))

    opening = TaskComment(
        task_id=tasks["pendant_approval"].id,
        author_id=users["admin"].id,
        body=(
            "I've narrowed it down to three options from West Elm and one from "
            "Rejuvenation. Photos attached."
        ),
    )
    db.add(opening)
    await db.flush()
    replies = [
        TaskComment(
            task_id=tasks["pendant_approval"].id,
            author_id=users["ava"].id,
            parent_comment_id=opening.id,
            body="Love the Rejuvenation option! Can we get it in brass instead of black?",
        ),
        TaskComment(
            task_id=tasks["pendant_approval"].id,
            author_id=users["admin"].id,
            parent_comment_id=opening.id,
            body="Yes, they offer it in aged brass. I'll request a swatch and updated pricing.",
        ),
        TaskComment(
            task_id=tasks["moodboard"].id,
            author_id=users["ava"].id,
            body="Can we lean more warm and earthy? Less cool tones please.",
        ),
    ]
    for reply in replies:
        db.add(reply)
        await db.flush()

    for option, size in (("A", 420000), ("B", 380000)):
        db.add(
            TaskCommentFile(
                comment_id=opening.id,
                uploader_id=users["admin"].id,
                filename=f"Pendant-Option-{option}.jpg",
                storage_key=f"crescent/brooklyn/pendant-{option.lower()}.jpg",
                size=size,
                mime_type="image/jpeg",
            )
        )
    print(f"  Created {len(replies) + 1} comments")

    folders: dict[str, Folder] = {}
    for folder_data in FOLDERS:
        project = projects.get(folder_data.get("project"))
        parent = folders.get(folder_data.get("parent"))
        folder = Folder(
            name=folder_data["name"],
            workspace_id=workspaces[folder_data["workspace"]].id,
            project_id=project.id if project is not None else None,
            parent_id=parent.id if parent is not None else None,
        )
        db.add(folder)
        await db.flush()
        folders[folder_data["key"]] = folder

    files = {}
    for file_data in FILES:
        project = projects.get(file_data.get("project"))
        files[file_data["key"]] = File(
            filename=file_data["filename"],
            storage_key=file_data["storage_key"],
            size=file_data["size"],
            mime_type=file_data["mime_type"],
            uploader_id=users[file_data["uploader"]].id,
            workspace_id=workspaces[file_data["workspace"]].id,
            project_id=project.id if project is not None else None,
            folder_id=folders[file_data["folder"]].id,
        )
    db.add_all(files.values())
    await db.flush()

    db.add_all(
        [
            TaskFile(task_id=tasks["floor_plan"].id, file_id=files["floor_plan"].id),
            TaskFile(task_id=tasks["moodboard"].id, file_id=files["render"].id),
        ]
    )
    await db.flush()
    print(f"  Created {len(folders)} folders and {len(files)} files")

    logger.info(
        "demo_data_seeded",
        workspaces=len(workspaces),
        projects=len(projects),
        tasks=len(tasks),
    )
    return workspaces


async def main() -> None:
    """Main entry point."""
    print("Seeding demo data...")
    print("-" * 50)

    async with async_session_factory() as db:
        try:
            await seed_demo_data(db)
            await db.commit()
        except Exception as e:
            print(f"Error seeding demo data: {e}")
            await db.rollback()
            raise

    print("\nDemo data seeded successfully!")


if __name__ == "__main__":
    asyncio.run(main())
