"""
Pytest configuration and fixtures for the Luna PM API tests
"""
import os

# Settings are read at import time, so the test database must be chosen first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["ENVIRONMENT"] = "test"

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator
from uuid import UUID

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lunapm.api.v1.auth import create_access_token
from lunapm.db.base import Base
from lunapm.db.session import get_db_session
from lunapm.main import app
from lunapm.models import (
    File,
    Folder,
    ListTask,
    Project,
    Task,
    TaskApproval,
    TaskList,
    TaskStatus,
    User,
    Workspace,
    WorkspaceCustomField,
)
from lunapm.models.enums import (
    ApprovalStatus,
    ProjectStatus,
    StatusState,
    UserRole,
    WorkspaceType,
)

BASE_TIME = datetime(2026, 1, 1, 9, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """A fixed creation time so ordering assertions do not depend on the clock."""
    return BASE_TIME + timedelta(minutes=minutes)


@pytest.fixture
async def engine():
    """Fresh in-memory database per test with foreign keys enforced."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by tests to arrange data and call services directly"""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database session override"""

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


# =============================================================================
# Factories
# =============================================================================


class Factory:
    """Builds rows in the test session. Every helper flushes so ids are available."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, obj):
        self.session.add(obj)
        await self.session.flush()
        return obj

    async def commit(self) -> None:
        await self.session.commit()

    async def user(self, role: str = UserRole.ADMIN.value, workspace: Workspace | None = None, **kwargs) -> User:
        n = self._next()
        return await self._save(
            User(
                email=kwargs.pop("email", f"user{n}@lunapm.local"),
                name=kwargs.pop("name", f"User {n}"),
                role=role,
                workspace_id=workspace.id if workspace is not None else None,
                **kwargs,
            )
        )

    async def workspace(self, name: str | None = None, type: str = WorkspaceType.CLIENT.value, **kwargs) -> Workspace:
        n = self._next()
        name = name or f"Workspace {n}"
        return await self._save(
            Workspace(
                name=name,
                slug=kwargs.pop("slug", f"workspace-{n}"),
                type=type,
                **kwargs,
            )
        )

    async def status(
        self,
        name: str = "To do",
        position: int = 1,
        state: str = StatusState.ACTIVE.value,
        **kwargs,
    ) -> TaskStatus:
        return await self._save(TaskStatus(name=name, position=position, state=state, **kwargs))

    async def project(
        self,
        workspace: Workspace,
        name: str | None = None,
        status: str = ProjectStatus.ACTIVE.value,
        **kwargs,
    ) -> Project:
        n = self._next()
        return await self._save(
            Project(workspace_id=workspace.id, name=name or f"Project {n}", status=status, **kwargs)
        )

    async def task_list(self, project: Project, name: str) -> TaskList:
        return await self._save(TaskList(project_id=project.id, name=name))

    async def task(
        self,
        workspace: Workspace,
        status: TaskStatus,
        name: str | None = None,
        project: Project | None = None,
        parent: Task | None = None,
        lists: list[TaskList] | None = None,
        approval: str | None = None,
        **kwargs,
    ) -> Task:
        n = self._next()
        task = await self._save(
            Task(
                workspace_id=workspace.id,
                project_id=project.id if project is not None else None,
                parent_task_id=parent.id if parent is not None else None,
                status_id=status.id,
                name=name or f"Task {n}",
                requires_approval=approval is not None,
                tags=[],
                **kwargs,
            )
        )
        for task_list in lists or []:
            await self._save(ListTask(list_id=task_list.id, task_id=task.id))
        if approval is not None:
            await self._save(TaskApproval(task_id=task.id, status=approval))
        return task

    async def custom_field(
        self,
        workspace: Workspace,
        name: str,
        field_type: str = "TEXT",
        options: list[str] | None = None,
        position: int = 0,
    ) -> WorkspaceCustomField:
        return await self._save(
            WorkspaceCustomField(
                workspace_id=workspace.id,
                name=name,
                field_type=field_type,
                options=options or [],
                position=position,
            )
        )

    async def folder(
        self,
        workspace: Workspace,
        name: str,
        project: Project | None = None,
        parent: Folder | None = None,
    ) -> Folder:
        return await self._save(
            Folder(
                name=name,
                workspace_id=workspace.id,
                project_id=project.id if project is not None else None,
                parent_id=parent.id if parent is not None else None,
            )
        )

    async def file(
        self,
        workspace: Workspace,
        filename: str,
        folder: Folder | None = None,
        project: Project | None = None,
        size: int = 1024,
    ) -> File:
        return await self._save(
            File(
                filename=filename,
                storage_key=f"test/{filename}",
                size=size,
                mime_type="application/pdf",
                workspace_id=workspace.id,
                project_id=project.id if project is not None else None,
                folder_id=folder.id if folder is not None else None,
            )
        )


@pytest.fixture
def factory(db_session: AsyncSession) -> Factory:
    return Factory(db_session)


@pytest.fixture
async def admin_user(factory: Factory) -> User:
    user = await factory.user(role=UserRole.ADMIN.value, name="Luna Admin", email="admin@lunapm.local")
    await factory.commit()
    return user


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return auth_headers(admin_user)


@pytest.fixture
async def todo_status(factory: Factory) -> TaskStatus:
    status = await factory.status("To do", position=1, is_default=True)
    await factory.commit()
    return status


@pytest.fixture
async def client_workspace(factory: Factory) -> Workspace:
    workspace = await factory.workspace("Crescent Interiors", slug="crescent-interiors")
    await factory.commit()
    return workspace


@pytest.fixture
async def client_user(factory: Factory, client_workspace: Workspace) -> User:
    user = await factory.user(
        role=UserRole.CLIENT.value,
        workspace=client_workspace,
        name="Ava Martinez",
        email="ava@crescent.local",
    )
    await factory.commit()
    return user


@pytest.fixture
def client_headers(client_user: User) -> dict[str, str]:
    return auth_headers(client_user)


def ids(items) -> list[UUID]:
    return [item.id for item in items]


PENDING = ApprovalStatus.PENDING.value
