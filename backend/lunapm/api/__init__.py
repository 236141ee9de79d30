"""API router package."""

from fastapi import APIRouter

from lunapm.api.v1 import (
    auth,
    client,
    dashboard,
    folders,
    health,
    lists,
    projects,
    statuses,
    tasks,
    workspaces,
)

router = APIRouter()

# Include all API routers
router.include_router(health.router, tags=["Health"])
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
router.include_router(workspaces.router, prefix="/workspaces", tags=["Workspaces"])
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
router.include_router(lists.router, prefix="/lists", tags=["Lists"])
router.include_router(statuses.router, prefix="/statuses", tags=["Statuses"])
router.include_router(folders.router, prefix="/folders", tags=["Folders"])
router.include_router(client.router, prefix="/client/{slug}", tags=["Client Portal"])
