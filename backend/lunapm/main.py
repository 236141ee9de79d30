"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from lunapm.api import router as api_router
from lunapm.config import get_settings
from lunapm.db.session import close_db, init_db
from lunapm.exceptions import LunaPMError
from lunapm.log_config import configure_logging
from lunapm.middleware.request_context import RequestContextMiddleware

logger = structlog.get_logger()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup/shutdown events."""
    logger.info("app_starting", app=settings.app_name, version=settings.app_version)
    await init_db()
    logger.info("database_initialized")

    yield

    logger.info("app_stopping", app=settings.app_name)
    await close_db()
    logger.info("database_closed")


async def lunapm_error_handler(request: Request, exc: LunaPMError) -> ORJSONResponse:
    """Render domain errors as ``{"detail", "code"}`` with their mapped status."""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        "domain_error",
        error_type=type(exc).__name__,
        code=exc.code,
        status_code=exc.status_code,
        detail=exc.message,
    )
    return ORJSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level, settings.json_logs)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Project management for agency workspaces, projects, tasks and client approvals",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    # Add middleware (order matters - last added is first executed)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(LunaPMError, lunapm_error_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.api_prefix)

    return app


app = create_app()
