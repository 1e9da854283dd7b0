"""FastAPI application factory.

Main entry point for the FORGE-Z Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from forgez.config.app_config import load_app_config
from forgez.config.archetypes import list_archetypes
from forgez.core.errors import (
    ConflictError,
    ForgezError,
    GoneError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from forgez.db import ensure_db
from forgez.web.deps import ensure_database
from forgez.web.routes import (
    achievements_router,
    companies_router,
    feedback_router,
    health_router,
    hackathons_router,
    jobs_router,
    learn_router,
    progress_router,
    projects_router,
    quests_router,
    roles_router,
    skills_router,
    teams_router,
    users_router,
)

logger = structlog.get_logger(__name__)

# Domain error -> HTTP status
ERROR_STATUS = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    GoneError: status.HTTP_410_GONE,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan context manager for startup/shutdown events."""
    # Startup
    config = load_app_config()
    ensure_db(config.db_path)
    logger.info(
        "api_startup",
        db_path=str(config.db_path.absolute()),
        state_dir=str(config.state_dir.absolute()),
        archetypes=[a.id for a in list_archetypes()],
    )
    yield


async def forgez_error_handler(request: Request, exc: ForgezError) -> JSONResponse:
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    logger.info(
        "request_rejected",
        method=request.method,
        path=request.url.path,
        status=status_code,
        error=exc.message,
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies and parameters as 400 with the first problem."""
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        detail = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="FORGE-Z API",
        description="Web API for the FORGE-Z career exploration game",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        dependencies=[Depends(ensure_database)],
    )

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ForgezError, forgez_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Include routers
    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(quests_router)
    app.include_router(progress_router)
    app.include_router(achievements_router)
    app.include_router(skills_router)
    app.include_router(projects_router)
    app.include_router(feedback_router)
    app.include_router(teams_router)
    app.include_router(jobs_router)
    app.include_router(companies_router)
    app.include_router(learn_router)
    app.include_router(roles_router)
    app.include_router(hackathons_router)

    return app


# Default app instance for uvicorn
app = create_app()
