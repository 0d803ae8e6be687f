"""FastAPI application entry point for the project workspace API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from collab_projects.api.errors import register_exception_handlers
from collab_projects.api.routes import health, projects
from collab_projects.config import configure_logging, load_settings

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize resources on startup and clean up on shutdown."""
    from collab_projects.api.dependencies import get_project_service
    from collab_projects.data.crud import SqlProjectRepository
    from collab_projects.data.db import init_db

    configure_logging(load_settings().log_level)
    service = get_project_service()
    if isinstance(service.repository, SqlProjectRepository):
        init_db()
    yield


app = FastAPI(
    title="Collaborative Projects API",
    description="Rooms' multi-file projects with collaborators and a simulated preview build",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=load_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(health.router)
app.include_router(projects.router, prefix="/api")


def main() -> None:
    """Start the development server."""
    import uvicorn

    settings = load_settings()
    uvicorn.run(
        "collab_projects.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
