"""Shared dependencies for API routes."""

from __future__ import annotations

import logging
import threading

from collab_projects.config import load_settings
from collab_projects.data.crud import InMemoryProjectRepository, SqlProjectRepository
from collab_projects.data.crud.base import ProjectRepository
from collab_projects.services.membership import MembershipService
from collab_projects.services.projects import ProjectService

logger = logging.getLogger(__name__)

_project_service: ProjectService | None = None
_service_lock = threading.Lock()


def build_project_service() -> ProjectService:
    """Create a project service wired according to the environment settings."""
    settings = load_settings()
    repository: ProjectRepository
    if settings.storage_backend == "memory":
        repository = InMemoryProjectRepository()
    else:
        repository = SqlProjectRepository()
    logger.info(
        "Using %s storage with %s membership policy",
        settings.storage_backend,
        settings.membership_policy,
    )
    return ProjectService(
        repository,
        MembershipService(settings.membership_policy),
        max_file_size=settings.max_file_size,
    )


def get_project_service() -> ProjectService:
    """Return the process-wide project service, creating it on first use."""
    global _project_service
    with _service_lock:
        if _project_service is None:
            _project_service = build_project_service()
        return _project_service


def reset_project_service() -> None:
    """Forget the cached service so the next request re-reads settings."""
    global _project_service
    with _service_lock:
        _project_service = None
