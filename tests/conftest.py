from __future__ import annotations

from pathlib import Path

import pytest

import collab_projects.data.db as app_db
from collab_projects.api.dependencies import reset_project_service
from collab_projects.data.crud import InMemoryProjectRepository
from collab_projects.data.db import init_db
from collab_projects.services.membership import MembershipService
from collab_projects.services.projects import ProjectService


@pytest.fixture
def api_db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Use a temporary SQLite DB for API tests."""
    db_path = tmp_path / "api.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path.as_posix()}")
    monkeypatch.setenv("COLLAB_STORAGE_BACKEND", "sql")
    monkeypatch.delenv("COLLAB_MEMBERSHIP_POLICY", raising=False)
    app_db.reset_engine()
    reset_project_service()
    init_db()
    yield
    # Dispose engine to release connections
    app_db.reset_engine()
    reset_project_service()


@pytest.fixture
def service() -> ProjectService:
    """Project service backed by the in-memory repository."""
    return ProjectService(InMemoryProjectRepository(), MembershipService())
