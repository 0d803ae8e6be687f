"""Storage interface for projects and their files."""

from __future__ import annotations

from typing import Protocol

from collab_projects.constants.project_constants import ProjectStatus
from collab_projects.models.project import Project, ProjectFile


class ProjectRepository(Protocol):
    """Persistence operations the project service depends on.

    Implementations return detached records: mutating a returned object has
    no effect until it is passed back through ``save_project``/``save_file``.
    Listing methods return files in insertion (registry) order and projects
    most recently updated first.
    """

    def add_project(self, project: Project) -> Project: ...

    def get_project(self, project_id: str) -> Project | None: ...

    def save_project(self, project: Project) -> Project: ...

    def find_projects(
        self,
        *,
        room_id: str | None = None,
        status: ProjectStatus | None = None,
        collaborator_id: str | None = None,
        text: str | None = None,
        limit: int | None = None,
    ) -> list[Project]: ...

    def add_file(self, project_file: ProjectFile) -> ProjectFile: ...

    def get_file(self, project_id: str, file_id: str) -> ProjectFile | None: ...

    def find_file_by_name(self, project_id: str, file_name: str) -> ProjectFile | None: ...

    def list_files(self, project_id: str) -> list[ProjectFile]: ...

    def save_file(self, project_file: ProjectFile) -> ProjectFile: ...
