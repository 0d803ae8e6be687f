"""In-process project storage.

Data lives only as long as the process. Useful for local development and as a
test double for the SQL repository.
"""

from __future__ import annotations

import copy
import threading
from itertools import count

from collab_projects.constants.project_constants import ProjectStatus
from collab_projects.models.project import Project, ProjectFile


def _contains_text(project: Project, text: str) -> bool:
    needle = text.lower()
    return needle in project.name.lower() or needle in project.description.lower()


class InMemoryProjectRepository:
    """Dictionary-backed implementation of ``ProjectRepository``."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._projects: dict[str, Project] = {}
        self._files: dict[str, ProjectFile] = {}
        # Write sequence numbers break ties between equal timestamps.
        self._sequence = count(1)
        self._project_seq: dict[str, int] = {}

    def add_project(self, project: Project) -> Project:
        with self._lock:
            if project.project_id in self._projects:
                raise ValueError(f"Duplicate project id: {project.project_id}")
            self._projects[project.project_id] = copy.deepcopy(project)
            self._project_seq[project.project_id] = next(self._sequence)
            return copy.deepcopy(project)

    def get_project(self, project_id: str) -> Project | None:
        with self._lock:
            project = self._projects.get(project_id)
            return copy.deepcopy(project) if project is not None else None

    def save_project(self, project: Project) -> Project:
        with self._lock:
            if project.project_id not in self._projects:
                raise KeyError(project.project_id)
            self._projects[project.project_id] = copy.deepcopy(project)
            self._project_seq[project.project_id] = next(self._sequence)
            return copy.deepcopy(project)

    def find_projects(
        self,
        *,
        room_id: str | None = None,
        status: ProjectStatus | None = None,
        collaborator_id: str | None = None,
        text: str | None = None,
        limit: int | None = None,
    ) -> list[Project]:
        with self._lock:
            matches = [
                project
                for project in self._projects.values()
                if (room_id is None or project.room_id == room_id)
                and (status is None or project.status == status)
                and (
                    collaborator_id is None
                    or any(c.user_id == collaborator_id for c in project.collaborators)
                )
                and (text is None or _contains_text(project, text))
            ]
            matches.sort(
                key=lambda p: (p.updated_at, self._project_seq[p.project_id]),
                reverse=True,
            )
            if limit is not None:
                matches = matches[:limit]
            return [copy.deepcopy(project) for project in matches]

    def add_file(self, project_file: ProjectFile) -> ProjectFile:
        with self._lock:
            if project_file.file_id in self._files:
                raise ValueError(f"Duplicate file id: {project_file.file_id}")
            self._files[project_file.file_id] = copy.deepcopy(project_file)
            return copy.deepcopy(project_file)

    def get_file(self, project_id: str, file_id: str) -> ProjectFile | None:
        with self._lock:
            project_file = self._files.get(file_id)
            if project_file is None or project_file.project_id != project_id:
                return None
            return copy.deepcopy(project_file)

    def find_file_by_name(self, project_id: str, file_name: str) -> ProjectFile | None:
        with self._lock:
            for project_file in self._files.values():
                if project_file.project_id == project_id and project_file.file_name == file_name:
                    return copy.deepcopy(project_file)
            return None

    def list_files(self, project_id: str) -> list[ProjectFile]:
        # dicts keep insertion order, which is the registry order
        with self._lock:
            return [copy.deepcopy(f) for f in self._files.values() if f.project_id == project_id]

    def save_file(self, project_file: ProjectFile) -> ProjectFile:
        with self._lock:
            if project_file.file_id not in self._files:
                raise KeyError(project_file.file_id)
            self._files[project_file.file_id] = copy.deepcopy(project_file)
            return copy.deepcopy(project_file)
