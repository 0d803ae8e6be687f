"""Data models for projects, their collaborators and files.

These are the records the service layer works with. Repositories translate
them to and from their own storage representation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from collab_projects.constants.project_constants import (
    DEFAULT_ALLOWED_FILE_TYPES,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_PROJECT_TYPE,
    CollaboratorRole,
    CompilationStatus,
    ProjectStatus,
)


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(UTC)


@dataclass(slots=True)
class Collaborator:
    """A user holding a role on a project.

    Attributes:
        user_id: Identity used for membership checks (username or email).
        username: Display handle.
        email: Contact address, falls back to the username when unknown.
        role: Owner, editor or viewer.
        joined_at: UTC timestamp when the user was added.
    """

    user_id: str
    username: str
    email: str
    role: CollaboratorRole
    joined_at: datetime = field(default_factory=utc_now)

    def matches(self, actor: str) -> bool:
        """Return True if ``actor`` identifies this collaborator."""
        return actor in (self.user_id, self.email)


@dataclass(slots=True)
class ProjectSettings:
    """Per-project switches and upload limits."""

    allow_file_upload: bool = True
    allow_file_edit: bool = True
    allow_compilation: bool = True
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    allowed_file_types: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_FILE_TYPES))

    def to_dict(self) -> dict[str, Any]:
        return {
            "allow_file_upload": self.allow_file_upload,
            "allow_file_edit": self.allow_file_edit,
            "allow_compilation": self.allow_compilation,
            "max_file_size": self.max_file_size,
            "allowed_file_types": list(self.allowed_file_types),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ProjectSettings:
        data = data or {}
        defaults = cls()
        return cls(
            allow_file_upload=bool(data.get("allow_file_upload", defaults.allow_file_upload)),
            allow_file_edit=bool(data.get("allow_file_edit", defaults.allow_file_edit)),
            allow_compilation=bool(data.get("allow_compilation", defaults.allow_compilation)),
            max_file_size=int(data.get("max_file_size", defaults.max_file_size)),
            allowed_file_types=list(data.get("allowed_file_types", defaults.allowed_file_types)),
        )


@dataclass(slots=True)
class CompilationState:
    """Outcome of the most recent compile stored on a project."""

    status: CompilationStatus = CompilationStatus.IDLE
    last_compiled: datetime | None = None
    build_output: str | None = None
    error_log: str | None = None
    preview_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": str(self.status),
            "last_compiled": self.last_compiled.isoformat() if self.last_compiled else None,
            "build_output": self.build_output,
            "error_log": self.error_log,
            "preview_url": self.preview_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CompilationState:
        data = data or {}
        last_compiled = data.get("last_compiled")
        if isinstance(last_compiled, str):
            last_compiled = datetime.fromisoformat(last_compiled)
        return cls(
            status=CompilationStatus(data.get("status", CompilationStatus.IDLE)),
            last_compiled=last_compiled,
            build_output=data.get("build_output"),
            error_log=data.get("error_log"),
            preview_url=data.get("preview_url"),
        )


@dataclass(slots=True)
class Project:
    """A named collection of files scoped to one room."""

    project_id: str
    name: str
    room_id: str
    created_by: str
    description: str = ""
    project_type: str = DEFAULT_PROJECT_TYPE
    collaborators: list[Collaborator] = field(default_factory=list)
    settings: ProjectSettings = field(default_factory=ProjectSettings)
    compilation: CompilationState = field(default_factory=CompilationState)
    status: ProjectStatus = ProjectStatus.ACTIVE
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def find_collaborator(self, actor: str) -> Collaborator | None:
        """Return the collaborator identified by ``actor``, if any."""
        for collaborator in self.collaborators:
            if collaborator.matches(actor):
                return collaborator
        return None


@dataclass(slots=True)
class ProjectFile:
    """A single source file stored in a project."""

    file_id: str
    project_id: str
    file_name: str
    file_path: str
    file_type: str
    content: str
    uploaded_by: str
    last_modified_by: str
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)


@dataclass(slots=True)
class CompilationResult:
    """Build artifact produced by the compilation simulator."""

    success: bool
    output: str
    error: str | None = None
    preview_url: str | None = None


@dataclass(slots=True)
class ProjectStats:
    """Summary counters for a project."""

    project_id: str
    name: str
    collaborator_count: int
    file_count: int
    compilation_status: CompilationStatus
    last_compiled: datetime | None
    created_at: datetime
    updated_at: datetime
