"""Domain records and errors for the project workspace."""

from collab_projects.models.errors import (
    CompilationError,
    NotFoundError,
    PermissionDeniedError,
    ProjectError,
    UnsupportedFileTypeError,
    ValidationError,
)
from collab_projects.models.project import (
    Collaborator,
    CompilationResult,
    CompilationState,
    Project,
    ProjectFile,
    ProjectSettings,
    ProjectStats,
    utc_now,
)

__all__ = [
    "Collaborator",
    "CompilationError",
    "CompilationResult",
    "CompilationState",
    "NotFoundError",
    "PermissionDeniedError",
    "Project",
    "ProjectError",
    "ProjectFile",
    "ProjectSettings",
    "ProjectStats",
    "UnsupportedFileTypeError",
    "ValidationError",
    "utc_now",
]
