"""Constants and enumerations for the project workspace."""

from collab_projects.constants.project_constants import (
    ALLOWED_UPLOAD_MIME_TYPES,
    DEFAULT_ALLOWED_FILE_TYPES,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_PROJECT_TYPE,
    CollaboratorRole,
    CompilationStatus,
    FileType,
    MembershipPolicy,
    ProjectStatus,
)

__all__ = [
    "ALLOWED_UPLOAD_MIME_TYPES",
    "DEFAULT_ALLOWED_FILE_TYPES",
    "DEFAULT_MAX_FILE_SIZE",
    "DEFAULT_PROJECT_TYPE",
    "CollaboratorRole",
    "CompilationStatus",
    "FileType",
    "MembershipPolicy",
    "ProjectStatus",
]
