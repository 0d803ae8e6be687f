"""Exceptions raised by the project workspace services.

Each error carries the HTTP status the API layer answers with, so route
handlers never have to translate them one by one.
"""

from __future__ import annotations

from collections.abc import Iterable


class ProjectError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ProjectError):
    """Raised when request fields are missing or invalid."""

    status_code = 400

    @classmethod
    def missing_fields(cls, fields: Iterable[str]) -> ValidationError:
        return cls(f"Missing required fields: {', '.join(fields)}")


class UnsupportedFileTypeError(ProjectError):
    """Raised when an upload is rejected by the file type filter."""

    status_code = 400


class CompilationError(ProjectError):
    """Raised when a preview cannot be built from a project's files."""

    status_code = 400


class PermissionDeniedError(ProjectError):
    """Raised when an actor may not perform an action on a project."""

    status_code = 403


class NotFoundError(ProjectError):
    """Raised when a project, file or collaborator does not exist."""

    status_code = 404
