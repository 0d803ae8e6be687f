"""Helpers for classifying project files and filtering uploads."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import PurePosixPath

from collab_projects.constants.project_constants import (
    ALLOWED_UPLOAD_MIME_TYPES,
    DEFAULT_SERVED_CONTENT_TYPE,
    EXTENSION_TO_FILE_TYPE,
    FILE_TYPE_TO_MIME,
    SERVED_EXTENSION_TO_CONTENT_TYPE,
    FileType,
)
from collab_projects.models.errors import UnsupportedFileTypeError, ValidationError


def get_extension(file_name: str) -> str:
    """Return the lower-cased extension of ``file_name`` including the dot."""
    return PurePosixPath(file_name).suffix.lower()


def detect_file_type(file_name: str) -> FileType:
    """Map a file name to its stored file type."""
    return EXTENSION_TO_FILE_TYPE.get(get_extension(file_name), FileType.OTHER)


def normalize_file_type(file_type: str | None, file_name: str) -> FileType:
    """Return a valid file type, deriving it from the name when absent.

    Raises:
        ValidationError: If an explicit type is not a known file type.
    """
    if not file_type:
        return detect_file_type(file_name)
    try:
        return FileType(file_type.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(t.value for t in FileType)
        message = f"Invalid fileType '{file_type}'. Expected one of: {allowed}"
        raise ValidationError(message) from exc


def mime_type_for(file_type: str) -> str:
    """Return the MIME type recorded in file metadata for a file type."""
    try:
        return FILE_TYPE_TO_MIME[FileType(file_type)]
    except ValueError:
        return FILE_TYPE_TO_MIME[FileType.OTHER]


def served_content_type(file_name: str) -> str:
    """Return the content type used when serving a raw file by name."""
    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    return SERVED_EXTENSION_TO_CONTENT_TYPE.get(extension, DEFAULT_SERVED_CONTENT_TYPE)


def _normalize_content_type(content_type: str | None) -> str | None:
    if content_type is None:
        return None
    return content_type.split(";", 1)[0].strip().lower()


def validate_upload(
    *,
    filename: str | None,
    content_type: str | None,
    size: int,
    allowed_file_types: Iterable[str],
    max_file_size: int,
) -> FileType:
    """Check an uploaded file against the project's upload rules.

    A file passes when its extension is allowed or its MIME type is one of the
    accepted text types.

    Returns:
        The file type the upload will be stored with.

    Raises:
        ValidationError: If the upload has no name or exceeds the size limit.
        UnsupportedFileTypeError: If neither extension nor MIME type is allowed.
    """
    if not filename:
        raise ValidationError("No file uploaded")
    if size > max_file_size:
        raise ValidationError(f"File exceeds the maximum size of {max_file_size} bytes")

    extension = get_extension(filename)
    allowed_extensions = {f".{ext.lower().lstrip('.')}" for ext in allowed_file_types}
    mime = _normalize_content_type(content_type)
    if extension not in allowed_extensions and mime not in ALLOWED_UPLOAD_MIME_TYPES:
        raise UnsupportedFileTypeError("File type not allowed")

    return detect_file_type(filename)
