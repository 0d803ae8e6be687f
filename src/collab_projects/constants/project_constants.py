"""Enumerations and lookup tables shared by the project workspace.

File types follow the stored ``fileType`` vocabulary of project files, and the
upload allow-lists mirror the defaults every new project is seeded with.
"""

from __future__ import annotations

from enum import StrEnum


class ProjectStatus(StrEnum):
    """Lifecycle status of a project."""

    ACTIVE = "active"
    ARCHIVED = "archived"
    DELETED = "deleted"


class CollaboratorRole(StrEnum):
    """Role a collaborator holds on a project."""

    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"


class CompilationStatus(StrEnum):
    """State of the most recent compile request for a project."""

    IDLE = "idle"
    COMPILING = "compiling"
    SUCCESS = "success"
    ERROR = "error"


class FileType(StrEnum):
    """Type tag stored on every project file."""

    JAVASCRIPT = "javascript"
    JSX = "jsx"
    TYPESCRIPT = "typescript"
    TSX = "tsx"
    CSS = "css"
    HTML = "html"
    JSON = "json"
    OTHER = "other"


class MembershipPolicy(StrEnum):
    """How file writers who are not yet collaborators are treated."""

    AUTO_ENROLL = "auto-enroll"
    STRICT = "strict"


DEFAULT_PROJECT_TYPE = "react"
DEFAULT_MAX_FILE_SIZE = 5 * 1024 * 1024  # 5 MiB
DEFAULT_ENCODING = "utf8"

DEFAULT_ALLOWED_FILE_TYPES = ("js", "jsx", "ts", "tsx", "css", "html", "json", "md", "txt")

# Accepted by the upload filter even when the extension is not allowed.
ALLOWED_UPLOAD_MIME_TYPES = frozenset(
    {
        "text/javascript",
        "text/css",
        "text/html",
        "application/json",
        "text/plain",
    }
)

EXTENSION_TO_FILE_TYPE = {
    ".js": FileType.JAVASCRIPT,
    ".jsx": FileType.JSX,
    ".ts": FileType.TYPESCRIPT,
    ".tsx": FileType.TSX,
    ".css": FileType.CSS,
    ".html": FileType.HTML,
    ".json": FileType.JSON,
    ".md": FileType.OTHER,
    ".txt": FileType.OTHER,
}

FILE_TYPE_TO_MIME = {
    FileType.JAVASCRIPT: "application/javascript",
    FileType.JSX: "application/javascript",
    FileType.TYPESCRIPT: "application/typescript",
    FileType.TSX: "application/typescript",
    FileType.CSS: "text/css",
    FileType.HTML: "text/html",
    FileType.JSON: "application/json",
    FileType.OTHER: "text/plain",
}

# Content types used when serving a raw project file by name.
SERVED_EXTENSION_TO_CONTENT_TYPE = {
    "css": "text/css",
    "js": "application/javascript",
    "html": "text/html",
    "json": "application/json",
}
DEFAULT_SERVED_CONTENT_TYPE = "text/plain"

# File types whose contents are inlined into the compiled preview script.
SCRIPT_FILE_TYPES = (FileType.JAVASCRIPT, FileType.JSX)
