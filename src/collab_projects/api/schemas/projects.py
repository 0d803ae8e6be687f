"""Pydantic schemas for project API requests and responses.

Request bodies declare every field optional so that missing fields are
reported by the service layer as a single "Missing required fields" message.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from collab_projects.api.schemas.common import CamelModel, Envelope
from collab_projects.constants.project_constants import (
    CollaboratorRole,
    CompilationStatus,
    ProjectStatus,
)


class CollaboratorResponse(CamelModel):
    """A collaborator entry on a project."""

    user_id: str
    username: str
    email: str
    role: CollaboratorRole
    joined_at: datetime


class ProjectSettingsResponse(CamelModel):
    """Per-project switches and upload limits."""

    allow_file_upload: bool
    allow_file_edit: bool
    allow_compilation: bool
    max_file_size: int
    allowed_file_types: list[str]


class CompilationStateResponse(CamelModel):
    """Outcome of the most recent compile stored on the project."""

    status: CompilationStatus
    last_compiled: datetime | None = None
    build_output: str | None = None
    error_log: str | None = None
    preview_url: str | None = None


class ProjectFileResponse(CamelModel):
    """A stored project file."""

    file_id: str
    project_id: str
    file_name: str
    file_path: str
    file_type: str
    content: str
    uploaded_by: str
    last_modified_by: str
    metadata: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class ProjectResponse(CamelModel):
    """Public-facing project record."""

    project_id: str
    name: str
    description: str
    room_id: str
    created_by: str
    project_type: str
    collaborators: list[CollaboratorResponse]
    settings: ProjectSettingsResponse
    compilation: CompilationStateResponse
    status: ProjectStatus
    created_at: datetime
    updated_at: datetime


class ProjectDetailResponse(ProjectResponse):
    """Project record including its files ordered by file name."""

    files: list[ProjectFileResponse]


class CompilationResultResponse(CamelModel):
    """Build artifact returned by the compile endpoint."""

    success: bool
    output: str
    error: str | None = None
    preview_url: str | None = None


class ProjectStatsResponse(CamelModel):
    """Summary counters for a project."""

    project_id: str
    name: str
    collaborator_count: int
    file_count: int
    compilation_status: CompilationStatus
    last_compiled: datetime | None = None
    created_at: datetime
    updated_at: datetime


# --------- Envelopes ---------


class ProjectEnvelope(Envelope):
    project: ProjectResponse


class ProjectDetailEnvelope(Envelope):
    project: ProjectDetailResponse


class ProjectListEnvelope(Envelope):
    projects: list[ProjectResponse]


class ProjectFileEnvelope(Envelope):
    file: ProjectFileResponse


class CompilationEnvelope(Envelope):
    compilation: CompilationResultResponse


class ProjectStatsEnvelope(Envelope):
    stats: ProjectStatsResponse


# --------- Requests ---------


class RoomMemberRequest(CamelModel):
    """A room member to seed as an editor."""

    username: str | None = None
    email: str | None = None


class ProjectCreateRequest(CamelModel):
    """Request body for creating a project."""

    name: str | None = Field(None, description="Project name")
    description: str | None = Field(None, description="Optional description")
    room_id: str | None = Field(None, description="Room that owns the project")
    created_by: str | None = Field(None, description="Creator identity, seeded as owner")
    project_type: str | None = Field(None, description="Project flavour, defaults to react")
    room_members: list[RoomMemberRequest] = Field(
        default_factory=list, description="Room members added as editors"
    )


class ProjectSettingsUpdate(CamelModel):
    """Settings fields that may be changed; omitted fields stay as they are."""

    allow_file_upload: bool | None = None
    allow_file_edit: bool | None = None
    allow_compilation: bool | None = None
    max_file_size: int | None = Field(None, gt=0)
    allowed_file_types: list[str] | None = None


class ProjectUpdateRequest(CamelModel):
    """Fields allowed to be updated for a project."""

    name: str | None = None
    description: str | None = None
    settings: ProjectSettingsUpdate | None = None


class ProjectStatusRequest(CamelModel):
    """Request body for changing a project's status."""

    status: str | None = Field(None, description="active, archived or deleted")


class CollaboratorCreateRequest(CamelModel):
    """Request body for granting a user a role on a project."""

    user_id: str | None = None
    username: str | None = None
    email: str | None = None
    role: str | None = Field(None, description="editor (default) or viewer")


class FilePasteRequest(CamelModel):
    """Request body for pasting code into a project."""

    file_name: str | None = None
    file_path: str | None = None
    file_type: str | None = None
    content: str | None = None
    uploaded_by: str | None = None
    last_modified_by: str | None = None
    metadata: dict[str, Any] | None = None


class FileUpdateRequest(CamelModel):
    """Request body for replacing a file's content."""

    content: str | None = None
    last_modified_by: str | None = None


class CompileRequest(CamelModel):
    """Request body for compiling a project."""

    compiled_by: str | None = None
