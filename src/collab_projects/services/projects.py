"""Project service for managing room projects, their files and collaborators.

This service implements the project registry on top of a ``ProjectRepository``.
Every read-modify-write sequence (membership check plus file write, compile
plus state update, collaborator changes) runs under a single lock so
concurrent requests within one process cannot interleave.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from collab_projects.constants.project_constants import (
    DEFAULT_ENCODING,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_PROJECT_TYPE,
    CollaboratorRole,
    CompilationStatus,
    ProjectStatus,
)
from collab_projects.data.crud.base import ProjectRepository
from collab_projects.models.errors import (
    CompilationError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from collab_projects.models.project import (
    CompilationResult,
    CompilationState,
    Project,
    ProjectFile,
    ProjectSettings,
    ProjectStats,
    utc_now,
)
from collab_projects.services.compiler import compile_files
from collab_projects.services.file_types import (
    mime_type_for,
    normalize_file_type,
    validate_upload,
)
from collab_projects.services.membership import MembershipService, new_collaborator

logger = logging.getLogger(__name__)

__all__ = [
    "ProjectDetail",
    "ProjectService",
    "RoomMember",
    "generate_id",
]

DEFAULT_SEARCH_LIMIT = 20

# Settings keys accepted by update_project.
_SETTINGS_FIELDS = (
    "allow_file_upload",
    "allow_file_edit",
    "allow_compilation",
    "max_file_size",
    "allowed_file_types",
)


def generate_id() -> str:
    """Return a new unique identifier for projects and files."""
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class RoomMember:
    """A room member passed along when a project is created."""

    username: str | None = None
    email: str | None = None

    @property
    def identity(self) -> str | None:
        return self.username or self.email


@dataclass(slots=True)
class ProjectDetail:
    """A project together with its files ordered by file name."""

    project: Project
    files: list[ProjectFile] = field(default_factory=list)


def _missing(values: Mapping[str, Any]) -> list[str]:
    return [name for name, value in values.items() if value is None or value == ""]


def _require(values: Mapping[str, Any]) -> None:
    """Raise ValidationError listing every missing or empty field."""
    missing = _missing(values)
    if missing:
        raise ValidationError.missing_fields(missing)


class ProjectService:
    """Registry operations for projects and project files."""

    def __init__(
        self,
        repository: ProjectRepository,
        membership: MembershipService | None = None,
        *,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ) -> None:
        self.repository = repository
        self.membership = membership or MembershipService()
        self.max_file_size = max_file_size
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def create_project(
        self,
        name: str | None,
        room_id: str | None,
        created_by: str | None,
        project_type: str | None = None,
        room_members: Iterable[RoomMember] = (),
        description: str | None = None,
    ) -> Project:
        """Create a project with the creator as owner and room members as editors.

        Raises:
            ValidationError: If name, roomId or createdBy is missing.
        """
        _require({"name": name, "roomId": room_id, "createdBy": created_by})

        owner = new_collaborator(created_by, CollaboratorRole.OWNER)
        collaborators = [owner]
        seen = {created_by}
        for member in room_members:
            identity = member.identity
            if not identity or identity in seen:
                continue
            seen.add(identity)
            collaborators.append(
                new_collaborator(
                    identity,
                    CollaboratorRole.EDITOR,
                    username=identity,
                    email=member.email or member.username,
                )
            )

        now = utc_now()
        for collaborator in collaborators:
            collaborator.joined_at = now

        project = Project(
            project_id=generate_id(),
            name=name,
            description=description or "",
            room_id=room_id,
            created_by=created_by,
            project_type=project_type or DEFAULT_PROJECT_TYPE,
            collaborators=collaborators,
            settings=ProjectSettings(max_file_size=self.max_file_size),
            compilation=CompilationState(),
            status=ProjectStatus.ACTIVE,
            created_at=now,
            updated_at=now,
        )
        saved = self.repository.add_project(project)
        logger.info(
            "Created project %s in room %s with %d collaborators",
            saved.project_id,
            room_id,
            len(saved.collaborators),
        )
        return saved

    def get_project(self, project_id: str) -> Project:
        """Return a project or raise NotFoundError."""
        project = self.repository.get_project(project_id)
        if project is None:
            raise NotFoundError("Project not found")
        return project

    def list_projects_for_room(
        self, room_id: str, status: ProjectStatus | str = ProjectStatus.ACTIVE
    ) -> list[Project]:
        """List a room's projects with the given status, most recently updated first."""
        return self.repository.find_projects(room_id=room_id, status=self._parse_status(status))

    def list_projects_for_collaborator(
        self, user_id: str, status: ProjectStatus | str | None = None
    ) -> list[Project]:
        """List projects where ``user_id`` is a collaborator."""
        parsed = self._parse_status(status) if status else None
        return self.repository.find_projects(collaborator_id=user_id, status=parsed)

    def search_projects(self, text: str | None, limit: int = DEFAULT_SEARCH_LIMIT) -> list[Project]:
        """Find projects whose name or description contains ``text``."""
        if not text or not text.strip():
            raise ValidationError.missing_fields(["q"])
        if limit <= 0:
            raise ValidationError("limit must be positive")
        return self.repository.find_projects(text=text.strip(), limit=limit)

    def get_project_with_files(self, project_id: str) -> ProjectDetail:
        """Return a project with its files sorted by file name."""
        project = self.get_project(project_id)
        files = sorted(
            self.repository.list_files(project_id),
            key=lambda f: (f.file_name.lower(), f.file_name),
        )
        return ProjectDetail(project=project, files=files)

    def update_project(
        self,
        project_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        settings: Mapping[str, Any] | None = None,
    ) -> Project:
        """Apply a partial update to a project's name, description or settings."""
        if name is not None and not name.strip():
            raise ValidationError("name cannot be empty")

        with self._lock:
            project = self.get_project(project_id)
            if name is not None:
                project.name = name
            if description is not None:
                project.description = description
            if settings:
                unknown = sorted(set(settings) - set(_SETTINGS_FIELDS))
                if unknown:
                    raise ValidationError(f"Unknown settings: {', '.join(unknown)}")
                merged = project.settings.to_dict()
                merged.update(settings)
                if int(merged["max_file_size"]) <= 0:
                    raise ValidationError("maxFileSize must be positive")
                project.settings = ProjectSettings.from_dict(merged)
            project.updated_at = utc_now()
            return self.repository.save_project(project)

    def set_status(self, project_id: str, status: ProjectStatus | str | None) -> Project:
        """Move a project to a new lifecycle status.

        Raises:
            ValidationError: For an unknown status or when leaving ``deleted``.
        """
        _require({"status": status})
        new_status = self._parse_status(status)

        with self._lock:
            project = self.get_project(project_id)
            if project.status is ProjectStatus.DELETED and new_status is not ProjectStatus.DELETED:
                raise ValidationError("Deleted projects cannot be restored")
            project.status = new_status
            project.updated_at = utc_now()
            saved = self.repository.save_project(project)
        logger.info("Project %s status set to %s", project_id, new_status)
        return saved

    def project_stats(self, project_id: str) -> ProjectStats:
        project = self.get_project(project_id)
        return ProjectStats(
            project_id=project.project_id,
            name=project.name,
            collaborator_count=len(project.collaborators),
            file_count=len(self.repository.list_files(project_id)),
            compilation_status=project.compilation.status,
            last_compiled=project.compilation.last_compiled,
            created_at=project.created_at,
            updated_at=project.updated_at,
        )

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    def add_collaborator(
        self,
        project_id: str,
        user_id: str | None,
        *,
        username: str | None = None,
        email: str | None = None,
        role: CollaboratorRole | str | None = None,
    ) -> Project:
        """Explicitly grant a user a role on a project."""
        _require({"userId": user_id})
        try:
            parsed_role = CollaboratorRole(role or CollaboratorRole.EDITOR)
        except ValueError as exc:
            raise ValidationError(f"Invalid role '{role}'") from exc
        if parsed_role is CollaboratorRole.OWNER:
            raise ValidationError("A project has exactly one owner")

        with self._lock:
            project = self.get_project(project_id)
            if project.find_collaborator(user_id) is not None:
                raise ValidationError(f"User '{user_id}' is already a collaborator")
            project.collaborators.append(
                new_collaborator(user_id, parsed_role, username=username, email=email)
            )
            project.updated_at = utc_now()
            return self.repository.save_project(project)

    def remove_collaborator(self, project_id: str, user_id: str) -> Project:
        """Remove a collaborator; the owner cannot be removed."""
        with self._lock:
            project = self.get_project(project_id)
            collaborator = project.find_collaborator(user_id)
            if collaborator is None:
                raise NotFoundError("Collaborator not found")
            if collaborator.role is CollaboratorRole.OWNER:
                raise ValidationError("The project owner cannot be removed")
            project.collaborators = [c for c in project.collaborators if c is not collaborator]
            project.updated_at = utc_now()
            return self.repository.save_project(project)

    def _authorize_write(self, project: Project, actor: str) -> Project:
        """Apply the membership decision for ``actor``; returns the current project."""
        decision = self.membership.authorize_file_write(project, actor)
        if not decision.allowed:
            logger.warning(
                "Denied file write on project %s for %s: %s",
                project.project_id,
                actor,
                decision.reason,
            )
            raise PermissionDeniedError(decision.reason)
        if decision.enroll is None:
            return project

        project.collaborators.append(decision.enroll)
        project.updated_at = utc_now()
        logger.info(
            "Enrolled %s as %s on project %s",
            actor,
            decision.enroll.role,
            project.project_id,
        )
        return self.repository.save_project(project)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def paste_file(
        self,
        project_id: str,
        *,
        file_name: str | None,
        content: str | None,
        uploaded_by: str | None,
        file_type: str | None = None,
        file_path: str | None = None,
        last_modified_by: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> ProjectFile:
        """Store pasted code as a new project file."""
        _require({"fileName": file_name, "content": content, "uploadedBy": uploaded_by})
        resolved_type = normalize_file_type(file_type, file_name)

        with self._lock:
            project = self.get_project(project_id)
            if not project.settings.allow_file_upload:
                raise PermissionDeniedError("File uploads are disabled for this project")
            self._authorize_write(project, uploaded_by)

            now = utc_now()
            project_file = ProjectFile(
                file_id=generate_id(),
                project_id=project_id,
                file_name=file_name,
                file_path=file_path or f"/{file_name}",
                file_type=str(resolved_type),
                content=content,
                uploaded_by=uploaded_by,
                last_modified_by=last_modified_by or uploaded_by,
                metadata=dict(metadata)
                if metadata
                else {
                    "size": len(content),
                    "encoding": DEFAULT_ENCODING,
                    "mimeType": mime_type_for(resolved_type),
                },
                created_at=now,
                updated_at=now,
            )
            return self.repository.add_file(project_file)

    def upload_size_limit(self, project_id: str) -> int:
        """Return the largest upload, in bytes, the project accepts."""
        return self.get_project(project_id).settings.max_file_size

    def upload_file(
        self,
        project_id: str,
        *,
        filename: str | None,
        data: bytes,
        content_type: str | None,
        uploaded_by: str | None,
    ) -> ProjectFile:
        """Store an uploaded file after passing it through the upload filter.

        Raises:
            ValidationError: If no file or uploader is given, or the file is too large.
            UnsupportedFileTypeError: If the file type is not allowed.
        """
        if not filename:
            raise ValidationError("No file uploaded")
        _require({"uploadedBy": uploaded_by})

        with self._lock:
            project = self.get_project(project_id)
            if not project.settings.allow_file_upload:
                raise PermissionDeniedError("File uploads are disabled for this project")
            file_type = validate_upload(
                filename=filename,
                content_type=content_type,
                size=len(data),
                allowed_file_types=project.settings.allowed_file_types,
                max_file_size=project.settings.max_file_size,
            )
            self._authorize_write(project, uploaded_by)

            now = utc_now()
            project_file = ProjectFile(
                file_id=generate_id(),
                project_id=project_id,
                file_name=filename,
                file_path=f"/{filename}",
                file_type=str(file_type),
                content=data.decode("utf-8", errors="replace"),
                uploaded_by=uploaded_by,
                last_modified_by=uploaded_by,
                metadata={
                    "size": len(data),
                    "encoding": DEFAULT_ENCODING,
                    "mimeType": content_type or mime_type_for(file_type),
                },
                created_at=now,
                updated_at=now,
            )
            saved = self.repository.add_file(project_file)
        logger.info("Uploaded %s (%d bytes) to project %s", filename, len(data), project_id)
        return saved

    def update_file(
        self,
        project_id: str,
        file_id: str,
        *,
        content: str | None,
        last_modified_by: str | None,
    ) -> ProjectFile:
        """Replace a file's content.

        The file is looked up before any membership change, so an unknown
        file leaves both the file set and the collaborator set untouched.
        """
        _require({"content": content, "lastModifiedBy": last_modified_by})

        with self._lock:
            project = self.get_project(project_id)
            project_file = self.repository.get_file(project_id, file_id)
            if project_file is None:
                raise NotFoundError("File not found")
            if not project.settings.allow_file_edit:
                raise PermissionDeniedError("File editing is disabled for this project")
            self._authorize_write(project, last_modified_by)

            project_file.content = content
            project_file.last_modified_by = last_modified_by
            project_file.updated_at = utc_now()
            project_file.metadata = {**project_file.metadata, "size": len(content)}
            return self.repository.save_file(project_file)

    def get_file_by_name(self, project_id: str, file_name: str) -> ProjectFile:
        """Return the first file in a project with the given name."""
        self.get_project(project_id)
        project_file = self.repository.find_file_by_name(project_id, file_name)
        if project_file is None:
            raise NotFoundError("File not found")
        return project_file

    # ------------------------------------------------------------------
    # Compilation
    # ------------------------------------------------------------------

    def compile(self, project_id: str, compiled_by: str | None = None) -> CompilationResult:
        """Compile a project and record the outcome on the project.

        A project without an HTML file yields an unsuccessful result rather
        than an exception.
        """
        with self._lock:
            project = self.get_project(project_id)
            if not project.settings.allow_compilation:
                raise PermissionDeniedError("Compilation is disabled for this project")

            files = self.repository.list_files(project_id)
            result = compile_files(project.project_id, project.name, files)

            now = utc_now()
            project.compilation = CompilationState(
                status=CompilationStatus.SUCCESS if result.success else CompilationStatus.ERROR,
                last_compiled=now,
                build_output=result.output,
                error_log=result.error,
                preview_url=result.preview_url,
            )
            project.updated_at = now
            self.repository.save_project(project)

        logger.info(
            "Compiled project %s for %s: %s",
            project_id,
            compiled_by or "anonymous",
            "success" if result.success else result.error,
        )
        return result

    def render_preview(self, project_id: str) -> str:
        """Compile a project on the fly and return the HTML document.

        Raises:
            NotFoundError: If the project is unknown or has no files.
            CompilationError: If the project cannot be compiled.
        """
        project = self.get_project(project_id)
        files = self.repository.list_files(project_id)
        if not files:
            raise NotFoundError("No files found in project")
        result = compile_files(project.project_id, project.name, files)
        if not result.success:
            raise CompilationError(f"Compilation Error: {result.error}")
        return result.output

    @staticmethod
    def _parse_status(status: ProjectStatus | str | None) -> ProjectStatus:
        try:
            return ProjectStatus(status)
        except ValueError as exc:
            allowed = ", ".join(s.value for s in ProjectStatus)
            raise ValidationError(f"Invalid status '{status}'. Expected one of: {allowed}") from exc
