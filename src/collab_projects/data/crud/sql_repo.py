"""SQLAlchemy-backed project storage."""

from __future__ import annotations

import json
from datetime import UTC, datetime

from sqlalchemy import desc, func, or_
from sqlalchemy.orm import Session, selectinload

from collab_projects.constants.project_constants import CollaboratorRole, ProjectStatus
from collab_projects.data.db import get_session
from collab_projects.data.models import (
    ProjectCollaboratorModel,
    ProjectFileModel,
    ProjectModel,
)
from collab_projects.models.project import (
    Collaborator,
    CompilationState,
    Project,
    ProjectFile,
    ProjectSettings,
)


def _as_utc(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back out.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _collaborator_from_model(model: ProjectCollaboratorModel) -> Collaborator:
    return Collaborator(
        user_id=model.user_id,
        username=model.username,
        email=model.email,
        role=CollaboratorRole(model.role),
        joined_at=_as_utc(model.joined_at),
    )


def _project_from_model(model: ProjectModel) -> Project:
    return Project(
        project_id=model.project_id,
        name=model.name,
        description=model.description,
        room_id=model.room_id,
        created_by=model.created_by,
        project_type=model.project_type,
        collaborators=[_collaborator_from_model(c) for c in model.collaborators],
        settings=ProjectSettings.from_dict(json.loads(model.settings_json)),
        compilation=CompilationState.from_dict(json.loads(model.compilation_json)),
        status=ProjectStatus(model.status),
        created_at=_as_utc(model.created_at),
        updated_at=_as_utc(model.updated_at),
    )


def _file_from_model(model: ProjectFileModel) -> ProjectFile:
    return ProjectFile(
        file_id=model.file_id,
        project_id=model.project_id,
        file_name=model.file_name,
        file_path=model.file_path,
        file_type=model.file_type,
        content=model.content,
        uploaded_by=model.uploaded_by,
        last_modified_by=model.last_modified_by,
        metadata=json.loads(model.metadata_json or "{}"),
        created_at=_as_utc(model.created_at),
        updated_at=_as_utc(model.updated_at),
    )


def _apply_project(model: ProjectModel, project: Project) -> None:
    model.name = project.name
    model.description = project.description
    model.room_id = project.room_id
    model.created_by = project.created_by
    model.project_type = project.project_type
    model.settings_json = json.dumps(project.settings.to_dict())
    model.compilation_json = json.dumps(project.compilation.to_dict())
    model.status = str(project.status)
    model.created_at = project.created_at
    model.updated_at = project.updated_at


def _sync_collaborators(model: ProjectModel, collaborators: list[Collaborator]) -> None:
    """Update collaborator rows in place so the unique constraint never trips."""
    wanted = {c.user_id for c in collaborators}
    for row in list(model.collaborators):
        if row.user_id not in wanted:
            model.collaborators.remove(row)

    existing = {row.user_id: row for row in model.collaborators}
    for collaborator in collaborators:
        row = existing.get(collaborator.user_id)
        if row is None:
            model.collaborators.append(
                ProjectCollaboratorModel(
                    user_id=collaborator.user_id,
                    username=collaborator.username,
                    email=collaborator.email,
                    role=str(collaborator.role),
                    joined_at=collaborator.joined_at,
                )
            )
            continue
        row.username = collaborator.username
        row.email = collaborator.email
        row.role = str(collaborator.role)


def _apply_file(model: ProjectFileModel, project_file: ProjectFile) -> None:
    model.file_name = project_file.file_name
    model.file_path = project_file.file_path
    model.file_type = project_file.file_type
    model.content = project_file.content
    model.uploaded_by = project_file.uploaded_by
    model.last_modified_by = project_file.last_modified_by
    model.metadata_json = json.dumps(project_file.metadata)
    model.created_at = project_file.created_at
    model.updated_at = project_file.updated_at


def _get_project_model(session: Session, project_id: str) -> ProjectModel | None:
    return (
        session.query(ProjectModel)
        .options(selectinload(ProjectModel.collaborators))
        .filter(ProjectModel.project_id == project_id)
        .first()
    )


class SqlProjectRepository:
    """``ProjectRepository`` implementation using the shared SQLAlchemy session."""

    def add_project(self, project: Project) -> Project:
        with get_session() as session:
            model = ProjectModel(project_id=project.project_id)
            _apply_project(model, project)
            _sync_collaborators(model, project.collaborators)
            session.add(model)
            session.flush()
            return _project_from_model(model)

    def get_project(self, project_id: str) -> Project | None:
        with get_session() as session:
            model = _get_project_model(session, project_id)
            return _project_from_model(model) if model is not None else None

    def save_project(self, project: Project) -> Project:
        with get_session() as session:
            model = _get_project_model(session, project.project_id)
            if model is None:
                raise KeyError(project.project_id)
            _apply_project(model, project)
            _sync_collaborators(model, project.collaborators)
            session.flush()
            return _project_from_model(model)

    def find_projects(
        self,
        *,
        room_id: str | None = None,
        status: ProjectStatus | None = None,
        collaborator_id: str | None = None,
        text: str | None = None,
        limit: int | None = None,
    ) -> list[Project]:
        with get_session() as session:
            query = session.query(ProjectModel).options(selectinload(ProjectModel.collaborators))
            if room_id is not None:
                query = query.filter(ProjectModel.room_id == room_id)
            if status is not None:
                query = query.filter(ProjectModel.status == str(status))
            if collaborator_id is not None:
                query = query.filter(
                    ProjectModel.collaborators.any(
                        ProjectCollaboratorModel.user_id == collaborator_id
                    )
                )
            if text is not None:
                needle = text.lower()
                query = query.filter(
                    or_(
                        func.lower(ProjectModel.name).contains(needle, autoescape=True),
                        func.lower(ProjectModel.description).contains(needle, autoescape=True),
                    )
                )
            query = query.order_by(desc(ProjectModel.updated_at), desc(ProjectModel.id))
            if limit is not None:
                query = query.limit(limit)
            return [_project_from_model(model) for model in query.all()]

    def add_file(self, project_file: ProjectFile) -> ProjectFile:
        with get_session() as session:
            model = ProjectFileModel(
                file_id=project_file.file_id,
                project_id=project_file.project_id,
            )
            _apply_file(model, project_file)
            session.add(model)
            session.flush()
            return _file_from_model(model)

    def get_file(self, project_id: str, file_id: str) -> ProjectFile | None:
        with get_session() as session:
            model = (
                session.query(ProjectFileModel)
                .filter(
                    ProjectFileModel.project_id == project_id,
                    ProjectFileModel.file_id == file_id,
                )
                .first()
            )
            return _file_from_model(model) if model is not None else None

    def find_file_by_name(self, project_id: str, file_name: str) -> ProjectFile | None:
        with get_session() as session:
            model = (
                session.query(ProjectFileModel)
                .filter(
                    ProjectFileModel.project_id == project_id,
                    ProjectFileModel.file_name == file_name,
                )
                .order_by(ProjectFileModel.id)
                .first()
            )
            return _file_from_model(model) if model is not None else None

    def list_files(self, project_id: str) -> list[ProjectFile]:
        with get_session() as session:
            models = (
                session.query(ProjectFileModel)
                .filter(ProjectFileModel.project_id == project_id)
                .order_by(ProjectFileModel.id)
                .all()
            )
            return [_file_from_model(model) for model in models]

    def save_file(self, project_file: ProjectFile) -> ProjectFile:
        with get_session() as session:
            model = (
                session.query(ProjectFileModel)
                .filter(ProjectFileModel.file_id == project_file.file_id)
                .first()
            )
            if model is None:
                raise KeyError(project_file.file_id)
            _apply_file(model, project_file)
            session.flush()
            return _file_from_model(model)
