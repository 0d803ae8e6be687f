"""ORM model for projects owned by chat rooms."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from collab_projects.data.db import Base

if TYPE_CHECKING:
    from collab_projects.data.models.project_collaborator import ProjectCollaboratorModel
    from collab_projects.data.models.project_file import ProjectFileModel


class ProjectModel(Base):
    """Persisted project record.

    Attributes:
        id: Auto-incrementing primary key.
        project_id: Public identifier used by the API.
        room_id: Room that owns the project.
        created_by: Identity of the creator.
        settings_json: JSON object with upload/edit/compile switches.
        compilation_json: JSON object describing the last compile.
        status: One of active, archived, deleted.
    """

    __tablename__ = "projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    room_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    created_by: Mapped[str] = mapped_column(String, nullable=False, index=True)
    project_type: Mapped[str] = mapped_column(String(32), nullable=False, default="react")
    settings_json: Mapped[str] = mapped_column(Text, nullable=False)
    compilation_json: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="active", index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    collaborators: Mapped[list[ProjectCollaboratorModel]] = relationship(
        "ProjectCollaboratorModel",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectCollaboratorModel.id",
    )
    files: Mapped[list[ProjectFileModel]] = relationship(
        "ProjectFileModel",
        back_populates="project",
        cascade="all, delete-orphan",
        order_by="ProjectFileModel.id",
    )
