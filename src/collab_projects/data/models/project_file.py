"""ORM model for source files stored in a project."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from collab_projects.data.db import Base

if TYPE_CHECKING:
    from collab_projects.data.models.project import ProjectModel


class ProjectFileModel(Base):
    """Persisted project file.

    Attributes:
        id: Auto-incrementing primary key, also the registry order of files.
        file_id: Public identifier used by the API.
        metadata_json: JSON object with size, encoding and mimeType.
    """

    __tablename__ = "project_files"
    __table_args__ = (
        Index("ix_project_files_project_name", "project_id", "file_name"),
        Index("ix_project_files_project_type", "project_id", "file_type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    file_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    project_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("projects.project_id", ondelete="CASCADE"),
        nullable=False,
    )
    file_name: Mapped[str] = mapped_column(String, nullable=False)
    file_path: Mapped[str] = mapped_column(String, nullable=False)
    file_type: Mapped[str] = mapped_column(String(16), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    uploaded_by: Mapped[str] = mapped_column(String, nullable=False)
    last_modified_by: Mapped[str] = mapped_column(String, nullable=False)
    metadata_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )

    project: Mapped[ProjectModel] = relationship("ProjectModel", back_populates="files")
