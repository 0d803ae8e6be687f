"""ORM models package for database tables.

This package provides SQLAlchemy ORM models representing database tables:
- ProjectModel: Projects owned by chat rooms
- ProjectCollaboratorModel: Users holding a role on a project
- ProjectFileModel: Source files stored in a project

All models inherit from the shared Base declarative class defined in data.db.
"""

from collab_projects.data.db import Base
from collab_projects.data.models.project import ProjectModel
from collab_projects.data.models.project_collaborator import ProjectCollaboratorModel
from collab_projects.data.models.project_file import ProjectFileModel

__all__ = ["Base", "ProjectCollaboratorModel", "ProjectFileModel", "ProjectModel"]
