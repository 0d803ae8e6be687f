"""Repository implementations for project storage."""

from collab_projects.data.crud.base import ProjectRepository
from collab_projects.data.crud.memory_repo import InMemoryProjectRepository
from collab_projects.data.crud.sql_repo import SqlProjectRepository

__all__ = ["InMemoryProjectRepository", "ProjectRepository", "SqlProjectRepository"]
