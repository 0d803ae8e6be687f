"""Route handlers for the API."""

from collab_projects.api.routes import health, projects

__all__ = ["health", "projects"]
