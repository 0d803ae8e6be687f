"""Services"""

from collab_projects.services.compiler import compile_files, render_preview_document
from collab_projects.services.membership import MembershipDecision, MembershipService
from collab_projects.services.projects import ProjectDetail, ProjectService, RoomMember

__all__ = [
    "compile_files",
    "render_preview_document",
    "MembershipDecision",
    "MembershipService",
    "ProjectDetail",
    "ProjectService",
    "RoomMember",
]
