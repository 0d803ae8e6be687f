"""Collaborator membership rules for project file writes.

The service only decides. Callers apply an enrollment returned in the
decision, which keeps the membership change visible at the call site.
"""

from __future__ import annotations

from dataclasses import dataclass

from collab_projects.constants.project_constants import CollaboratorRole, MembershipPolicy
from collab_projects.models.project import Collaborator, Project, utc_now

WRITE_ROLES = frozenset({CollaboratorRole.OWNER, CollaboratorRole.EDITOR})


@dataclass(frozen=True, slots=True)
class MembershipDecision:
    """Outcome of a membership check.

    Attributes:
        allowed: Whether the actor may write to the project.
        enroll: Collaborator to add before the write, if the actor is new.
        reason: Short explanation, used for denials and logging.
    """

    allowed: bool
    enroll: Collaborator | None = None
    reason: str = ""


def new_collaborator(
    user_id: str,
    role: CollaboratorRole,
    *,
    username: str | None = None,
    email: str | None = None,
) -> Collaborator:
    """Build a collaborator entry, filling missing identity fields from ``user_id``."""
    return Collaborator(
        user_id=user_id,
        username=username or user_id,
        email=email or username or user_id,
        role=role,
        joined_at=utc_now(),
    )


class MembershipService:
    """Decides whether an actor may modify a project's files."""

    def __init__(self, policy: MembershipPolicy = MembershipPolicy.AUTO_ENROLL) -> None:
        self.policy = policy

    def authorize_file_write(self, project: Project, actor: str) -> MembershipDecision:
        existing = project.find_collaborator(actor)

        if self.policy is MembershipPolicy.STRICT:
            if existing is None:
                return MembershipDecision(
                    allowed=False,
                    reason="You do not have permission to modify files in this project",
                )
            if existing.role not in WRITE_ROLES:
                return MembershipDecision(
                    allowed=False,
                    reason="Viewers cannot modify project files",
                )
            return MembershipDecision(allowed=True, reason="existing collaborator")

        if existing is not None:
            return MembershipDecision(allowed=True, reason="existing collaborator")

        return MembershipDecision(
            allowed=True,
            enroll=new_collaborator(actor, CollaboratorRole.EDITOR),
            reason="auto-enrolled as editor",
        )
