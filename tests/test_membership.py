from __future__ import annotations

import pytest

from collab_projects.constants.project_constants import CollaboratorRole, MembershipPolicy
from collab_projects.models.project import Project
from collab_projects.services.membership import MembershipService, new_collaborator


@pytest.fixture
def project() -> Project:
    return Project(
        project_id="p1",
        name="Demo",
        room_id="room-1",
        created_by="alice",
        collaborators=[
            new_collaborator("alice", CollaboratorRole.OWNER),
            new_collaborator("bob", CollaboratorRole.EDITOR, email="bob@example.com"),
            new_collaborator("vic", CollaboratorRole.VIEWER),
        ],
    )


def test_new_collaborator_fills_identity_fields() -> None:
    collaborator = new_collaborator("carol", CollaboratorRole.EDITOR)

    assert collaborator.username == "carol"
    assert collaborator.email == "carol"
    assert collaborator.joined_at.tzinfo is not None


@pytest.mark.parametrize("actor", ["alice", "bob", "bob@example.com", "vic"])
def test_auto_enroll_allows_existing_members(project: Project, actor: str) -> None:
    decision = MembershipService().authorize_file_write(project, actor)

    assert decision.allowed is True
    assert decision.enroll is None


def test_auto_enroll_adds_stranger_as_editor(project: Project) -> None:
    decision = MembershipService().authorize_file_write(project, "dave")

    assert decision.allowed is True
    assert decision.enroll is not None
    assert decision.enroll.user_id == "dave"
    assert decision.enroll.role is CollaboratorRole.EDITOR
    # the decision does not touch the project
    assert project.find_collaborator("dave") is None


@pytest.mark.parametrize(
    ("actor", "allowed"),
    [("alice", True), ("bob", True), ("vic", False), ("dave", False)],
)
def test_strict_policy(project: Project, actor: str, allowed: bool) -> None:
    decision = MembershipService(MembershipPolicy.STRICT).authorize_file_write(project, actor)

    assert decision.allowed is allowed
    assert decision.enroll is None
    if not allowed:
        assert decision.reason
