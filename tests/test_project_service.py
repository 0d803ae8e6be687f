"""Tests for ProjectService on the in-memory repository."""

from __future__ import annotations

import threading

import pytest

from collab_projects.constants.project_constants import (
    CollaboratorRole,
    CompilationStatus,
    MembershipPolicy,
    ProjectStatus,
)
from collab_projects.data.crud import InMemoryProjectRepository
from collab_projects.models.errors import (
    CompilationError,
    NotFoundError,
    PermissionDeniedError,
    UnsupportedFileTypeError,
    ValidationError,
)
from collab_projects.services.membership import MembershipService
from collab_projects.services.projects import ProjectService, RoomMember


def _project(service: ProjectService, name: str = "Demo", room_id: str = "room-1"):
    return service.create_project(name=name, room_id=room_id, created_by="alice")


class TestCreateProject:
    def test_creator_is_owner_and_members_are_editors(self, service: ProjectService) -> None:
        project = service.create_project(
            name="Demo",
            room_id="room-1",
            created_by="alice",
            room_members=[
                RoomMember("alice", "alice@example.com"),
                RoomMember("bob", "bob@example.com"),
                RoomMember("bob", "bob@example.com"),
                RoomMember(None, None),
            ],
        )

        assert [(c.user_id, c.role) for c in project.collaborators] == [
            ("alice", CollaboratorRole.OWNER),
            ("bob", CollaboratorRole.EDITOR),
        ]
        bob = project.find_collaborator("bob")
        assert bob is not None
        assert bob.email == "bob@example.com"

    def test_defaults(self, service: ProjectService) -> None:
        project = _project(service)

        assert project.project_type == "react"
        assert project.description == ""
        assert project.status is ProjectStatus.ACTIVE
        assert project.compilation.status is CompilationStatus.IDLE
        assert project.settings.allow_file_upload is True
        assert project.created_at == project.updated_at

    def test_missing_fields_lists_every_field(self, service: ProjectService) -> None:
        with pytest.raises(ValidationError) as exc_info:
            service.create_project(name="", room_id=None, created_by=None)

        assert exc_info.value.message == "Missing required fields: name, roomId, createdBy"
        assert exc_info.value.status_code == 400

    def test_max_file_size_comes_from_service(self) -> None:
        service = ProjectService(InMemoryProjectRepository(), max_file_size=1024)
        assert _project(service).settings.max_file_size == 1024


class TestListing:
    def test_room_listing_orders_by_last_update(self, service: ProjectService) -> None:
        older = _project(service, "Older")
        newer = _project(service, "Newer")
        _project(service, "Other room", room_id="room-2")

        assert [p.name for p in service.list_projects_for_room("room-1")] == ["Newer", "Older"]

        service.update_project(older.project_id, description="touched")

        ids = [p.project_id for p in service.list_projects_for_room("room-1")]
        assert ids == [older.project_id, newer.project_id]

    def test_room_listing_filters_by_status(self, service: ProjectService) -> None:
        kept = _project(service, "Kept")
        archived = _project(service, "Archived")
        service.set_status(archived.project_id, "archived")

        assert [p.project_id for p in service.list_projects_for_room("room-1")] == [
            kept.project_id
        ]
        assert [
            p.project_id for p in service.list_projects_for_room("room-1", ProjectStatus.ARCHIVED)
        ] == [archived.project_id]

    def test_invalid_status_is_rejected(self, service: ProjectService) -> None:
        with pytest.raises(ValidationError):
            service.list_projects_for_room("room-1", "gone")

    def test_collaborator_listing(self, service: ProjectService) -> None:
        first = _project(service, "First")
        _project(service, "Second")
        service.add_collaborator(first.project_id, "bob")

        assert [p.project_id for p in service.list_projects_for_collaborator("bob")] == [
            first.project_id
        ]
        assert len(service.list_projects_for_collaborator("alice")) == 2

    def test_search_matches_name_and_description(self, service: ProjectService) -> None:
        weather = _project(service, "Weather Widget")
        todo = _project(service, "Todo")
        service.update_project(todo.project_id, description="A tiny WEATHER-free list")

        found = {p.project_id for p in service.search_projects("weather")}
        assert found == {weather.project_id, todo.project_id}
        assert len(service.search_projects("weather", limit=1)) == 1

    def test_search_requires_text(self, service: ProjectService) -> None:
        with pytest.raises(ValidationError):
            service.search_projects("   ")


class TestUpdatesAndStatus:
    def test_update_settings_merges(self, service: ProjectService) -> None:
        project = _project(service)

        updated = service.update_project(
            project.project_id, settings={"allow_compilation": False, "max_file_size": 10}
        )

        assert updated.settings.allow_compilation is False
        assert updated.settings.max_file_size == 10
        assert updated.settings.allow_file_edit is True

    def test_update_rejects_unknown_settings(self, service: ProjectService) -> None:
        project = _project(service)
        with pytest.raises(ValidationError):
            service.update_project(project.project_id, settings={"theme": "dark"})

    def test_update_rejects_blank_name(self, service: ProjectService) -> None:
        project = _project(service)
        with pytest.raises(ValidationError):
            service.update_project(project.project_id, name="  ")

    def test_deleted_is_terminal(self, service: ProjectService) -> None:
        project = _project(service)
        service.set_status(project.project_id, ProjectStatus.DELETED)

        with pytest.raises(ValidationError):
            service.set_status(project.project_id, ProjectStatus.ACTIVE)

    def test_archived_can_be_restored(self, service: ProjectService) -> None:
        project = _project(service)
        service.set_status(project.project_id, "archived")
        assert service.set_status(project.project_id, "active").status is ProjectStatus.ACTIVE

    def test_unknown_project(self, service: ProjectService) -> None:
        with pytest.raises(NotFoundError):
            service.get_project("nope")
        with pytest.raises(NotFoundError):
            service.set_status("nope", "archived")


class TestCollaborators:
    def test_add_and_remove(self, service: ProjectService) -> None:
        project = _project(service)

        added = service.add_collaborator(project.project_id, "vic", role="viewer")
        vic = added.find_collaborator("vic")
        assert vic is not None
        assert vic.role is CollaboratorRole.VIEWER

        removed = service.remove_collaborator(project.project_id, "vic")
        assert removed.find_collaborator("vic") is None

    def test_add_rejects_duplicate_owner_and_bad_role(self, service: ProjectService) -> None:
        project = _project(service)

        with pytest.raises(ValidationError):
            service.add_collaborator(project.project_id, "alice")
        with pytest.raises(ValidationError):
            service.add_collaborator(project.project_id, "bob", role="owner")
        with pytest.raises(ValidationError):
            service.add_collaborator(project.project_id, "bob", role="admin")

    def test_owner_cannot_be_removed(self, service: ProjectService) -> None:
        project = _project(service)
        with pytest.raises(ValidationError):
            service.remove_collaborator(project.project_id, "alice")

    def test_remove_unknown_collaborator(self, service: ProjectService) -> None:
        project = _project(service)
        with pytest.raises(NotFoundError):
            service.remove_collaborator(project.project_id, "ghost")


class TestFiles:
    def test_paste_derives_type_path_and_metadata(self, service: ProjectService) -> None:
        project = _project(service)

        stored = service.paste_file(
            project.project_id, file_name="App.jsx", content="<App />", uploaded_by="alice"
        )

        assert stored.file_type == "jsx"
        assert stored.file_path == "/App.jsx"
        assert stored.last_modified_by == "alice"
        assert stored.metadata == {
            "size": 7,
            "encoding": "utf8",
            "mimeType": "application/javascript",
        }

    def test_paste_keeps_explicit_values(self, service: ProjectService) -> None:
        project = _project(service)

        stored = service.paste_file(
            project.project_id,
            file_name="main",
            content="x",
            uploaded_by="alice",
            file_type="TypeScript",
            file_path="/src/main",
            last_modified_by="bob",
            metadata={"size": 1, "encoding": "ascii", "mimeType": "text/x"},
        )

        assert stored.file_type == "typescript"
        assert stored.file_path == "/src/main"
        assert stored.last_modified_by == "bob"
        assert stored.metadata["encoding"] == "ascii"

    def test_paste_rejects_unknown_file_type(self, service: ProjectService) -> None:
        project = _project(service)
        with pytest.raises(ValidationError):
            service.paste_file(
                project.project_id,
                file_name="a.py",
                content="x",
                uploaded_by="alice",
                file_type="python",
            )

    def test_writer_enrolled_once(self, service: ProjectService) -> None:
        project = _project(service)

        for index in range(3):
            service.paste_file(
                project.project_id,
                file_name=f"f{index}.js",
                content="x",
                uploaded_by="dave",
            )

        collaborators = service.get_project(project.project_id).collaborators
        assert [c.user_id for c in collaborators] == ["alice", "dave"]
        assert collaborators[1].role is CollaboratorRole.EDITOR

    def test_uploader_enrolled_once(self, service: ProjectService) -> None:
        project = _project(service)

        for name in ("a.css", "b.css"):
            service.upload_file(
                project.project_id,
                filename=name,
                data=b"p{}",
                content_type="text/css",
                uploaded_by="erin",
            )

        collaborators = service.get_project(project.project_id).collaborators
        assert [c.user_id for c in collaborators] == ["alice", "erin"]
        assert collaborators[1].role is CollaboratorRole.EDITOR

    def test_upload_size_limit(self, service: ProjectService) -> None:
        project = _project(service)
        service.update_project(project.project_id, settings={"max_file_size": 64})

        assert service.upload_size_limit(project.project_id) == 64
        with pytest.raises(NotFoundError):
            service.upload_size_limit("missing")

    def test_upload_rejects_disallowed_type(self, service: ProjectService) -> None:
        project = _project(service)
        with pytest.raises(UnsupportedFileTypeError):
            service.upload_file(
                project.project_id,
                filename="photo.png",
                data=b"\x89PNG",
                content_type="image/png",
                uploaded_by="alice",
            )
        assert service.get_project_with_files(project.project_id).files == []

    def test_upload_accepts_allowed_mime_with_other_extension(
        self, service: ProjectService
    ) -> None:
        project = _project(service)

        stored = service.upload_file(
            project.project_id,
            filename="notes.log",
            data=b"hello",
            content_type="text/plain",
            uploaded_by="alice",
        )

        assert stored.file_type == "other"
        assert stored.content == "hello"

    def test_upload_requires_file(self, service: ProjectService) -> None:
        project = _project(service)
        with pytest.raises(ValidationError, match="No file uploaded"):
            service.upload_file(
                project.project_id,
                filename=None,
                data=b"",
                content_type=None,
                uploaded_by="alice",
            )

    def test_uploads_disabled(self, service: ProjectService) -> None:
        project = _project(service)
        service.update_project(project.project_id, settings={"allow_file_upload": False})
        with pytest.raises(PermissionDeniedError):
            service.paste_file(
                project.project_id, file_name="a.js", content="x", uploaded_by="alice"
            )

    def test_update_file(self, service: ProjectService) -> None:
        project = _project(service)
        stored = service.paste_file(
            project.project_id, file_name="a.js", content="old", uploaded_by="alice"
        )

        updated = service.update_file(
            project.project_id, stored.file_id, content="newer", last_modified_by="erin"
        )

        assert updated.content == "newer"
        assert updated.last_modified_by == "erin"
        assert updated.metadata["size"] == 5
        assert service.get_project(project.project_id).find_collaborator("erin") is not None

    def test_update_unknown_file_changes_nothing(self, service: ProjectService) -> None:
        project = _project(service)
        service.paste_file(project.project_id, file_name="a.js", content="x", uploaded_by="alice")
        before = service.get_project_with_files(project.project_id)

        with pytest.raises(NotFoundError):
            service.update_file(
                project.project_id, "missing", content="y", last_modified_by="mallory"
            )

        after = service.get_project_with_files(project.project_id)
        assert after.files == before.files
        assert after.project.collaborators == before.project.collaborators

    def test_files_sorted_by_name(self, service: ProjectService) -> None:
        project = _project(service)
        for name in ("zeta.css", "Alpha.js", "index.html"):
            service.paste_file(
                project.project_id, file_name=name, content="x", uploaded_by="alice"
            )

        names = [f.file_name for f in service.get_project_with_files(project.project_id).files]
        assert names == ["Alpha.js", "index.html", "zeta.css"]

    def test_get_file_by_name(self, service: ProjectService) -> None:
        project = _project(service)
        service.paste_file(
            project.project_id, file_name="style.css", content="a{}", uploaded_by="alice"
        )

        assert service.get_file_by_name(project.project_id, "style.css").content == "a{}"
        with pytest.raises(NotFoundError):
            service.get_file_by_name(project.project_id, "other.css")


class TestStrictMembership:
    @pytest.fixture
    def strict_service(self) -> ProjectService:
        return ProjectService(
            InMemoryProjectRepository(), MembershipService(MembershipPolicy.STRICT)
        )

    def test_stranger_is_denied_without_enrollment(self, strict_service: ProjectService) -> None:
        project = _project(strict_service)

        with pytest.raises(PermissionDeniedError):
            strict_service.paste_file(
                project.project_id, file_name="a.js", content="x", uploaded_by="eve"
            )

        assert strict_service.get_project(project.project_id).find_collaborator("eve") is None

    def test_viewer_is_denied(self, strict_service: ProjectService) -> None:
        project = _project(strict_service)
        strict_service.add_collaborator(project.project_id, "vic", role="viewer")

        with pytest.raises(PermissionDeniedError):
            strict_service.paste_file(
                project.project_id, file_name="a.js", content="x", uploaded_by="vic"
            )


class TestCompile:
    def test_compile_records_success(self, service: ProjectService) -> None:
        project = _project(service, "Shop")
        for name, content in (
            ("index.html", "<main>shop</main>"),
            ("a.css", "h1{}"),
            ("b.css", "p{}"),
            ("app.js", "run()"),
        ):
            service.paste_file(
                project.project_id, file_name=name, content=content, uploaded_by="alice"
            )

        result = service.compile(project.project_id, compiled_by="alice")

        assert result.success is True
        assert "h1{}\n" in result.output
        assert "p{}" in result.output
        assert "run()" in result.output
        assert "<main>shop</main>" in result.output
        stored = service.get_project(project.project_id).compilation
        assert stored.status is CompilationStatus.SUCCESS
        assert stored.build_output == result.output
        assert stored.preview_url == result.preview_url
        assert stored.last_compiled is not None

    def test_compile_without_html(self, service: ProjectService) -> None:
        project = _project(service)
        service.paste_file(
            project.project_id, file_name="a.css", content="a{}", uploaded_by="alice"
        )

        result = service.compile(project.project_id)

        assert result.success is False
        assert result.error == "No HTML file found. Please upload an index.html file."
        stored = service.get_project(project.project_id).compilation
        assert stored.status is CompilationStatus.ERROR
        assert stored.error_log == result.error

    def test_compile_disabled(self, service: ProjectService) -> None:
        project = _project(service)
        service.update_project(project.project_id, settings={"allow_compilation": False})
        with pytest.raises(PermissionDeniedError):
            service.compile(project.project_id)

    def test_render_preview_errors(self, service: ProjectService) -> None:
        project = _project(service)
        with pytest.raises(NotFoundError, match="No files found in project"):
            service.render_preview(project.project_id)

        service.paste_file(project.project_id, file_name="a.js", content="x", uploaded_by="alice")
        with pytest.raises(CompilationError, match="^Compilation Error: No HTML file found"):
            service.render_preview(project.project_id)

    def test_render_preview_does_not_store_state(self, service: ProjectService) -> None:
        project = _project(service)
        service.paste_file(
            project.project_id, file_name="index.html", content="<p/>", uploaded_by="alice"
        )

        assert "<p/>" in service.render_preview(project.project_id)
        assert service.get_project(project.project_id).compilation.status is CompilationStatus.IDLE


def test_concurrent_writers_are_each_enrolled_once(service: ProjectService) -> None:
    project = _project(service)
    writers = [f"user-{i}" for i in range(8)]

    def write(user: str) -> None:
        for index in range(5):
            service.paste_file(
                project.project_id,
                file_name=f"{user}-{index}.js",
                content="x",
                uploaded_by=user,
            )

    threads = [threading.Thread(target=write, args=(user,)) for user in writers]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    detail = service.get_project_with_files(project.project_id)
    ids = [c.user_id for c in detail.project.collaborators]
    assert sorted(ids) == sorted(["alice", *writers])
    assert len(detail.files) == 40
