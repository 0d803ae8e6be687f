from __future__ import annotations

from datetime import UTC, datetime

from collab_projects.models.project import ProjectFile
from collab_projects.services.compiler import (
    MISSING_HTML_ERROR,
    compile_files,
    preview_url_for,
    render_preview_document,
)


def _file(name: str, file_type: str, content: str) -> ProjectFile:
    now = datetime(2024, 1, 1, tzinfo=UTC)
    return ProjectFile(
        file_id=name,
        project_id="p1",
        file_name=name,
        file_path=f"/{name}",
        file_type=file_type,
        content=content,
        uploaded_by="alice",
        last_modified_by="alice",
        metadata={},
        created_at=now,
        updated_at=now,
    )


def test_render_inlines_sources_in_order() -> None:
    document = render_preview_document(
        "<h1>Hi</h1>", ["a{color:red}", "b{color:blue}"], ["one()", "two()"], "Demo"
    )

    assert document.startswith("<!DOCTYPE html>")
    assert "<title>Demo</title>" in document
    assert "a{color:red}\nb{color:blue}" in document
    assert "one()\ntwo()" in document
    assert '<div class="container">\n        <h1>Hi</h1>' in document
    assert "JavaScript Error:" in document


def test_render_keeps_project_name_literal() -> None:
    document = render_preview_document("<p/>", [], [], "Tom & Jerry's \"Show\"")

    assert "<title>Tom & Jerry's \"Show\"</title>" in document


def test_render_escapes_angle_bracket_in_title_only() -> None:
    document = render_preview_document("<b>&</b>", [], ["if (a < b) {}"], "A </title> & C")

    assert "<title>A &lt;/title> & C</title>" in document
    assert "<b>&</b>" in document
    assert "if (a < b) {}" in document


def test_render_keeps_dollar_signs_in_sources() -> None:
    document = render_preview_document("<p>$5</p>", ["$x{}"], ["const $el = $('#a');"], "$name")

    assert "<p>$5</p>" in document
    assert "const $el = $('#a');" in document
    assert "<title>$name</title>" in document


def test_compile_uses_first_html_file() -> None:
    files = [
        _file("style.css", "css", "body{}"),
        _file("index.html", "html", "<p>first</p>"),
        _file("other.html", "html", "<p>second</p>"),
        _file("app.js", "javascript", "a()"),
        _file("App.jsx", "jsx", "b()"),
        _file("types.ts", "typescript", "let c: number"),
    ]

    result = compile_files("p1", "Demo", files)

    assert result.success is True
    assert result.error is None
    assert result.preview_url == "/api/projects/p1/preview"
    assert "<p>first</p>" in result.output
    assert "<p>second</p>" not in result.output
    assert "a()\nb()" in result.output
    assert "let c: number" not in result.output


def test_compile_without_html_fails_softly() -> None:
    result = compile_files("p1", "Demo", [_file("style.css", "css", "body{}")])

    assert result.success is False
    assert result.output == ""
    assert result.error == MISSING_HTML_ERROR
    assert result.preview_url is None


def test_compile_empty_project() -> None:
    assert compile_files("p1", "Demo", []).success is False


def test_preview_url() -> None:
    assert preview_url_for("abc") == "/api/projects/abc/preview"
