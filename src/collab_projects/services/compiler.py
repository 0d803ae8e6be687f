"""Simulated compilation of a project into a single preview document.

"Compiling" concatenates the project's stylesheets and scripts and inlines
them, together with the first HTML file, into a fixed page template. Nothing
is parsed or transpiled: script errors surface only when the browser runs the
page, where a ``try/catch`` shows them in a red banner.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from string import Template

from collab_projects.constants.project_constants import SCRIPT_FILE_TYPES, FileType
from collab_projects.models.project import CompilationResult, ProjectFile

logger = logging.getLogger(__name__)

MISSING_HTML_ERROR = "No HTML file found. Please upload an index.html file."

_PAGE_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>$title</title>
    <style>
        body {
            margin: 0;
            padding: 20px;
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #f5f5f5;
        }
        .container {
            max-width: 1200px;
            margin: 0 auto;
            background: white;
            padding: 20px;
            border-radius: 8px;
            box-shadow: 0 2px 10px rgba(0,0,0,0.1);
        }
        $css
    </style>
</head>
<body>
    <div class="container">
        $html
    </div>
    <script>
        try {
            $js
        } catch (error) {
            console.error('JavaScript Error:', error);
            document.body.innerHTML += '<div style="color: red; padding: 10px; background: #ffe6e6; border: 1px solid red; margin: 10px; border-radius: 4px;">JavaScript Error: ' + error.message + '</div>';
        }
    </script>
</body>
</html>
"""
)


def preview_url_for(project_id: str) -> str:
    """Return the URL that serves a project's compiled preview."""
    return f"/api/projects/{project_id}/preview"


def render_preview_document(
    html: str,
    css_sources: Sequence[str],
    js_sources: Sequence[str],
    project_name: str,
) -> str:
    """Combine page markup, stylesheets and scripts into one HTML document.

    Stylesheets and scripts are joined with newlines in the order given. The
    project name appears as written in the ``<title>``, except that ``<`` is
    escaped so a name cannot close the element. File contents are inserted
    verbatim.
    """
    return _PAGE_TEMPLATE.substitute(
        title=project_name.replace("<", "&lt;"),
        css="\n".join(css_sources),
        html=html,
        js="\n".join(js_sources),
    )


def compile_files(
    project_id: str, project_name: str, files: Sequence[ProjectFile]
) -> CompilationResult:
    """Build a preview document from a project's files.

    Args:
        project_id: Identifier used to derive the preview URL.
        project_name: Shown as the page title.
        files: Project files in registry order.

    Returns:
        A successful result with the document, or a failed result when the
        project has no HTML file. Never raises for missing files.
    """
    html_file = next((f for f in files if f.file_type == FileType.HTML), None)
    if html_file is None:
        logger.info("Compilation of project %s failed: no HTML file", project_id)
        return CompilationResult(success=False, output="", error=MISSING_HTML_ERROR)

    css_sources = [f.content for f in files if f.file_type == FileType.CSS]
    js_sources = [f.content for f in files if f.file_type in SCRIPT_FILE_TYPES]

    document = render_preview_document(html_file.content, css_sources, js_sources, project_name)
    return CompilationResult(
        success=True,
        output=document,
        error=None,
        preview_url=preview_url_for(project_id),
    )
