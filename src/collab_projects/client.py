"""HTTP client mirroring the project API routes one-to-one.

The client only builds requests and parses JSON. Error envelopes are raised as
``ApiError`` carrying the HTTP status and server message.

Example:
    >>> with ProjectsClient("http://localhost:8000") as client:
    ...     project = client.create_project("Demo", room_id="room-1", created_by="alice")
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

DEFAULT_TIMEOUT = 10.0


class ApiError(Exception):
    """Raised when the API answers with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


def _segment(value: str) -> str:
    """Quote one path segment so reserved characters stay inside it."""
    return quote(value, safe="")


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


class ProjectsClient:
    """Thin wrapper over ``/api/projects``.

    Args:
        base_url: Server root, e.g. ``http://localhost:8000``.
        http_client: Optional preconfigured ``httpx.Client`` (a FastAPI
            ``TestClient`` works too). When given, ``base_url`` is ignored.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        http_client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> ProjectsClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --------- transport ---------

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = self._http.request(method, f"/api/projects{path}", **kwargs)
        if response.is_error:
            raise ApiError(response.status_code, self._error_message(response))
        return response

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        if response.headers.get("content-type", "").startswith("application/json"):
            body = response.json()
            if isinstance(body, dict) and body.get("message"):
                return str(body["message"])
        return response.text

    def _json(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        return self._request(method, path, **kwargs).json()

    # --------- projects ---------

    def create_project(
        self,
        name: str,
        *,
        room_id: str,
        created_by: str,
        description: str | None = None,
        project_type: str | None = None,
        room_members: list[dict[str, str]] | None = None,
    ) -> dict[str, Any]:
        payload = _drop_none(
            {
                "name": name,
                "roomId": room_id,
                "createdBy": created_by,
                "description": description,
                "projectType": project_type,
                "roomMembers": room_members,
            }
        )
        return self._json("POST", "/create", json=payload)["project"]

    def list_room_projects(self, room_id: str, status: str = "active") -> list[dict[str, Any]]:
        path = f"/room/{_segment(room_id)}"
        return self._json("GET", path, params={"status": status})["projects"]

    def list_collaborator_projects(
        self, user_id: str, status: str | None = None
    ) -> list[dict[str, Any]]:
        params = _drop_none({"status": status})
        return self._json("GET", f"/collaborator/{_segment(user_id)}", params=params)["projects"]

    def search_projects(self, text: str, limit: int = 20) -> list[dict[str, Any]]:
        return self._json("GET", "/search", params={"q": text, "limit": limit})["projects"]

    def get_project(self, project_id: str) -> dict[str, Any]:
        return self._json("GET", f"/{_segment(project_id)}")["project"]

    def update_project(
        self,
        project_id: str,
        *,
        name: str | None = None,
        description: str | None = None,
        settings: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload = _drop_none({"name": name, "description": description, "settings": settings})
        return self._json("PATCH", f"/{_segment(project_id)}", json=payload)["project"]

    def set_status(self, project_id: str, status: str) -> dict[str, Any]:
        path = f"/{_segment(project_id)}/status"
        return self._json("PATCH", path, json={"status": status})["project"]

    def get_stats(self, project_id: str) -> dict[str, Any]:
        return self._json("GET", f"/{_segment(project_id)}/stats")["stats"]

    # --------- collaborators ---------

    def add_collaborator(
        self,
        project_id: str,
        user_id: str,
        *,
        role: str | None = None,
        username: str | None = None,
        email: str | None = None,
    ) -> dict[str, Any]:
        payload = _drop_none(
            {"userId": user_id, "role": role, "username": username, "email": email}
        )
        return self._json("POST", f"/{_segment(project_id)}/collaborators", json=payload)["project"]

    def remove_collaborator(self, project_id: str, user_id: str) -> dict[str, Any]:
        path = f"/{_segment(project_id)}/collaborators/{_segment(user_id)}"
        return self._json("DELETE", path)["project"]

    # --------- files ---------

    def paste_file(
        self,
        project_id: str,
        *,
        file_name: str,
        content: str,
        uploaded_by: str,
        file_type: str | None = None,
        file_path: str | None = None,
        last_modified_by: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        payload = _drop_none(
            {
                "fileName": file_name,
                "content": content,
                "uploadedBy": uploaded_by,
                "fileType": file_type,
                "filePath": file_path,
                "lastModifiedBy": last_modified_by,
                "metadata": metadata,
            }
        )
        return self._json("POST", f"/{_segment(project_id)}/files/paste", json=payload)["file"]

    def upload_file(
        self,
        project_id: str,
        *,
        filename: str,
        data: bytes,
        uploaded_by: str,
        content_type: str = "text/plain",
    ) -> dict[str, Any]:
        return self._json(
            "POST",
            f"/{_segment(project_id)}/files/upload",
            files={"file": (filename, data, content_type)},
            data={"uploadedBy": uploaded_by},
        )["file"]

    def update_file(
        self, project_id: str, file_id: str, *, content: str, last_modified_by: str
    ) -> dict[str, Any]:
        payload = {"content": content, "lastModifiedBy": last_modified_by}
        path = f"/{_segment(project_id)}/files/{_segment(file_id)}"
        return self._json("PUT", path, json=payload)["file"]

    # --------- build & serve ---------

    def compile(self, project_id: str, compiled_by: str | None = None) -> dict[str, Any]:
        payload = _drop_none({"compiledBy": compiled_by})
        return self._json("POST", f"/{_segment(project_id)}/compile", json=payload)["compilation"]

    def get_preview(self, project_id: str) -> str:
        return self._request("GET", f"/{_segment(project_id)}/preview").text

    def get_file_content(self, project_id: str, filename: str) -> str:
        return self._request("GET", f"/{_segment(project_id)}/{_segment(filename)}").text
