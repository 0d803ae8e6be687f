"""Project routes for the API.

Every JSON route answers with an envelope ``{success, message?, <data>}``.
Service errors are turned into error envelopes by the handlers registered in
``collab_projects.api.errors``; the preview and raw file routes answer errors
as plain text instead.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from fastapi.responses import HTMLResponse, PlainTextResponse

from collab_projects.api.dependencies import get_project_service
from collab_projects.api.schemas.projects import (
    CollaboratorCreateRequest,
    CollaboratorResponse,
    CompilationEnvelope,
    CompilationResultResponse,
    CompilationStateResponse,
    CompileRequest,
    FilePasteRequest,
    FileUpdateRequest,
    ProjectCreateRequest,
    ProjectDetailEnvelope,
    ProjectDetailResponse,
    ProjectEnvelope,
    ProjectFileEnvelope,
    ProjectFileResponse,
    ProjectListEnvelope,
    ProjectResponse,
    ProjectSettingsResponse,
    ProjectStatsEnvelope,
    ProjectStatsResponse,
    ProjectStatusRequest,
    ProjectUpdateRequest,
)
from collab_projects.models.errors import ProjectError
from collab_projects.models.project import (
    CompilationResult,
    Project,
    ProjectFile,
    ProjectStats,
)
from collab_projects.services.file_types import served_content_type
from collab_projects.services.projects import DEFAULT_SEARCH_LIMIT, ProjectService, RoomMember

router = APIRouter(prefix="/projects", tags=["projects"])

Service = Annotated[ProjectService, Depends(get_project_service)]


def _project_to_response(project: Project) -> ProjectResponse:
    return ProjectResponse(**_project_fields(project))


def _project_fields(project: Project) -> dict:
    compilation = project.compilation
    return {
        "project_id": project.project_id,
        "name": project.name,
        "description": project.description,
        "room_id": project.room_id,
        "created_by": project.created_by,
        "project_type": project.project_type,
        "collaborators": [
            CollaboratorResponse(
                user_id=c.user_id,
                username=c.username,
                email=c.email,
                role=c.role,
                joined_at=c.joined_at,
            )
            for c in project.collaborators
        ],
        "settings": ProjectSettingsResponse(**project.settings.to_dict()),
        "compilation": CompilationStateResponse(
            status=compilation.status,
            last_compiled=compilation.last_compiled,
            build_output=compilation.build_output,
            error_log=compilation.error_log,
            preview_url=compilation.preview_url,
        ),
        "status": project.status,
        "created_at": project.created_at,
        "updated_at": project.updated_at,
    }


def _file_to_response(project_file: ProjectFile) -> ProjectFileResponse:
    return ProjectFileResponse(
        file_id=project_file.file_id,
        project_id=project_file.project_id,
        file_name=project_file.file_name,
        file_path=project_file.file_path,
        file_type=project_file.file_type,
        content=project_file.content,
        uploaded_by=project_file.uploaded_by,
        last_modified_by=project_file.last_modified_by,
        metadata=project_file.metadata,
        created_at=project_file.created_at,
        updated_at=project_file.updated_at,
    )


def _compilation_to_response(result: CompilationResult) -> CompilationResultResponse:
    return CompilationResultResponse(
        success=result.success,
        output=result.output,
        error=result.error,
        preview_url=result.preview_url,
    )


def _stats_to_response(stats: ProjectStats) -> ProjectStatsResponse:
    return ProjectStatsResponse(
        project_id=stats.project_id,
        name=stats.name,
        collaborator_count=stats.collaborator_count,
        file_count=stats.file_count,
        compilation_status=stats.compilation_status,
        last_compiled=stats.last_compiled,
        created_at=stats.created_at,
        updated_at=stats.updated_at,
    )


@router.post(
    "/create",
    response_model=ProjectEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project",
    description="Create a project in a room; the creator becomes owner, room members editors.",
    responses={400: {"description": "Missing required fields"}},
)
def create_project(body: ProjectCreateRequest, service: Service) -> ProjectEnvelope:
    project = service.create_project(
        name=body.name,
        room_id=body.room_id,
        created_by=body.created_by,
        project_type=body.project_type,
        room_members=[RoomMember(m.username, m.email) for m in body.room_members],
        description=body.description,
    )
    return ProjectEnvelope(
        success=True,
        message="Project created successfully",
        project=_project_to_response(project),
    )


@router.get(
    "/room/{room_id}",
    response_model=ProjectListEnvelope,
    summary="List room projects",
    description="Return a room's projects with the given status, most recently updated first.",
)
def list_room_projects(
    room_id: str, service: Service, project_status: Annotated[str, Query(alias="status")] = "active"
) -> ProjectListEnvelope:
    projects = service.list_projects_for_room(room_id, project_status)
    return ProjectListEnvelope(
        success=True, projects=[_project_to_response(p) for p in projects]
    )


@router.get(
    "/collaborator/{user_id}",
    response_model=ProjectListEnvelope,
    summary="List a user's projects",
    description="Return projects where the user is a collaborator.",
)
def list_collaborator_projects(
    user_id: str,
    service: Service,
    project_status: Annotated[str | None, Query(alias="status")] = None,
) -> ProjectListEnvelope:
    projects = service.list_projects_for_collaborator(user_id, project_status)
    return ProjectListEnvelope(
        success=True, projects=[_project_to_response(p) for p in projects]
    )


@router.get(
    "/search",
    response_model=ProjectListEnvelope,
    summary="Search projects",
    description="Return projects whose name or description contains the query text.",
)
def search_projects(
    service: Service,
    q: Annotated[str | None, Query(description="Text to search for")] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = DEFAULT_SEARCH_LIMIT,
) -> ProjectListEnvelope:
    projects = service.search_projects(q, limit=limit)
    return ProjectListEnvelope(
        success=True, projects=[_project_to_response(p) for p in projects]
    )


@router.get(
    "/{project_id}",
    response_model=ProjectDetailEnvelope,
    summary="Get a project",
    description="Return a project with its files ordered by file name.",
    responses={404: {"description": "Project not found"}},
)
def get_project(project_id: str, service: Service) -> ProjectDetailEnvelope:
    detail = service.get_project_with_files(project_id)
    return ProjectDetailEnvelope(
        success=True,
        project=ProjectDetailResponse(
            **_project_fields(detail.project),
            files=[_file_to_response(f) for f in detail.files],
        ),
    )


@router.patch(
    "/{project_id}",
    response_model=ProjectEnvelope,
    summary="Update a project",
    description="Update a project's name, description or settings.",
    responses={404: {"description": "Project not found"}},
)
def update_project(
    project_id: str, body: ProjectUpdateRequest, service: Service
) -> ProjectEnvelope:
    settings = body.settings.model_dump(exclude_none=True) if body.settings else None
    project = service.update_project(
        project_id, name=body.name, description=body.description, settings=settings
    )
    return ProjectEnvelope(
        success=True,
        message="Project updated successfully",
        project=_project_to_response(project),
    )


@router.patch(
    "/{project_id}/status",
    response_model=ProjectEnvelope,
    summary="Change project status",
    description="Archive, restore or soft-delete a project.",
    responses={400: {"description": "Invalid status"}, 404: {"description": "Project not found"}},
)
def update_project_status(
    project_id: str, body: ProjectStatusRequest, service: Service
) -> ProjectEnvelope:
    project = service.set_status(project_id, body.status)
    return ProjectEnvelope(
        success=True,
        message=f"Project status set to {project.status}",
        project=_project_to_response(project),
    )


@router.get(
    "/{project_id}/stats",
    response_model=ProjectStatsEnvelope,
    summary="Get project statistics",
    responses={404: {"description": "Project not found"}},
)
def get_project_stats(project_id: str, service: Service) -> ProjectStatsEnvelope:
    return ProjectStatsEnvelope(
        success=True, stats=_stats_to_response(service.project_stats(project_id))
    )


@router.post(
    "/{project_id}/collaborators",
    response_model=ProjectEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Add a collaborator",
    responses={400: {"description": "Invalid collaborator"}, 404: {"description": "Not found"}},
)
def add_collaborator(
    project_id: str, body: CollaboratorCreateRequest, service: Service
) -> ProjectEnvelope:
    project = service.add_collaborator(
        project_id,
        body.user_id,
        username=body.username,
        email=body.email,
        role=body.role,
    )
    return ProjectEnvelope(
        success=True,
        message="Collaborator added successfully",
        project=_project_to_response(project),
    )


@router.delete(
    "/{project_id}/collaborators/{user_id}",
    response_model=ProjectEnvelope,
    summary="Remove a collaborator",
    responses={400: {"description": "Owner cannot be removed"}, 404: {"description": "Not found"}},
)
def remove_collaborator(project_id: str, user_id: str, service: Service) -> ProjectEnvelope:
    project = service.remove_collaborator(project_id, user_id)
    return ProjectEnvelope(
        success=True,
        message="Collaborator removed successfully",
        project=_project_to_response(project),
    )


@router.post(
    "/{project_id}/files/paste",
    response_model=ProjectFileEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Paste code into a project",
    responses={
        400: {"description": "Missing required fields"},
        403: {"description": "Writes not allowed"},
        404: {"description": "Project not found"},
    },
)
def paste_file(project_id: str, body: FilePasteRequest, service: Service) -> ProjectFileEnvelope:
    project_file = service.paste_file(
        project_id,
        file_name=body.file_name,
        content=body.content,
        uploaded_by=body.uploaded_by,
        file_type=body.file_type,
        file_path=body.file_path,
        last_modified_by=body.last_modified_by,
        metadata=body.metadata,
    )
    return ProjectFileEnvelope(
        success=True,
        message="Code pasted and saved successfully",
        file=_file_to_response(project_file),
    )


@router.post(
    "/{project_id}/files/upload",
    response_model=ProjectFileEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a file to a project",
    responses={
        400: {"description": "No file, file too large or type not allowed"},
        403: {"description": "Writes not allowed"},
        404: {"description": "Project not found"},
    },
)
async def upload_file(
    project_id: str,
    service: Service,
    file: Annotated[UploadFile | None, File(description="Source file to store")] = None,
    uploaded_by: Annotated[str | None, Form(alias="uploadedBy")] = None,
) -> ProjectFileEnvelope:
    data = b""
    if file is not None:
        # one byte past the limit is enough for the size check to reject it
        data = await file.read(service.upload_size_limit(project_id) + 1)
    project_file = service.upload_file(
        project_id,
        filename=file.filename if file is not None else None,
        data=data,
        content_type=file.content_type if file is not None else None,
        uploaded_by=uploaded_by,
    )
    return ProjectFileEnvelope(
        success=True,
        message="File uploaded successfully",
        file=_file_to_response(project_file),
    )


@router.put(
    "/{project_id}/files/{file_id}",
    response_model=ProjectFileEnvelope,
    summary="Update file content",
    responses={
        400: {"description": "Missing required fields"},
        404: {"description": "Project or file not found"},
    },
)
def update_file(
    project_id: str, file_id: str, body: FileUpdateRequest, service: Service
) -> ProjectFileEnvelope:
    project_file = service.update_file(
        project_id,
        file_id,
        content=body.content,
        last_modified_by=body.last_modified_by,
    )
    return ProjectFileEnvelope(
        success=True,
        message="File updated successfully",
        file=_file_to_response(project_file),
    )


@router.post(
    "/{project_id}/compile",
    response_model=CompilationEnvelope,
    summary="Compile a project",
    description=(
        "Combine the project's HTML, CSS and JavaScript files into one preview document. "
        "The envelope's success flag mirrors the compilation result."
    ),
    responses={404: {"description": "Project not found"}},
)
def compile_project(
    project_id: str, service: Service, body: CompileRequest | None = None
) -> CompilationEnvelope:
    result = service.compile(project_id, compiled_by=body.compiled_by if body else None)
    return CompilationEnvelope(
        success=result.success,
        message="Project compiled successfully" if result.success else "Compilation failed",
        compilation=_compilation_to_response(result),
    )


@router.get(
    "/{project_id}/preview",
    response_class=HTMLResponse,
    summary="Preview a project",
    description="Compile the project and return the HTML document.",
    responses={
        400: {"description": "Compilation error"},
        404: {"description": "Project or files not found"},
    },
)
def preview_project(project_id: str, service: Service) -> Response:
    try:
        document = service.render_preview(project_id)
    except ProjectError as exc:
        return PlainTextResponse(exc.message, status_code=exc.status_code)
    return HTMLResponse(document)


@router.get(
    "/{project_id}/{filename}",
    summary="Serve a project file",
    description="Return a file's raw content with a content type derived from its extension.",
    responses={404: {"description": "Project or file not found"}},
)
def serve_project_file(project_id: str, filename: str, service: Service) -> Response:
    try:
        project_file = service.get_file_by_name(project_id, filename)
    except ProjectError as exc:
        return PlainTextResponse(exc.message, status_code=exc.status_code)
    return Response(content=project_file.content, media_type=served_content_type(filename))
