"""Exception handlers converting service errors into response envelopes."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from collab_projects.api.schemas.common import ErrorResponse
from collab_projects.models.errors import ProjectError

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Unexpected server error"


def _envelope(status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(message=message)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True),
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        fields.append(".".join(loc) or "body")
    return f"Invalid request fields: {', '.join(dict.fromkeys(fields))}"


async def project_error_handler(request: Request, exc: ProjectError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _envelope(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _envelope(status.HTTP_400_BAD_REQUEST, _describe_validation_error(exc))


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, UNEXPECTED_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the envelope-producing handlers to ``app``."""
    app.add_exception_handler(ProjectError, project_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
