"""Shared Pydantic schemas for API requests and responses."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Envelope(CamelModel):
    """Standard response envelope."""

    success: bool
    message: str | None = None


class ErrorResponse(Envelope):
    """Body returned for every handled error."""

    success: bool = False
