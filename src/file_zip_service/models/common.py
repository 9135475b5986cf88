from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from file_zip_service.errors import ErrorCode
from file_zip_service.models.version import SCHEMA_VERSION


class StrictModel(BaseModel):
    """Base model that rejects unknown fields to keep schema strict."""

    model_config = ConfigDict(extra="forbid")


class ErrorInfo(StrictModel):
    """Normalized API error payload returned instead of an archive."""

    schema_version: Literal["v1"] = SCHEMA_VERSION
    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None
