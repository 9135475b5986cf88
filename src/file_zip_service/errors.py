from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes exposed in error responses."""

    MALFORMED_REQUEST = "MALFORMED_REQUEST"  # Body or schema invalid.
    SOURCE_UNREADABLE = "SOURCE_UNREADABLE"  # A named file could not be read.
    WRITE_FAILURE = "WRITE_FAILURE"  # Encoding into the archive failed.


class ZipServiceError(Exception):
    """Base class for errors that abort a whole archive request."""

    code: ErrorCode
    status_code: int = 500

    def details(self) -> dict[str, Any] | None:
        """Extra machine-readable context for the error payload."""

        return None


class MalformedRequest(ZipServiceError):
    """Request body is not valid JSON or violates the batch schema."""

    code = ErrorCode.MALFORMED_REQUEST
    status_code = 400

    def __init__(self, message: str, *, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []

    def details(self) -> dict[str, Any] | None:
        if not self.errors:
            return None
        return {"errors": self.errors}


class BuildError(ZipServiceError):
    """Archive assembly failed; no partial archive is produced."""


class SourceUnreadable(BuildError):
    """A requested source file could not be opened or fully read."""

    code = ErrorCode.SOURCE_UNREADABLE
    status_code = 404

    def __init__(self, path: str) -> None:
        super().__init__(f"source file is not readable: {path}")
        self.path = path

    def details(self) -> dict[str, Any] | None:
        return {"path": self.path}


class WriteFailure(BuildError):
    """Encoding file content into the in-memory archive failed."""

    code = ErrorCode.WRITE_FAILURE
    status_code = 500

    def __init__(self, arcname: str | None = None) -> None:
        message = "failed to write archive"
        if arcname is not None:
            message = f"failed to write archive entry: {arcname}"
        super().__init__(message)
        self.arcname = arcname

    def details(self) -> dict[str, Any] | None:
        if self.arcname is None:
            return None
        return {"arcname": self.arcname}
