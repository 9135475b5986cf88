from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import PurePosixPath

from pydantic import Field, RootModel, ValidationError, ValidationInfo, field_validator, model_validator

from file_zip_service.errors import MalformedRequest
from file_zip_service.models.common import StrictModel


def _is_unsafe_arcname(arcname: str) -> bool:
    """Return True when an entry name could escape the extraction directory."""

    if "\\" in arcname or arcname.startswith("/"):
        return True
    return ".." in PurePosixPath(arcname).parts


class FileRequest(StrictModel):
    """One source file and the name it takes inside the archive."""

    path: str = Field(min_length=1, strict=True)
    arcname: str = Field(min_length=1, strict=True)

    @field_validator("arcname")
    @classmethod
    def _check_arcname(cls, value: str, info: ValidationInfo) -> str:
        # zipfile truncates names at the first NUL, so such names cannot be kept verbatim.
        if "\x00" in value:
            raise ValueError("arcname must not contain NUL characters")
        # Otherwise names are kept verbatim unless the caller opted into strict names.
        context = info.context or {}
        if context.get("strict_names") and _is_unsafe_arcname(value):
            raise ValueError("arcname must be a relative path without '..' segments")
        return value


class ArchiveRequestBatch(RootModel[list[FileRequest]]):
    """Ordered batch of file requests; order is the archive entry order."""

    @model_validator(mode="after")
    def _reject_duplicate_arcnames(self) -> "ArchiveRequestBatch":
        seen: set[str] = set()
        for item in self.root:
            if item.arcname in seen:
                raise ValueError(f"duplicate arcname: {item.arcname}")
            seen.add(item.arcname)
        return self

    def __iter__(self) -> Iterator[FileRequest]:  # type: ignore[override]
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    @property
    def arcnames(self) -> list[str]:
        return [item.arcname for item in self.root]

    @classmethod
    def from_json(cls, raw: bytes | str, *, strict_names: bool = False) -> "ArchiveRequestBatch":
        """Decode a JSON request body into a batch.

        Raises MalformedRequest when the body is not valid JSON, is not an
        array, or any element violates the FileRequest schema.
        """

        try:
            return cls.model_validate_json(raw, context={"strict_names": strict_names})
        except ValidationError as exc:
            errors = json.loads(exc.json(include_url=False, include_input=False))
            raise MalformedRequest("request body must be a JSON array of {path, arcname} objects", errors=errors) from exc
