from __future__ import annotations

from dataclasses import dataclass

ZIP_MEDIA_TYPE = "application/zip"


@dataclass(frozen=True)
class ArchivePayload:
    """Finished archive bytes together with the entry names written."""

    data: bytes
    entry_names: tuple[str, ...]
    media_type: str = ZIP_MEDIA_TYPE

    @property
    def entry_count(self) -> int:
        return len(self.entry_names)

    @property
    def size(self) -> int:
        return len(self.data)
