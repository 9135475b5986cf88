from __future__ import annotations

from typing import BinaryIO, Protocol


class SourceOpener(Protocol):
    """Contract for opening one requested source file for reading."""

    def open(self, path: str) -> BinaryIO:
        """Open `path` in binary mode or raise SourceUnreadable."""

        ...
