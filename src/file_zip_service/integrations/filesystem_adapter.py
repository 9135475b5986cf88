from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

from file_zip_service.errors import SourceUnreadable

logger = logging.getLogger(__name__)


class LocalFileOpener:
    """Open source files from the local filesystem, optionally confined to a root."""

    def __init__(self, allowed_root: Path | None = None) -> None:
        self.allowed_root = allowed_root.resolve() if allowed_root is not None else None

    def _check_confined(self, path: str) -> None:
        """Reject paths that resolve outside the allow-listed root."""

        if self.allowed_root is None:
            return
        try:
            resolved = Path(path).resolve()
        except (OSError, ValueError) as exc:
            logger.warning("Cannot resolve source %s: %s", path, exc)
            raise SourceUnreadable(path) from exc
        if not resolved.is_relative_to(self.allowed_root):
            logger.warning("Rejected source outside allowed root: %s", path)
            raise SourceUnreadable(path)

    def open(self, path: str) -> BinaryIO:
        """Open one file for binary reading; directories and missing files fail."""

        self._check_confined(path)
        try:
            return open(path, "rb")
        except (OSError, ValueError) as exc:
            # ValueError covers paths with embedded NUL bytes.
            logger.warning("Cannot open source %s: %s", path, getattr(exc, "strerror", None) or exc)
            raise SourceUnreadable(path) from exc
