from __future__ import annotations

import io
import logging
import os
import stat
import zipfile
from collections.abc import Iterable
from typing import BinaryIO

from file_zip_service.config import DEFAULT_CHUNK_SIZE
from file_zip_service.errors import SourceUnreadable, WriteFailure
from file_zip_service.models.api_requests import FileRequest
from file_zip_service.models.internal import ArchivePayload
from file_zip_service.services.ports import SourceOpener

logger = logging.getLogger(__name__)

# Entry metadata is fixed so identical batches yield identical archives.
ENTRY_DATE_TIME = (1980, 1, 1, 0, 0, 0)
ENTRY_MODE = stat.S_IFREG | 0o755
CREATE_SYSTEM_UNIX = 3

_WRITE_ERRORS = (OSError, MemoryError, zipfile.LargeZipFile)


def _size_hint(source: BinaryIO) -> int:
    """Best-effort size of an open source, used to decide on ZIP64 headers."""

    try:
        return os.fstat(source.fileno()).st_size
    except (OSError, AttributeError):
        return 0


def entry_info(arcname: str) -> zipfile.ZipInfo:
    """Build deterministic ZIP entry metadata for one archive name."""

    info = zipfile.ZipInfo(filename=arcname, date_time=ENTRY_DATE_TIME)
    info.compress_type = zipfile.ZIP_DEFLATED
    info.create_system = CREATE_SYSTEM_UNIX
    info.external_attr = ENTRY_MODE << 16
    return info


class ArchiveBuilder:
    """Assemble a batch of local files into one in-memory ZIP archive."""

    def __init__(self, opener: SourceOpener, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.opener = opener
        self.chunk_size = chunk_size

    def build(self, batch: Iterable[FileRequest]) -> ArchivePayload:
        """Write every request into a fresh archive, in order.

        The first unreadable source or write error aborts the whole batch and
        the partially written buffer is dropped; callers only ever see a
        complete archive or an exception.

        Raises:
            SourceUnreadable: a source could not be opened or fully read.
            WriteFailure: encoding into the archive buffer failed.
        """

        buffer = io.BytesIO()
        entry_names: list[str] = []
        try:
            with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for item in batch:
                    self._add_entry(archive, item)
                    entry_names.append(item.arcname)
        except _WRITE_ERRORS as exc:
            logger.exception("Archive finalization failed after %d entries", len(entry_names))
            raise WriteFailure() from exc

        data = buffer.getvalue()
        logger.info("Built archive with %d entries (%d bytes)", len(entry_names), len(data))
        return ArchivePayload(data=data, entry_names=tuple(entry_names))

    def _add_entry(self, archive: zipfile.ZipFile, item: FileRequest) -> None:
        """Stream one source file into a new entry named `item.arcname`."""

        with self.opener.open(item.path) as source:
            force_zip64 = _size_hint(source) >= zipfile.ZIP64_LIMIT
            written = 0
            try:
                dest = archive.open(entry_info(item.arcname), mode="w", force_zip64=force_zip64)
            except _WRITE_ERRORS as exc:
                logger.exception("Cannot start archive entry %s", item.arcname)
                raise WriteFailure(item.arcname) from exc
            with dest:
                while True:
                    try:
                        chunk = source.read(self.chunk_size)
                    except OSError as exc:
                        logger.warning("Read failed for source %s: %s", item.path, exc)
                        raise SourceUnreadable(item.path) from exc
                    if not chunk:
                        break
                    try:
                        dest.write(chunk)
                    except _WRITE_ERRORS as exc:
                        logger.exception("Write failed for archive entry %s", item.arcname)
                        raise WriteFailure(item.arcname) from exc
                    written += len(chunk)
        logger.debug("Added %s as %s (%d bytes)", item.path, item.arcname, written)
