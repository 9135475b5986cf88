from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from file_zip_service.config import ServerConfig
from file_zip_service.integrations.filesystem_adapter import LocalFileOpener
from file_zip_service.services.archive_service import ArchiveBuilder


@dataclass
class AppContainer:
    """Runtime dependency container for API/builder wiring."""

    config: ServerConfig
    opener: LocalFileOpener
    builder: ArchiveBuilder
    executor: ThreadPoolExecutor

    def shutdown(self) -> None:
        """Release the build worker threads."""

        self.executor.shutdown(wait=True)


def build_container(config: ServerConfig) -> AppContainer:
    """Create the runtime container for one server process."""

    opener = LocalFileOpener(config.allowed_root)
    builder = ArchiveBuilder(opener, chunk_size=config.chunk_size)
    executor = ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="zip-build")
    return AppContainer(
        config=config,
        opener=opener,
        builder=builder,
        executor=executor,
    )
