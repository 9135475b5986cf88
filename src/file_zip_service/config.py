from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_WORKERS = 4
DEFAULT_CHUNK_SIZE = 64 * 1024
DEFAULT_DOWNLOAD_NAME = "archive.zip"
DEFAULT_LOG_LEVEL = "INFO"
# Level names uvicorn accepts for its log_level argument.
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "TRACE")

ENV_PREFIX = "ZIP_SERVICE_"


def _env_bool(raw: str | None) -> bool:
    return (raw or "").strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ServerConfig:
    """Immutable runtime configuration built once at startup."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    workers: int = DEFAULT_WORKERS
    chunk_size: int = DEFAULT_CHUNK_SIZE
    allowed_root: Path | None = None
    strict_names: bool = False
    download_name: str = DEFAULT_DOWNLOAD_NAME
    log_level: str = DEFAULT_LOG_LEVEL

    def __post_init__(self) -> None:
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be between 1 and 65535, got {self.port}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {self.chunk_size}")
        if not self.download_name.strip():
            raise ValueError("download_name must not be empty")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        """Build configuration from ZIP_SERVICE_* environment variables."""

        env = os.environ if environ is None else environ

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            if value is None or value.strip() == "":
                return None
            return value.strip()

        allowed_root = get("ALLOWED_ROOT")
        return cls(
            host=get("HOST") or DEFAULT_HOST,
            port=int(get("PORT") or DEFAULT_PORT),
            workers=int(get("WORKERS") or DEFAULT_WORKERS),
            chunk_size=int(get("CHUNK_SIZE") or DEFAULT_CHUNK_SIZE),
            allowed_root=Path(allowed_root) if allowed_root else None,
            strict_names=_env_bool(get("STRICT_NAMES")),
            download_name=get("DOWNLOAD_NAME") or DEFAULT_DOWNLOAD_NAME,
            log_level=(get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )
