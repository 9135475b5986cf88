from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from .api.main import run
from .config import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DOWNLOAD_NAME,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    DEFAULT_WORKERS,
    ENV_PREFIX,
    ServerConfig,
)
from .errors import ZipServiceError
from .integrations.filesystem_adapter import LocalFileOpener
from .logging_setup import configure_logging
from .models.api_requests import ArchiveRequestBatch
from .services.archive_service import ArchiveBuilder

app = typer.Typer(help="Bundle local files into ZIP archives over HTTP.")
console = Console()


@app.command()
def serve(
    host: str = typer.Option(DEFAULT_HOST, "--host", "-h", envvar=f"{ENV_PREFIX}HOST", help="Sets the server host."),
    port: int = typer.Option(DEFAULT_PORT, "--port", "-p", envvar=f"{ENV_PREFIX}PORT", help="Sets the server port."),
    workers: int = typer.Option(
        DEFAULT_WORKERS, "--workers", "-w", envvar=f"{ENV_PREFIX}WORKERS", help="Sets the number of build worker threads."
    ),
    chunk_size: int = typer.Option(
        DEFAULT_CHUNK_SIZE, envvar=f"{ENV_PREFIX}CHUNK_SIZE", help="Read size in bytes when streaming files."
    ),
    allowed_root: Optional[Path] = typer.Option(
        None, envvar=f"{ENV_PREFIX}ALLOWED_ROOT", help="Only serve files below this directory."
    ),
    strict_names: bool = typer.Option(
        False, envvar=f"{ENV_PREFIX}STRICT_NAMES", help="Reject absolute arcnames and '..' segments."
    ),
    download_name: str = typer.Option(
        DEFAULT_DOWNLOAD_NAME, envvar=f"{ENV_PREFIX}DOWNLOAD_NAME", help="Filename suggested to clients."
    ),
    log_level: str = typer.Option(DEFAULT_LOG_LEVEL, envvar=f"{ENV_PREFIX}LOG_LEVEL", help="Logging level."),
) -> None:
    """Start the HTTP service exposing GET/POST /download."""

    try:
        config = ServerConfig(
            host=host,
            port=port,
            workers=workers,
            chunk_size=chunk_size,
            allowed_root=allowed_root,
            strict_names=strict_names,
            download_name=download_name,
            log_level=log_level.upper(),
        )
    except ValueError as exc:
        console.print(f"[red]Invalid configuration:[/red] {exc}")
        raise typer.Exit(code=2) from exc

    configure_logging(config.log_level)
    console.print(f"[cyan]Serving on[/cyan] http://{config.host}:{config.port} ({config.workers} workers)")
    run(config)


@app.command()
def build(
    manifest: Path = typer.Argument(..., help="JSON file with [{path, arcname}, ...] entries."),
    out: Path = typer.Option(Path("archive.zip"), "--out", "-o", help="Where to write the archive."),
    allowed_root: Optional[Path] = typer.Option(None, help="Only read files below this directory."),
    strict_names: bool = typer.Option(False, help="Reject absolute arcnames and '..' segments."),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, min=1, help="Read size in bytes when streaming files."),
) -> None:
    """Build an archive from a manifest file without starting the server."""

    try:
        raw = manifest.read_bytes()
    except OSError as exc:
        console.print(f"[red]Cannot read manifest[/red] {manifest}: {exc.strerror or exc}")
        raise typer.Exit(code=1) from exc

    builder = ArchiveBuilder(LocalFileOpener(allowed_root), chunk_size=chunk_size)
    try:
        batch = ArchiveRequestBatch.from_json(raw, strict_names=strict_names)
        payload = builder.build(batch)
    except ZipServiceError as exc:
        console.print(f"[red]{exc.code.value}[/red] {exc}")
        raise typer.Exit(code=1) from exc

    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(payload.data)
    console.print(f"[green]Wrote[/green] {out} ({payload.entry_count} entries, {payload.size} bytes)")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
