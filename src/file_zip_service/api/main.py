from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from file_zip_service import __version__
from file_zip_service.config import ServerConfig
from file_zip_service.errors import BuildError, MalformedRequest, ZipServiceError
from file_zip_service.integrations.container import AppContainer, build_container
from file_zip_service.logging_setup import configure_logging
from file_zip_service.models.api_requests import ArchiveRequestBatch
from file_zip_service.models.common import ErrorInfo
from file_zip_service.models.enums import RequestStage
from file_zip_service.models.internal import ZIP_MEDIA_TYPE

logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorInfo, "description": "Malformed JSON or schema violation"},
    404: {"model": ErrorInfo, "description": "A requested source file is not readable"},
    500: {"model": ErrorInfo, "description": "Archive could not be written"},
}


def _log_stage(request_id: str, stage: RequestStage, **fields: object) -> None:
    """Log one request state transition at DEBUG."""

    extra = " ".join(f"{key}={value}" for key, value in fields.items())
    logger.debug("download %s stage=%s %s", request_id, stage.value, extra)


async def _handle_service_error(request: Request, exc: ZipServiceError) -> JSONResponse:
    """Map domain errors to a JSON error envelope; never carries archive bytes."""

    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc)
    body = ErrorInfo(code=exc.code, message=str(exc), details=exc.details())
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(mode="json"))


def create_app(config: ServerConfig, container: AppContainer | None = None) -> FastAPI:
    """Build the FastAPI application bound to one immutable configuration."""

    container = container or build_container(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Release build worker threads on shutdown."""

        try:
            yield
        finally:
            container.shutdown()

    app = FastAPI(title="file_zip_service", version=__version__, lifespan=lifespan)
    app.state.container = container
    app.add_exception_handler(ZipServiceError, _handle_service_error)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        """Lightweight health endpoint for liveness checks."""

        return {"status": "ok"}

    @app.api_route(
        "/download",
        methods=["GET", "POST"],
        response_class=Response,
        responses={200: {"content": {ZIP_MEDIA_TYPE: {}}}, **_ERROR_RESPONSES},
    )
    async def download(request: Request) -> Response:
        """Bundle the requested files into one ZIP archive.

        The body is a JSON array of `{"path": ..., "arcname": ...}` objects.
        Building runs on the worker pool so slow disks do not stall other
        requests.
        """

        request_id = uuid4().hex[:12]
        _log_stage(request_id, RequestStage.RECEIVED, method=request.method)
        raw = await request.body()

        _log_stage(request_id, RequestStage.PARSING, bytes=len(raw))
        try:
            batch = ArchiveRequestBatch.from_json(raw, strict_names=config.strict_names)
        except MalformedRequest:
            _log_stage(request_id, RequestStage.PARSE_FAILED)
            raise
        _log_stage(request_id, RequestStage.PARSED, files=len(batch))

        _log_stage(request_id, RequestStage.BUILDING)
        loop = asyncio.get_running_loop()
        try:
            payload = await loop.run_in_executor(container.executor, container.builder.build, batch)
        except BuildError:
            _log_stage(request_id, RequestStage.BUILD_FAILED)
            raise
        _log_stage(request_id, RequestStage.BUILT, entries=payload.entry_count, size=payload.size)

        response = Response(
            content=payload.data,
            media_type=payload.media_type,
            headers={"Content-Disposition": f'attachment; filename="{config.download_name}"'},
        )
        _log_stage(request_id, RequestStage.RESPONSE_SENT)
        return response

    return app


def run(config: ServerConfig) -> None:
    """Serve the API with uvicorn using the given configuration."""

    import uvicorn

    logger.info(
        "Starting file_zip_service on %s:%d with %d build workers",
        config.host,
        config.port,
        config.workers,
    )
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


def main() -> None:
    """Console entrypoint configured entirely from ZIP_SERVICE_* variables."""

    config = ServerConfig.from_env()
    configure_logging(config.log_level)
    run(config)


if __name__ == "__main__":
    main()
