from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import Settings
from .errors import (
    ExtractionError,
    InvalidFormatError,
    ResourceNotFoundError,
    TranscriptNotFoundError,
)
from .observability import configure_logging, metrics_response, observability_middleware
from .progress import ProgressTracker
from .routers import health as health_router
from .routers import resources as resources_router
from .routers import tools as tools_router
from .services.orchestrator import TranscriptOrchestrator
from .store import TranscriptStore
from .youtube_client import YouTubeClient
from .yt_dlp_runner import ProcessYtDlpRunner, YtDlpRunner


logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, runner: YtDlpRunner | None = None) -> FastAPI:
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        app.state.store.directory.mkdir(parents=True, exist_ok=True)
        logger.info("transcript_service_started", extra={"path": str(app.state.store.directory)})
        yield

    app = FastAPI(title="YouTube Transcript Service", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = TranscriptStore(settings.transcripts_dir)
    app.state.youtube_client = YouTubeClient(runner or ProcessYtDlpRunner.from_settings(settings))
    app.state.orchestrator = TranscriptOrchestrator(app.state.youtube_client, app.state.store)
    app.state.progress = ProgressTracker()

    app.middleware("http")(observability_middleware)
    app.add_exception_handler(ExtractionError, _extraction_error_handler)
    app.add_exception_handler(TranscriptNotFoundError, _not_found_handler)
    app.add_exception_handler(ResourceNotFoundError, _not_found_handler)
    app.add_exception_handler(InvalidFormatError, _invalid_format_handler)

    app.include_router(tools_router.router)
    app.include_router(resources_router.router)
    app.include_router(health_router.router)

    @app.get("/metrics")
    async def metrics():
        return metrics_response()

    return app


async def _extraction_error_handler(request: Request, exc: ExtractionError) -> JSONResponse:
    return JSONResponse(status_code=502, content={"detail": exc.to_dict()})


async def _not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": exc.to_dict()})


async def _invalid_format_handler(request: Request, exc: InvalidFormatError) -> JSONResponse:
    logger.error("transcript_file_invalid", extra={"video_id": exc.video_id, "path": exc.path})
    return JSONResponse(status_code=500, content={"detail": exc.to_dict()})


app = create_app()
