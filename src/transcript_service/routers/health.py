from __future__ import annotations

import shutil

from fastapi import APIRouter, Request

from ..schemas import HealthResponse


router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> HealthResponse:
    settings = request.app.state.settings
    ytdlp_available = shutil.which(settings.ytdlp_binary) is not None
    return HealthResponse(
        status="healthy" if ytdlp_available else "degraded",
        ytdlp_available=ytdlp_available,
        transcripts_dir=str(request.app.state.store.directory.resolve()),
    )
