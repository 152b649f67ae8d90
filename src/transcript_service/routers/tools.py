from __future__ import annotations

from typing import List

from fastapi import APIRouter, Header, HTTPException, Request

from ..schemas import (
    GetTranscriptRequest,
    NextAction,
    ProgressResponse,
    ToolDefinition,
    ToolListResponse,
    TranscribeYoutubeRequest,
    TranscribeYoutubeResponse,
    Transcript,
)


router = APIRouter(tags=["tools"])

TRANSCRIBE_YOUTUBE = "transcribe_youtube"
GET_TRANSCRIPT = "get_transcript"

TOOLS: List[ToolDefinition] = [
    ToolDefinition(
        name=TRANSCRIBE_YOUTUBE,
        description=(
            "Extract transcript from YouTube video with progress reporting "
            "and save it to the transcripts folder"
        ),
        input_schema=TranscribeYoutubeRequest.model_json_schema(),
    ),
    ToolDefinition(
        name=GET_TRANSCRIPT,
        description="Return the full saved transcript for a video id",
        input_schema=GetTranscriptRequest.model_json_schema(),
    ),
]


@router.get("/tools", response_model=ToolListResponse)
async def list_tools() -> ToolListResponse:
    return ToolListResponse(tools=TOOLS)


@router.post(f"/tools/{TRANSCRIBE_YOUTUBE}", response_model=TranscribeYoutubeResponse)
async def transcribe_youtube(
    payload: TranscribeYoutubeRequest,
    request: Request,
    x_progress_token: str | None = Header(default=None),
) -> TranscribeYoutubeResponse:
    orchestrator = request.app.state.orchestrator
    sink = request.app.state.progress.sink(x_progress_token)
    summary = await orchestrator.transcribe(payload.url, progress=sink)
    return TranscribeYoutubeResponse(
        video_id=summary.video_id,
        title=summary.title or "Unknown Video",
        uploader=summary.uploader or "Unknown",
        transcript_segments_count=summary.segment_count,
        resource_uri=summary.storage_path.resolve().as_uri(),
        next_action=NextAction(parameters=GetTranscriptRequest(video_id=summary.video_id)),
    )


@router.post(f"/tools/{GET_TRANSCRIPT}", response_model=Transcript)
async def get_transcript(payload: GetTranscriptRequest, request: Request) -> Transcript:
    return await request.app.state.orchestrator.get_transcript(payload.video_id)


@router.get("/progress/{token}", response_model=ProgressResponse)
async def get_progress(token: str, request: Request) -> ProgressResponse:
    events = request.app.state.progress.events(token)
    if events is None:
        raise HTTPException(status_code=404, detail="Unknown progress token")
    return ProgressResponse(token=token, events=events)
