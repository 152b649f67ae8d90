from __future__ import annotations

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, Field


class VideoMetadata(BaseModel):
    id: str = Field(..., min_length=1)
    title: str | None = None
    uploader: str | None = None
    duration: int | None = None


class TranscriptSegment(BaseModel):
    start: int = Field(..., ge=0, description="Start time in seconds")
    duration: int = Field(..., ge=0, description="Duration in seconds")
    text: str


class TranscriptMetadata(BaseModel):
    transcription_date: str = Field(..., description="ISO datetime when transcript was created")
    source: Literal["yt_dlp"] = "yt_dlp"
    language: str = "unknown"
    confidence: float = Field(..., ge=0.0, le=1.0)


class Transcript(BaseModel):
    video_id: str = Field(..., min_length=1)
    title: str | None = None
    uploader: str | None = None
    duration: int | None = None
    url: str
    transcript: List[TranscriptSegment] = Field(..., min_length=1)
    metadata: TranscriptMetadata


class TranscribeYoutubeRequest(BaseModel):
    url: str = Field(..., min_length=1, description="YouTube video URL")


class GetTranscriptRequest(BaseModel):
    video_id: str = Field(..., min_length=1, description="YouTube video ID")


class NextAction(BaseModel):
    tool: Literal["get_transcript"] = "get_transcript"
    parameters: GetTranscriptRequest


class TranscribeYoutubeResponse(BaseModel):
    video_id: str
    title: str
    uploader: str
    transcript_segments_count: int
    resource_uri: str
    next_action: NextAction


class ToolDefinition(BaseModel):
    name: str
    description: str
    input_schema: Dict[str, Any]


class ToolListResponse(BaseModel):
    tools: List[ToolDefinition]


class ProgressEvent(BaseModel):
    progress: int
    total: int
    message: str


class ProgressResponse(BaseModel):
    token: str
    events: List[ProgressEvent] = Field(default_factory=list)


class ResourceInfo(BaseModel):
    uri: str
    name: str
    description: str
    mime_type: str = "application/json"


class ResourceListResponse(BaseModel):
    resources: List[ResourceInfo] = Field(default_factory=list)
    next_cursor: str | None = None


class ResourceTemplate(BaseModel):
    uri_template: str
    name: str
    description: str
    mime_type: str = "application/json"
    json_schema: Dict[str, Any] = Field(default_factory=dict, alias="schema")

    model_config = {"populate_by_name": True}


class ResourceTemplateListResponse(BaseModel):
    resource_templates: List[ResourceTemplate]


class ReadResourceRequest(BaseModel):
    uri: str = Field(..., min_length=1)


class ResourceContents(BaseModel):
    uri: str
    mime_type: str = "application/json"
    text: str


class ReadResourceResponse(BaseModel):
    contents: List[ResourceContents]


class HealthResponse(BaseModel):
    status: str
    ytdlp_available: bool
    transcripts_dir: str
