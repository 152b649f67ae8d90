from __future__ import annotations

import base64
import binascii
import json
import logging
from pathlib import Path
from typing import List
from urllib.parse import unquote, urlparse

from .errors import InvalidFormatError, ResourceNotFoundError, TranscriptNotFoundError
from .schemas import (
    ReadResourceResponse,
    ResourceContents,
    ResourceInfo,
    ResourceListResponse,
    ResourceTemplate,
    Transcript,
)
from .store import TRANSCRIPT_SUFFIX, TranscriptStore
from .timecode import format_timecode

logger = logging.getLogger(__name__)

MIME_TYPE = "application/json"


def encode_cursor(offset: int) -> str:
    return base64.b64encode(str(offset).encode("ascii")).decode("ascii")


def decode_cursor(cursor: str | None) -> int:
    if not cursor:
        return 0
    try:
        offset = int(base64.b64decode(cursor, validate=True).decode("ascii"))
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return 0
    return max(offset, 0)


def resource_uri(store: TranscriptStore, video_id: str) -> str:
    return store.path_for(video_id).resolve().as_uri()


def list_resources(
    store: TranscriptStore,
    cursor: str | None = None,
    page_size: int = 10,
) -> ResourceListResponse:
    """One page of stored transcripts, rebuilt from the store on every call."""
    video_ids = sorted(store.list())
    start = decode_cursor(cursor)
    end = min(start + page_size, len(video_ids))

    resources: List[ResourceInfo] = []
    for video_id in video_ids[start:end]:
        try:
            transcript = store.read(video_id)
        except (InvalidFormatError, TranscriptNotFoundError) as exc:
            logger.warning("resource_skipped", extra={"video_id": video_id, "error_type": type(exc).__name__})
            continue
        resources.append(_describe(store, transcript))

    next_cursor = encode_cursor(end) if end < len(video_ids) else None
    return ResourceListResponse(resources=resources, next_cursor=next_cursor)


def resource_template(store: TranscriptStore) -> ResourceTemplate:
    return ResourceTemplate(
        uri_template=f"file://{store.directory.resolve()}/{{video_id}}{TRANSCRIPT_SUFFIX}",
        name="YouTube Transcript",
        description="JSON file containing YouTube video transcript data with metadata",
        mime_type=MIME_TYPE,
        json_schema=Transcript.model_json_schema(),
    )


def read_resource(store: TranscriptStore, uri: str) -> ReadResourceResponse:
    video_id = _video_id_from_uri(store, uri)
    try:
        transcript = store.read(video_id)
    except TranscriptNotFoundError as exc:
        raise ResourceNotFoundError(uri) from exc
    text = json.dumps(transcript.model_dump(mode="json"), indent=2, ensure_ascii=False)
    return ReadResourceResponse(contents=[ResourceContents(uri=uri, mime_type=MIME_TYPE, text=text)])


def _describe(store: TranscriptStore, transcript: Transcript) -> ResourceInfo:
    title = transcript.title or "Unknown Video"
    uploader = transcript.uploader or "Unknown"
    description = f"YouTube transcript from {uploader} ({transcript.video_id})"
    if transcript.duration is not None:
        description += f", length {format_timecode(transcript.duration)}"
    return ResourceInfo(
        uri=resource_uri(store, transcript.video_id),
        name=f"{title} - Transcript",
        description=description,
        mime_type=MIME_TYPE,
    )


def _video_id_from_uri(store: TranscriptStore, uri: str) -> str:
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ResourceNotFoundError(uri)
    path = Path(unquote(parsed.path)).resolve()
    if path.parent != store.directory.resolve() or path.suffix != TRANSCRIPT_SUFFIX:
        raise ResourceNotFoundError(uri)
    return path.stem
