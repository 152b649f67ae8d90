from __future__ import annotations

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import Any, List
from urllib.parse import parse_qs, urlparse

from .errors import ExternalToolError, NoCaptionsAvailable
from .schemas import TranscriptSegment, VideoMetadata
from .transcript_parser import parse_captions
from .yt_dlp_runner import YtDlpRunner

logger = logging.getLogger(__name__)

# Only English variants are requested, so a parsed file is assumed to be English.
DEFAULT_CAPTION_LANGUAGE = "en"
UNKNOWN_LANGUAGE = "unknown"


@dataclass(frozen=True)
class CaptionResult:
    segments: List[TranscriptSegment] = field(default_factory=list)
    language: str = UNKNOWN_LANGUAGE


class YouTubeClient:
    def __init__(self, runner: YtDlpRunner) -> None:
        self._runner = runner

    async def fetch_metadata(self, url: str) -> VideoMetadata:
        info = await asyncio.to_thread(self._runner.extract_info, url)
        video_id = info.get("id")
        if not video_id:
            raise ExternalToolError("yt-dlp metadata has no video id", exit_code=0)
        video = VideoMetadata(
            id=str(video_id),
            title=info.get("title") or None,
            uploader=info.get("uploader") or info.get("channel") or None,
            duration=_floor_duration(info.get("duration")),
        )
        logger.info("metadata_fetched", extra={"video_id": video.id})
        return video

    async def fetch_captions(self, url: str, video_id: str) -> CaptionResult:
        try:
            content = await asyncio.to_thread(self._runner.download_captions, url, video_id)
        except NoCaptionsAvailable:
            logger.info("captions_not_available", extra={"video_id": video_id})
            return CaptionResult()
        if content is None:
            return CaptionResult()

        segments = parse_captions(content)
        logger.info(
            "captions_parsed",
            extra={"video_id": video_id, "segments": len(segments)},
        )
        if not segments:
            return CaptionResult()
        return CaptionResult(segments=segments, language=DEFAULT_CAPTION_LANGUAGE)


def extract_video_id(url: str) -> str:
    """Best-effort id from the url itself, used before yt-dlp has answered."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return "UNKNOWN"
    query_id = parse_qs(parsed.query).get("v")
    if query_id and query_id[0]:
        return query_id[0]
    tail = parsed.path.rstrip("/").split("/")[-1] if parsed.path else ""
    return tail or "UNKNOWN"


def _floor_duration(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return math.floor(value)
