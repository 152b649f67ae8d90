from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from ..errors import ExternalToolError, classify_tool_error
from ..observability import observe_extraction, set_video_id
from ..progress import PROGRESS_TOTAL, ProgressSink
from ..schemas import Transcript, TranscriptMetadata, TranscriptSegment, VideoMetadata
from ..store import TranscriptStore
from ..youtube_client import CaptionResult, YouTubeClient, extract_video_id


logger = logging.getLogger(__name__)

NO_TRANSCRIPT_TEXT = "No transcript available for this video"
EXTRACTED_CONFIDENCE = 0.95


class ExtractionState(str, Enum):
    FETCHING_METADATA = "fetching-metadata"
    FETCHING_CAPTIONS = "fetching-captions"
    ASSEMBLING = "assembling"
    PERSISTED = "persisted"
    FAILED = "failed"


@dataclass(frozen=True)
class ExtractionSummary:
    video_id: str
    title: str | None
    uploader: str | None
    segment_count: int
    storage_path: Path


def assemble_transcript(
    url: str,
    video: VideoMetadata,
    captions: CaptionResult,
    transcription_date: datetime | None = None,
) -> Transcript:
    segments = list(captions.segments)
    confidence = EXTRACTED_CONFIDENCE if segments else 0.0
    if not segments:
        segments = [TranscriptSegment(start=0, duration=0, text=NO_TRANSCRIPT_TEXT)]
    created = transcription_date or datetime.now(timezone.utc)
    return Transcript(
        video_id=video.id,
        title=video.title,
        uploader=video.uploader,
        duration=video.duration,
        url=url,
        transcript=segments,
        metadata=TranscriptMetadata(
            transcription_date=created.isoformat(),
            source="yt_dlp",
            language=captions.language,
            confidence=confidence,
        ),
    )


class TranscriptOrchestrator:
    """Runs metadata -> captions -> assemble -> persist for one url.

    A metadata failure aborts the request with a classified ``ExtractionError``.
    A caption failure only degrades the result to the placeholder segment.
    """

    def __init__(self, client: YouTubeClient, store: TranscriptStore) -> None:
        self._client = client
        self._store = store

    async def transcribe(self, url: str, progress: ProgressSink | None = None) -> ExtractionSummary:
        reporter = _ProgressReporter(progress)
        state = ExtractionState.FETCHING_METADATA
        await reporter.report(0, "Starting YouTube transcript extraction...")
        await reporter.report(10, "Getting video metadata...")
        try:
            video = await self._client.fetch_metadata(url)
        except ExternalToolError as exc:
            error = classify_tool_error(exc, extract_video_id(url))
            observe_extraction("failed")
            logger.warning(
                "metadata_fetch_failed",
                extra={
                    "stage": state.value,
                    "error_type": error.error_type,
                    "video_id": error.video_id,
                },
            )
            raise error from exc

        set_video_id(video.id)
        display_title = video.title or "Unknown Video"
        display_uploader = video.uploader or "Unknown"
        await reporter.report(30, f'Found video: "{display_title}" by {display_uploader}')

        state = ExtractionState.FETCHING_CAPTIONS
        await reporter.report(50, "Extracting subtitles...")
        try:
            captions = await self._client.fetch_captions(url, video.id)
        except (ExternalToolError, OSError, ValueError) as exc:
            logger.warning(
                "captions_fetch_failed",
                extra={"stage": state.value, "video_id": video.id},
                exc_info=exc,
            )
            captions = CaptionResult()

        state = ExtractionState.ASSEMBLING
        await reporter.report(70, "Processing subtitle file...")
        transcript = assemble_transcript(url, video, captions)

        await reporter.report(85, "Saving transcript to file...")
        try:
            path = await asyncio.to_thread(self._store.write, video.id, transcript)
        except Exception:
            observe_extraction("failed")
            logger.exception("transcript_save_failed", extra={"stage": state.value})
            raise
        state = ExtractionState.PERSISTED
        observe_extraction("persisted" if captions.segments else "no_captions")
        logger.info(
            "transcript_extraction_completed",
            extra={
                "stage": state.value,
                "video_id": video.id,
                "segments": len(captions.segments),
            },
        )
        await reporter.report(PROGRESS_TOTAL, f"Transcript saved to {path}")

        return ExtractionSummary(
            video_id=video.id,
            title=video.title,
            uploader=video.uploader,
            segment_count=len(captions.segments),
            storage_path=path,
        )

    async def get_transcript(self, video_id: str) -> Transcript:
        return await asyncio.to_thread(self._store.read, video_id)


class _ProgressReporter:
    def __init__(self, sink: ProgressSink | None) -> None:
        self._sink = sink
        self._last = -1

    async def report(self, progress: int, message: str) -> None:
        if self._sink is None or progress <= self._last:
            return
        self._last = progress
        try:
            await self._sink.emit(progress, PROGRESS_TOTAL, message)
        except Exception:
            logger.warning("progress_emit_failed", exc_info=True)
