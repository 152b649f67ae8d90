from __future__ import annotations

from typing import Dict, List

import pytest

from transcript_service.config import Settings
from transcript_service.errors import ExternalToolError, NoCaptionsAvailable
from transcript_service.store import TranscriptStore


TWO_CUE_VTT = """WEBVTT
Kind: captions
Language: en

00:00:00.000 --> 00:00:02.500 align:start position:0%
Welcome to the<00:00:00.800><c> channel</c>

00:00:02.500 --> 00:00:02.510 align:start position:0%
Welcome to the channel

00:00:02.510 --> 00:00:06.000 align:start position:0%
today we talk about sleep
"""


class FakeRunner:
    """Stands in for ProcessYtDlpRunner without spawning yt-dlp."""

    def __init__(
        self,
        info: Dict | None = None,
        captions: str | None = TWO_CUE_VTT,
        metadata_error: Exception | None = None,
        captions_error: Exception | None = None,
    ) -> None:
        self.info = info if info is not None else {
            "id": "abc123",
            "title": "T",
            "uploader": "U",
            "duration": 42,
        }
        self.captions = captions
        self.metadata_error = metadata_error
        self.captions_error = captions_error
        self.calls: List[tuple] = []

    def extract_info(self, url: str) -> Dict:
        self.calls.append(("extract_info", url))
        if self.metadata_error is not None:
            raise self.metadata_error
        return dict(self.info)

    def download_captions(self, url: str, video_id: str) -> str | None:
        self.calls.append(("download_captions", url, video_id))
        if self.captions_error is not None:
            raise self.captions_error
        return self.captions


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def make_runner():
    return FakeRunner


@pytest.fixture
def store(tmp_path) -> TranscriptStore:
    return TranscriptStore(tmp_path / "transcripts")


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(transcripts_dir=str(tmp_path / "transcripts"), ytdlp_binary="yt-dlp")


@pytest.fixture
def tool_failure() -> ExternalToolError:
    return ExternalToolError(
        "ERROR: [youtube] abc123: Private video. Sign in if you've been granted access",
        exit_code=1,
        stderr="ERROR: [youtube] abc123: Private video. Sign in if you've been granted access",
    )


@pytest.fixture
def no_captions() -> NoCaptionsAvailable:
    return NoCaptionsAvailable("There are no subtitles for the requested languages")


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
