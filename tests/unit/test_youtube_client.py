from __future__ import annotations

import pytest

from transcript_service.errors import ExternalToolError
from transcript_service.youtube_client import YouTubeClient, extract_video_id


@pytest.mark.anyio
async def test_fetch_metadata_maps_fields(make_runner) -> None:
    runner = make_runner(info={"id": "abc123", "title": "T", "uploader": "U", "duration": 42.9})
    video = await YouTubeClient(runner).fetch_metadata("https://youtu.be/abc123")

    assert video.id == "abc123"
    assert video.title == "T"
    assert video.uploader == "U"
    assert video.duration == 42


@pytest.mark.anyio
async def test_fetch_metadata_leaves_missing_fields_empty(make_runner) -> None:
    runner = make_runner(info={"id": "abc123", "channel": "Channel"})
    video = await YouTubeClient(runner).fetch_metadata("https://youtu.be/abc123")

    assert video.title is None
    assert video.uploader == "Channel"
    assert video.duration is None


@pytest.mark.anyio
async def test_fetch_metadata_without_id_fails(make_runner) -> None:
    runner = make_runner(info={"title": "T"})
    with pytest.raises(ExternalToolError):
        await YouTubeClient(runner).fetch_metadata("https://youtu.be/abc123")


@pytest.mark.anyio
async def test_fetch_captions_parses_segments(fake_runner) -> None:
    result = await YouTubeClient(fake_runner).fetch_captions("https://youtu.be/abc123", "abc123")

    assert result.language == "en"
    assert [segment.text for segment in result.segments] == [
        "Welcome to the channel",
        "today we talk about sleep",
    ]
    assert ("download_captions", "https://youtu.be/abc123", "abc123") in fake_runner.calls


@pytest.mark.anyio
async def test_no_captions_is_an_empty_result(make_runner, no_captions) -> None:
    runner = make_runner(captions_error=no_captions)
    result = await YouTubeClient(runner).fetch_captions("https://youtu.be/abc123", "abc123")

    assert result.segments == []
    assert result.language == "unknown"


@pytest.mark.anyio
async def test_missing_caption_file_is_an_empty_result(make_runner) -> None:
    runner = make_runner(captions=None)
    result = await YouTubeClient(runner).fetch_captions("https://youtu.be/abc123", "abc123")

    assert result.segments == []
    assert result.language == "unknown"


@pytest.mark.anyio
async def test_caption_tool_error_propagates(make_runner, tool_failure) -> None:
    runner = make_runner(captions_error=tool_failure)
    with pytest.raises(ExternalToolError):
        await YouTubeClient(runner).fetch_captions("https://youtu.be/abc123", "abc123")


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=10", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://www.youtube.com/shorts/abc123/", "abc123"),
        ("not a url", "not a url"),
        ("", "UNKNOWN"),
    ],
)
def test_extract_video_id(url: str, expected: str) -> None:
    assert extract_video_id(url) == expected
