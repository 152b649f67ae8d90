from __future__ import annotations

import pytest

from transcript_service.errors import ExternalToolError, classify_tool_error


@pytest.mark.parametrize(
    "stderr, expected",
    [
        ("ERROR: [youtube] abc123: Private video. Sign in if you've been granted access", "private_video"),
        ("ERROR: [youtube] abc123: Video unavailable", "private_video"),
        ("ERROR: Sign in to confirm your age. This video may be inappropriate", "age_restricted"),
        (
            "ERROR: The uploader has not made this video available in your country",
            "region_restricted",
        ),
        ("ERROR: Unable to download webpage: HTTP Error 429: Too Many Requests", "rate_limited"),
        ("ERROR: Unsupported URL: https://example.com/", "invalid_url"),
        ("ERROR: something nobody anticipated", "unknown"),
    ],
)
def test_stderr_heuristics(stderr: str, expected: str) -> None:
    error = classify_tool_error(ExternalToolError(stderr, exit_code=1, stderr=stderr), "abc123")
    assert error.error_type == expected
    assert error.video_id == "abc123"
    assert error.original_error == stderr
    assert error.suggested_action


def test_structured_signals_win_over_text() -> None:
    missing = ExternalToolError("yt-dlp binary not found", missing_binary=True, stderr="private")
    timed_out = ExternalToolError("timed out", timed_out=True, stderr="Video unavailable")
    usage = ExternalToolError("bad options", exit_code=2, stderr="Usage: yt-dlp [OPTIONS] URL")

    assert classify_tool_error(missing, "x").error_type == "tool_not_installed"
    assert classify_tool_error(timed_out, "x").error_type == "timeout"
    assert classify_tool_error(usage, "x").error_type == "invalid_url"


def test_extraction_error_serializes_for_callers() -> None:
    error = classify_tool_error(ExternalToolError("boom", exit_code=1, stderr="boom"), "abc123")
    payload = error.to_dict()
    assert set(payload) == {"error_type", "message", "video_id", "suggested_action", "original_error"}
