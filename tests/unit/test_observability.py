from __future__ import annotations

import json
import logging

from transcript_service.observability import _JsonFormatter, set_video_id


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "transcript_service.store", logging.INFO, __file__, 1, "transcript_saved", None, None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_line_carries_context_video_id() -> None:
    set_video_id("abc123")
    try:
        payload = json.loads(_JsonFormatter().format(_record(path="/data/abc123.json")))
    finally:
        set_video_id(None)

    assert payload["message"] == "transcript_saved"
    assert payload["service"] == "transcript-service"
    assert payload["video_id"] == "abc123"
    assert payload["path"] == "/data/abc123.json"
    assert "segments" not in payload


def test_explicit_video_id_wins_over_context() -> None:
    set_video_id("from-context")
    try:
        payload = json.loads(_JsonFormatter().format(_record(video_id="explicit")))
    finally:
        set_video_id(None)

    assert payload["video_id"] == "explicit"
