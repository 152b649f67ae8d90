from __future__ import annotations

import html
import math
import re
from typing import List

from .schemas import TranscriptSegment
from .timecode import parse_timecode

_TIME_RE = re.compile(r"\d{1,2}:\d{2}(?::\d{2})?[\.,]\d{3}")
_TAG_RE = re.compile(r"<[^>]*>")

# Auto-captions repeat the previous line in a ~10ms cue while scrolling.
MIN_CUE_DURATION = 0.010


def parse_captions(content: str) -> List[TranscriptSegment]:
    if not content:
        return []
    segments: List[TranscriptSegment] = []
    last_text: str | None = None
    last_end = 0.0

    for start, end, text in _parse_cues(_strip_header(content)):
        if not text:
            continue
        if start < 0 or end - start <= MIN_CUE_DURATION:
            continue
        if text == last_text and abs(start - last_end) <= MIN_CUE_DURATION:
            continue
        segments.append(
            TranscriptSegment(
                start=math.floor(start),
                duration=math.floor(end - start),
                text=text,
            )
        )
        last_text = text
        last_end = end

    return segments


def is_timing_line(line: str) -> bool:
    return "-->" in line and _TIME_RE.search(line) is not None


def _strip_header(content: str) -> str:
    lines = content.lstrip("\ufeff").splitlines()
    if lines and lines[0].strip().upper().startswith("WEBVTT"):
        lines = lines[1:]
    return "\n".join(lines)


def _parse_cues(content: str) -> List[tuple[float, float, str]]:
    lines = content.splitlines()
    cues: List[tuple[float, float, str]] = []
    index = 0

    while index < len(lines):
        line = lines[index].strip()
        if not is_timing_line(line):
            index += 1
            continue
        start, end = _parse_time_range(line)
        index += 1
        text_lines: List[str] = []
        while index < len(lines) and lines[index].strip():
            if is_timing_line(lines[index].strip()):
                break
            text_lines.append(lines[index].strip())
            index += 1
        cues.append((start, end, _normalize_text(" ".join(text_lines))))

    return cues


def _parse_time_range(line: str) -> tuple[float, float]:
    start_raw, end_raw = line.split("-->", 1)
    start = parse_timecode(start_raw.strip())
    # Cue settings such as "align:start position:0%" follow the end time.
    end_tokens = end_raw.strip().split()
    end = parse_timecode(end_tokens[0]) if end_tokens else 0.0
    return start, end


def _normalize_text(value: str) -> str:
    if not value:
        return ""
    value = _TAG_RE.sub("", value)
    value = html.unescape(value)
    value = re.sub(r"\s+", " ", value)
    return value.strip()
