"""Conversion between ``HH:MM:SS.mmm`` caption timestamps and seconds."""

from __future__ import annotations

import math


def _to_float(value: str) -> float:
    try:
        number = float(value.strip().replace(",", "."))
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_timecode(text: str) -> float:
    """Return seconds for ``HH:MM:SS.mmm``.

    Missing or malformed fields count as zero instead of raising, so
    ``"xx:01:02.500"`` parses as 62.5. A two-field ``MM:SS.mmm`` value is
    read with the hours field missing.
    """
    parts = (text or "").strip().split(":")
    while len(parts) < 3:
        parts.insert(0, "0")
    hours, minutes, seconds = parts[-3], parts[-2], parts[-1]
    return int(_to_float(hours)) * 3600 + int(_to_float(minutes)) * 60 + _to_float(seconds)


def format_timecode(seconds: float) -> str:
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    total_millis = int(round(seconds * 1000))
    hours, remainder = divmod(total_millis, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    secs, millis = divmod(remainder, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"
