from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _env_list(name: str, default: str) -> List[str]:
    value = os.getenv(name) or default
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    transcripts_dir: str = field(default_factory=lambda: os.getenv("TRANSCRIPTS_DIR", "./transcripts"))

    ytdlp_binary: str = field(default_factory=lambda: os.getenv("YTDLP_BINARY", "yt-dlp"))
    metadata_timeout: float = field(default_factory=lambda: _env_float("YTDLP_METADATA_TIMEOUT", 30.0))
    captions_timeout: float = field(default_factory=lambda: _env_float("YTDLP_CAPTIONS_TIMEOUT", 45.0))
    socket_timeout: int = field(default_factory=lambda: _env_int("YTDLP_SOCKET_TIMEOUT", 30))
    sub_langs: List[str] = field(default_factory=lambda: _env_list("YTDLP_SUB_LANGS", "en,en-US,en-GB"))
    captions_work_dir: str | None = field(default_factory=lambda: os.getenv("CAPTIONS_WORK_DIR") or None)

    resource_page_size: int = field(default_factory=lambda: max(_env_int("RESOURCE_PAGE_SIZE", 10), 1))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    app_host: str = field(default_factory=lambda: os.getenv("APP_HOST", "0.0.0.0"))
    app_port: int = field(default_factory=lambda: _env_int("APP_PORT", 8003))
