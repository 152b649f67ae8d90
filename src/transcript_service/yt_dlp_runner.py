from __future__ import annotations

import json
import logging
import os
import re
import subprocess
import tempfile
import uuid
from glob import glob
from typing import Dict, List, Protocol, Sequence

from .config import Settings
from .errors import ExternalToolError, NoCaptionsAvailable
from .observability import observe_ytdlp_call

logger = logging.getLogger(__name__)

_NO_SUBTITLES_MARKERS = ("no automatic subtitles", "no subtitles")
_UNSAFE_FILENAME_RE = re.compile(r"[^\w\-]")


class YtDlpRunner(Protocol):
    def extract_info(self, url: str) -> Dict:
        ...

    def download_captions(self, url: str, video_id: str) -> str | None:
        ...


class ProcessYtDlpRunner:
    def __init__(
        self,
        binary: str = "yt-dlp",
        sub_langs: Sequence[str] = ("en", "en-US", "en-GB"),
        socket_timeout: int = 30,
        metadata_timeout: float = 30.0,
        captions_timeout: float = 45.0,
        work_dir: str | None = None,
    ) -> None:
        self._binary = binary
        self._sub_langs = list(sub_langs)
        self._socket_timeout = socket_timeout
        self._metadata_timeout = metadata_timeout
        self._captions_timeout = captions_timeout
        self._work_dir = work_dir

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProcessYtDlpRunner":
        return cls(
            binary=settings.ytdlp_binary,
            sub_langs=settings.sub_langs,
            socket_timeout=settings.socket_timeout,
            metadata_timeout=settings.metadata_timeout,
            captions_timeout=settings.captions_timeout,
            work_dir=settings.captions_work_dir,
        )

    def extract_info(self, url: str) -> Dict:
        args = [
            "--dump-json",
            "--no-download",
            "--socket-timeout",
            str(self._socket_timeout),
            url,
        ]
        result = self._run(args, self._metadata_timeout, operation="metadata")
        try:
            info = json.loads(result)
        except json.JSONDecodeError as exc:
            raise ExternalToolError("yt-dlp returned invalid JSON", exit_code=0) from exc
        if not isinstance(info, dict):
            raise ExternalToolError("yt-dlp returned unexpected JSON", exit_code=0)
        return info

    def download_captions(self, url: str, video_id: str) -> str | None:
        """Write subtitles for ``url`` into a private temp dir and return the VTT text.

        Returns ``None`` when yt-dlp succeeded but produced no subtitle file.
        Raises ``NoCaptionsAvailable`` when yt-dlp reports there are none.
        """
        if self._work_dir:
            os.makedirs(self._work_dir, exist_ok=True)
        safe_id = _UNSAFE_FILENAME_RE.sub("_", video_id) or "video"
        prefix = f"temp_{safe_id}_{uuid.uuid4().hex[:12]}"

        with tempfile.TemporaryDirectory(prefix="captions_", dir=self._work_dir) as tmpdir:
            args = [
                "--write-auto-subs",
                "--write-subs",
                "--sub-langs",
                ",".join(self._sub_langs),
                "--sub-format",
                "vtt",
                "--skip-download",
                "--socket-timeout",
                str(self._socket_timeout),
                "--output",
                os.path.join(tmpdir, f"{prefix}.%(ext)s"),
                url,
            ]
            self._run(args, self._captions_timeout, operation="captions")

            subtitle_path = self._find_subtitle_file(tmpdir, prefix)
            if subtitle_path is None:
                logger.info("captions_file_missing", extra={"video_id": video_id})
                return None
            try:
                with open(subtitle_path, "r", encoding="utf-8", errors="replace") as handle:
                    return handle.read()
            finally:
                os.remove(subtitle_path)

    def _find_subtitle_file(self, directory: str, prefix: str) -> str | None:
        for language in self._sub_langs:
            candidate = os.path.join(directory, f"{prefix}.{language}.vtt")
            if os.path.exists(candidate):
                return candidate
        matches: List[str] = sorted(
            path
            for path in glob(os.path.join(directory, "*.vtt"))
            if os.path.basename(path).startswith(prefix)
        )
        return matches[0] if matches else None

    def _run(self, args: list[str], timeout: float, operation: str) -> str:
        command = [self._binary, *args]
        try:
            completed = subprocess.run(
                command,
                check=True,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError as exc:
            observe_ytdlp_call(operation, "missing_binary")
            raise ExternalToolError(
                "yt-dlp binary not found",
                exit_code=None,
                stderr=str(exc),
                missing_binary=True,
            ) from exc
        except subprocess.TimeoutExpired as exc:
            observe_ytdlp_call(operation, "timeout")
            raise ExternalToolError(
                f"yt-dlp timed out after {timeout:g}s",
                exit_code=None,
                stderr=_decode(exc.stderr).strip(),
                timed_out=True,
            ) from exc
        except subprocess.CalledProcessError as exc:
            stderr = _decode(exc.stderr).strip()
            if operation == "captions" and any(
                marker in stderr.lower() for marker in _NO_SUBTITLES_MARKERS
            ):
                observe_ytdlp_call(operation, "no_subtitles")
                raise NoCaptionsAvailable(stderr) from exc
            observe_ytdlp_call(operation, "error")
            message = stderr.splitlines()[-1] if stderr else "yt-dlp command failed"
            raise ExternalToolError(message, exit_code=exc.returncode, stderr=stderr) from exc
        observe_ytdlp_call(operation, "ok")
        return completed.stdout


def _decode(value: str | bytes | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
