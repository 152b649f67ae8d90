from __future__ import annotations

import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError

from .errors import InvalidFormatError, TranscriptNotFoundError
from .schemas import Transcript

logger = logging.getLogger(__name__)

TRANSCRIPT_SUFFIX = ".json"


class TranscriptStore:
    """One pretty-printed ``<video_id>.json`` file per transcript.

    No locking: concurrent writes for the same id race and the last
    ``os.replace`` wins. Readers never see a half-written file.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, video_id: str) -> Path:
        if not _is_valid_key(video_id):
            raise TranscriptNotFoundError(video_id)
        return self._directory / f"{video_id}{TRANSCRIPT_SUFFIX}"

    def write(self, video_id: str, transcript: Transcript | Dict[str, Any]) -> Path:
        if not _is_valid_key(video_id):
            raise InvalidFormatError(
                str(self._directory), f"unsafe video id for storage: {video_id!r}", video_id
            )
        path = self._directory / f"{video_id}{TRANSCRIPT_SUFFIX}"
        try:
            record = Transcript.model_validate(transcript)
        except ValidationError as exc:
            raise InvalidFormatError(str(path), f"validation failed: {exc}", video_id) from exc

        self._directory.mkdir(parents=True, exist_ok=True)
        content = json.dumps(record.model_dump(mode="json"), indent=2, ensure_ascii=False)
        tmp_path = self._directory / f".{video_id}.{uuid.uuid4().hex}.tmp"
        try:
            tmp_path.write_text(content, encoding="utf-8")
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()

        logger.info("transcript_saved", extra={"video_id": video_id, "path": str(path)})
        return path

    def read(self, video_id: str) -> Transcript:
        path = self.path_for(video_id)
        if not path.is_file():
            raise TranscriptNotFoundError(video_id)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidFormatError(str(path), f"invalid JSON: {exc}", video_id) from exc
        try:
            return Transcript.model_validate(data)
        except ValidationError as exc:
            logger.warning("transcript_validation_failed", extra={"video_id": video_id, "path": str(path)})
            raise InvalidFormatError(str(path), f"validation failed: {exc}", video_id) from exc

    def exists(self, video_id: str) -> bool:
        if not _is_valid_key(video_id):
            return False
        return (self._directory / f"{video_id}{TRANSCRIPT_SUFFIX}").is_file()

    def list(self) -> List[str]:
        """Stored ids in directory order; sort if you need determinism."""
        if not self._directory.is_dir():
            return []
        ids: List[str] = []
        for entry in os.scandir(self._directory):
            if entry.name.startswith(".") or not entry.name.endswith(TRANSCRIPT_SUFFIX):
                continue
            if entry.is_file():
                ids.append(entry.name[: -len(TRANSCRIPT_SUFFIX)])
        return ids


def _is_valid_key(video_id: str) -> bool:
    if not video_id or video_id in {".", ".."} or video_id.startswith("."):
        return False
    return not any(sep in video_id for sep in ("/", "\\", "\x00"))
