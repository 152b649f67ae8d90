from __future__ import annotations

from typing import Any, Dict


class TranscriptServiceError(RuntimeError):
    pass


class ExternalToolError(TranscriptServiceError):
    """yt-dlp exited non-zero, timed out, could not be started or printed garbage."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        stderr: str = "",
        *,
        timed_out: bool = False,
        missing_binary: bool = False,
    ) -> None:
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr = stderr
        self.timed_out = timed_out
        self.missing_binary = missing_binary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "yt-dlp execution failed",
            "exit_code": self.exit_code,
            "message": str(self),
            "stderr": self.stderr,
        }


class NoCaptionsAvailable(TranscriptServiceError):
    pass


class TranscriptNotFoundError(TranscriptServiceError):
    suggested_action = "Use the transcribe_youtube tool to create a transcript for this video first"

    def __init__(self, video_id: str) -> None:
        super().__init__(f"No transcript found for video ID: {video_id}")
        self.video_id = video_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": "transcript_not_found",
            "message": str(self),
            "video_id": self.video_id,
            "suggested_action": self.suggested_action,
        }


class InvalidFormatError(TranscriptServiceError):
    def __init__(self, path: str, reason: str, video_id: str | None = None) -> None:
        super().__init__(f"Invalid transcript file format: {reason}")
        self.path = path
        self.reason = reason
        self.video_id = video_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": "invalid_format",
            "message": str(self),
            "video_id": self.video_id,
            "path": self.path,
            "suggested_action": "Delete the file and run transcribe_youtube again",
        }


class ExtractionError(TranscriptServiceError):
    def __init__(
        self,
        error_type: str,
        message: str,
        video_id: str,
        suggested_action: str,
        original_error: str = "",
    ) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.video_id = video_id
        self.suggested_action = suggested_action
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": self.error_type,
            "message": str(self),
            "video_id": self.video_id,
            "suggested_action": self.suggested_action,
            "original_error": self.original_error,
        }


# yt-dlp exits with 2 when it rejects its own arguments, which for us means a bad url.
_EXIT_CODE_KINDS = {2: "invalid_url"}

_KIND_DETAILS = {
    "tool_not_installed": (
        "yt-dlp is not installed or not found in PATH.",
        "Install yt-dlp: pip install yt-dlp or download it from the GitHub releases.",
    ),
    "timeout": (
        "yt-dlp did not finish in time.",
        "Try again later; the video platform may be slow to respond.",
    ),
    "invalid_url": (
        "The URL is not a valid video URL.",
        "Check that the URL points to a single public video.",
    ),
    "private_video": (
        "This video is unavailable or private.",
        "Try a different public video.",
    ),
    "age_restricted": (
        "This video is age-restricted.",
        "Try a non-age-restricted video.",
    ),
    "region_restricted": (
        "This video is not available in this region.",
        "Try a video that is available worldwide.",
    ),
    "rate_limited": (
        "The video platform is rate limiting requests.",
        "Wait a few minutes before trying again.",
    ),
    "unknown": (
        "yt-dlp failed to process this video.",
        "Check if the URL is valid and the video is accessible.",
    ),
}

_SUBSTRING_KINDS = (
    ("rate_limited", ("http error 429", "too many requests")),
    ("age_restricted", ("age-restricted", "confirm your age", "sign in to confirm")),
    ("region_restricted", ("available in your country", "geo restrict", "geo-restrict")),
    ("private_video", ("private video", "unavailable", "private")),
    ("invalid_url", ("unsupported url", "is not a valid url", "incomplete youtube id")),
)


def _kind_from_text(text: str) -> str:
    lowered = text.lower()
    if "command not found" in lowered or "enoent" in lowered:
        return "tool_not_installed"
    for kind, needles in _SUBSTRING_KINDS:
        if any(needle in lowered for needle in needles):
            return kind
    return "unknown"


def classify_tool_error(exc: Exception, video_id: str) -> ExtractionError:
    if isinstance(exc, ExternalToolError):
        original = exc.stderr or str(exc)
        if exc.missing_binary:
            kind = "tool_not_installed"
        elif exc.timed_out:
            kind = "timeout"
        elif exc.exit_code in _EXIT_CODE_KINDS:
            kind = _EXIT_CODE_KINDS[exc.exit_code]
        else:
            kind = _kind_from_text(original)
    else:
        original = str(exc)
        kind = _kind_from_text(original)

    message, suggested_action = _KIND_DETAILS[kind]
    return ExtractionError(
        error_type=kind,
        message=message,
        video_id=video_id,
        suggested_action=suggested_action,
        original_error=original,
    )


class ResourceNotFoundError(TranscriptServiceError):
    def __init__(self, uri: str) -> None:
        super().__init__(f"Resource not found: {uri}")
        self.uri = uri

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_type": "resource_not_found",
            "message": str(self),
            "uri": self.uri,
            "suggested_action": "List resources to discover valid transcript uris",
        }
