from __future__ import annotations

import contextvars
import json
import logging
import time
import uuid
from datetime import datetime, timezone

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest


SERVICE_NAME = "transcript-service"

_request_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
_video_id_ctx: contextvars.ContextVar[str] = contextvars.ContextVar("video_id", default="")

# Optional ``extra=`` keys copied into the JSON line when a call sets them.
_EXTRA_FIELDS = ("stage", "status", "segments", "error_type", "path", "endpoint", "method", "duration_ms")


REQUEST_TOTAL = Counter(
    "http_requests_total",
    "HTTP requests by route and status",
    ["service", "endpoint", "method", "status"],
)
REQUEST_DURATION_MS = Histogram(
    "http_request_duration_ms",
    "HTTP request latency in milliseconds",
    ["service", "endpoint", "method"],
    buckets=(5, 25, 100, 500, 1000, 5000, 15000, 30000, 60000, 120000),
)
EXTRACTIONS_TOTAL = Counter(
    "transcript_extractions_total",
    "Transcript extraction requests by outcome",
    ["service", "outcome"],
)
YTDLP_CALLS_TOTAL = Counter(
    "ytdlp_calls_total",
    "yt-dlp invocations by operation and status",
    ["service", "operation", "status"],
)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": SERVICE_NAME,
            "message": record.getMessage(),
            "request_id": _request_id_ctx.get(),
            "video_id": getattr(record, "video_id", "") or _video_id_ctx.get(),
        }
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                payload[name] = getattr(record, name)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level_name: str = "INFO") -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level_name.upper(), logging.INFO))

    formatter = _JsonFormatter()
    if not root_logger.handlers:
        root_logger.addHandler(logging.StreamHandler())
    for handler in root_logger.handlers:
        handler.setFormatter(formatter)


def set_video_id(video_id: str | None) -> None:
    _video_id_ctx.set(video_id or "")


def observe_extraction(outcome: str) -> None:
    EXTRACTIONS_TOTAL.labels(service=SERVICE_NAME, outcome=outcome).inc()


def observe_ytdlp_call(operation: str, status: str) -> None:
    YTDLP_CALLS_TOTAL.labels(service=SERVICE_NAME, operation=operation, status=status).inc()


async def observability_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    _request_id_ctx.set(request_id)
    _video_id_ctx.set("")

    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        response.headers["X-Request-ID"] = request_id
        return response
    finally:
        duration_ms = int((time.perf_counter() - started) * 1000)
        endpoint = request.url.path
        REQUEST_TOTAL.labels(
            service=SERVICE_NAME, endpoint=endpoint, method=request.method, status=str(status_code)
        ).inc()
        REQUEST_DURATION_MS.labels(
            service=SERVICE_NAME, endpoint=endpoint, method=request.method
        ).observe(duration_ms)
        logging.getLogger(__name__).info(
            "request_completed",
            extra={
                "endpoint": endpoint,
                "method": request.method,
                "status": status_code,
                "duration_ms": duration_ms,
            },
        )


def metrics_response() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
