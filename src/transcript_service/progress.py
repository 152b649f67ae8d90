from __future__ import annotations

import asyncio
import logging
from collections import OrderedDict
from typing import List, Protocol

from .schemas import ProgressEvent

logger = logging.getLogger(__name__)

PROGRESS_TOTAL = 100


class ProgressSink(Protocol):
    async def emit(self, progress: int, total: int, message: str) -> None:
        ...


class ProgressTracker:
    """Keeps the progress events of recent requests, keyed by the caller's token.

    Oldest tokens are evicted once ``max_tokens`` is exceeded.
    """

    def __init__(self, max_tokens: int = 1000) -> None:
        self._max_tokens = max_tokens
        self._events: "OrderedDict[str, List[ProgressEvent]]" = OrderedDict()
        self._lock = asyncio.Lock()

    def sink(self, token: str | None) -> ProgressSink | None:
        if not token:
            return None
        return _TokenSink(self, token)

    async def record(self, token: str, event: ProgressEvent) -> None:
        async with self._lock:
            events = self._events.setdefault(token, [])
            self._events.move_to_end(token)
            events.append(event)
            while len(self._events) > self._max_tokens:
                self._events.popitem(last=False)

    def events(self, token: str) -> List[ProgressEvent] | None:
        events = self._events.get(token)
        return list(events) if events is not None else None


class _TokenSink:
    def __init__(self, tracker: ProgressTracker, token: str) -> None:
        self._tracker = tracker
        self._token = token

    async def emit(self, progress: int, total: int, message: str) -> None:
        logger.debug("progress", extra={"stage": message, "status": progress})
        await self._tracker.record(
            self._token,
            ProgressEvent(progress=progress, total=total, message=message),
        )
