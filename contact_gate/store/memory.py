"""In-process fixed-window rate-limit store."""

from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

import structlog

from contact_gate.store.base import WindowState

logger = structlog.get_logger()


@dataclass
class _Window:
    start: float
    count: int = 0


class MemoryWindowStore:
    """Per-process window map.

    Check-and-increment runs under a lock with no await in between, so the
    store is safe on the event loop and under threaded workers alike. State
    is not shared between processes; use the Redis store for that.
    """

    def __init__(
        self,
        max_requests: int = 5,
        window_seconds: int = 900,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()
        self._last_prune = clock()

    def _expired(self, window: _Window, now: float) -> bool:
        return now > window.start + self.window_seconds

    def _prune(self, now: float) -> None:
        """Drop expired windows, at most once per window length."""
        if now - self._last_prune < self.window_seconds:
            return
        stale = [key for key, window in self._windows.items() if self._expired(window, now)]
        for key in stale:
            del self._windows[key]
        self._last_prune = now
        if stale:
            logger.debug("rate_limit_windows_pruned", count=len(stale))

    def check(self, key: str) -> WindowState:
        now = self._clock()
        with self._lock:
            self._prune(now)
            window = self._windows.get(key)
            if window is None or self._expired(window, now):
                window = _Window(start=now)
                self._windows[key] = window

            admitted = window.count < self.max_requests
            if admitted:
                window.count += 1

            reset_in = max(0, math.ceil(window.start + self.window_seconds - now))
            return WindowState(
                admitted=admitted,
                limit=self.max_requests,
                count=window.count,
                reset_in=reset_in,
            )

    async def hit(self, key: str) -> WindowState:
        return self.check(key)

    async def count(self, key: str) -> int:
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or self._expired(window, now):
                return 0
            return window.count

    async def startup(self) -> None:
        logger.info(
            "rate_limit_store_ready",
            backend="memory",
            max_requests=self.max_requests,
            window_seconds=self.window_seconds,
        )

    async def shutdown(self) -> None:
        with self._lock:
            self._windows.clear()
