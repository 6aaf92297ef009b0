"""Fixed-window, in-memory request rate limiting keyed by client address."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from fastapi import Request


@dataclass
class _Window:
    started: float
    count: int


class FixedWindowRateLimiter:
    """Allow at most ``max_requests`` per key in each window."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._windows: dict[str, _Window] = {}

    def hit(self, key: str) -> bool:
        """Record one request for ``key``; return False if it is over the limit."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.started >= self.window_seconds:
                self._prune(now)
                window = _Window(started=now, count=0)
                self._windows[key] = window
            window.count += 1
            return window.count <= self.max_requests

    def _prune(self, now: float) -> None:
        expired = [
            key
            for key, window in self._windows.items()
            if now - window.started >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"
