from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

from hunterhunted.errors import RateLimitError

logger = logging.getLogger(__name__)


@dataclass
class RateWindow:
    count: int
    reset_time: int


class RateLimiter:
    """Fixed-window request counter keyed by source (usually the client address)."""

    def __init__(self, *, limit: int, window_ms: int):
        self.limit = limit
        self.window_ms = window_ms
        self._windows: dict[str, RateWindow] = {}
        self._lock = threading.Lock()

    def check(self, source: str, now: int) -> None:
        """Count one request from ``source``, or raise RateLimitError if over the limit."""
        with self._lock:
            window = self._windows.get(source)
            if window is None or now > window.reset_time:
                self._windows[source] = RateWindow(count=1, reset_time=now + self.window_ms)
                return
            if window.count >= self.limit:
                logger.warning('Rate limit exceeded for %s', source)
                raise RateLimitError()
            window.count += 1

    def prune(self, now: int) -> None:
        """Forget windows whose reset time has passed."""
        with self._lock:
            expired = [source for source, w in self._windows.items() if now > w.reset_time]
            for source in expired:
                del self._windows[source]

    def __len__(self) -> int:
        return len(self._windows)
