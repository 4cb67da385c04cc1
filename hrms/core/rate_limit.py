from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import RLock

from hrms.core.exceptions import RateLimitExceededError


@dataclass(frozen=True)
class RateLimitRule:
    limit: int
    window_seconds: int


@dataclass
class _Window:
    started_at: float
    count: int


class RateLimiter:
    """Fixed-window request counter keyed by (bucket, client).

    State lives in this instance only and may be reset at any time; a
    multi-instance deployment has to back it with a shared store.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic, max_keys: int = 10_000) -> None:
        self.lock = RLock()
        self.clock = clock
        self.max_keys = max_keys
        self._windows: dict[tuple[str, str], _Window] = {}

    def hit(self, bucket: str, client: str, rule: RateLimitRule) -> int:
        """Count one request and return the remaining allowance.

        Raises RateLimitExceededError once the window's limit is spent.
        """
        now = self.clock()
        key = (bucket, client)
        with self.lock:
            window = self._windows.get(key)
            if window is None or now - window.started_at >= rule.window_seconds:
                self._evict_expired(now, rule.window_seconds)
                window = _Window(started_at=now, count=0)
                self._windows[key] = window

            if window.count >= rule.limit:
                retry_after = max(1, int(window.started_at + rule.window_seconds - now + 0.999))
                raise RateLimitExceededError(retry_after=retry_after)

            window.count += 1
            return rule.limit - window.count

    def reset(self) -> None:
        with self.lock:
            self._windows.clear()

    def _evict_expired(self, now: float, window_seconds: int) -> None:
        if len(self._windows) < self.max_keys:
            return
        expired = [k for k, w in self._windows.items() if now - w.started_at >= window_seconds]
        for key in expired:
            del self._windows[key]
        # still full: drop the oldest windows
        if len(self._windows) >= self.max_keys:
            oldest = sorted(self._windows.items(), key=lambda item: item[1].started_at)
            for key, _ in oldest[: len(self._windows) - self.max_keys + 1]:
                del self._windows[key]
