"""
Fixed-window request counter keyed by client (IP address, email, ...).

One instance lives on app.state and is handed to routes through a dependency.
"""
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict


@dataclass
class _Window:
    count: int
    expires_at: float


class RateLimitStore:
    def __init__(self, limit: int, window_seconds: int, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        """Count one attempt for key; False once the window's limit is exceeded."""
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or window.expires_at <= now:
                window = _Window(count=0, expires_at=now + self.window_seconds)
                self._windows[key] = window
            window.count += 1
            allowed = window.count <= self.limit
            self._prune(now)
        return allowed

    def retry_after(self, key: str) -> int:
        with self._lock:
            window = self._windows.get(key)
            if window is None:
                return 0
            return max(0, int(window.expires_at - self._clock()) + 1)

    def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def _prune(self, now: float) -> None:
        # caller holds the lock
        if len(self._windows) < 1024:
            return
        for key in [k for k, w in self._windows.items() if w.expires_at <= now]:
            del self._windows[key]
