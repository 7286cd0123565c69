import threading
import time
from typing import Callable, Dict, Tuple

from fastapi import Request

from paperpilot.errors import PaperPilotError


class TooManyRequests(PaperPilotError):
    status_code = 429

    def __init__(self):
        super().__init__("Too many requests. Please wait a moment.")


class RateLimiter:
    """Fixed-window request counter keyed by client identity.

    Each key gets `limit` hits per `window` seconds; the window starts at the
    key's first hit. State is in-process only.
    """

    # Expired windows are swept once this many keys are tracked
    SWEEP_AT = 10000

    def __init__(self, limit: int = 30, window: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window = window
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        """Count one request for `key`; False once the key is over its limit."""
        now = self.clock()
        with self._lock:
            if len(self._windows) >= self.SWEEP_AT:
                self._sweep(now)
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
            return count <= self.limit

    def _sweep(self, now: float) -> None:
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window]
        for key in expired:
            del self._windows[key]


def client_identity(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def enforce_rate_limit(request: Request) -> None:
    """Route dependency shared by every /analyze endpoint."""
    limiter: RateLimiter = request.app.state.rate_limiter
    if not limiter.hit(client_identity(request)):
        raise TooManyRequests()
