"""
Fixed-window request limiter.

Counters live in this worker process only; each Functions worker keeps its
own windows. Call ``rate_limiter.reset()`` to drop every window.
"""
import math
import os
import threading
import time
from functools import wraps
from typing import Callable, Optional

import azure.functions as func

from utils.responses import fail


class FixedWindowRateLimiter:
    def __init__(self, points: int = 100, duration: int = 60, clock: Callable[[], float] = time.monotonic):
        self.points = points
        self.duration = duration
        self._clock = clock
        self._windows: dict[str, tuple[float, int]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def consume(self, key: str) -> tuple[bool, int]:
        """
        Count one request for ``key``.

        Returns:
            (allowed, retry_after_seconds) - retry_after is 0 when allowed
        """
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.duration:
                self._sweep(now)
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.duration:
                started, count = now, 0
            count += 1
            self._windows[key] = (started, count)
            if count <= self.points:
                return True, 0
            remaining = self.duration - (now - started)
            return False, max(1, math.ceil(remaining))

    def _sweep(self, now: float) -> None:
        # drop windows of clients that have not come back since they expired
        self._windows = {
            k: w for k, w in self._windows.items() if now - w[0] < self.duration
        }
        self._last_sweep = now

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)


rate_limiter = FixedWindowRateLimiter(
    points=int(os.getenv("RATE_LIMIT_POINTS", "100")),
    duration=int(os.getenv("RATE_LIMIT_WINDOW", "60")),
)


def client_address(req: func.HttpRequest) -> str:
    forwarded = req.headers.get("X-Forwarded-For")
    if forwarded:
        # Azure front ends append "ip:port" or "[ipv6]:port"
        first = forwarded.split(",")[0].strip()
        if first.startswith("[") and "]" in first:
            first = first[1:first.index("]")]
        elif first.count(":") == 1:
            first = first.split(":")[0]
        return first or "unknown"
    return req.headers.get("X-Client-IP") or "unknown"


def rate_limited(f: Callable) -> Callable:
    """
    Decorator that rejects a client once it exceeds the window budget
    """
    @wraps(f)
    def decorated_function(req: func.HttpRequest) -> func.HttpResponse:
        if req.method == "OPTIONS":
            return f(req)

        allowed, retry_after = rate_limiter.consume(client_address(req))
        if not allowed:
            return fail(
                "Too many requests. Please try again later.",
                429,
                headers={"Retry-After": str(retry_after)},
                retryAfter=retry_after,
            )
        return f(req)

    return decorated_function
