"""
Basic in-memory rate limiter.

State lives in the process, so limits are not shared across workers or
server instances.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import HTTPException, Request

from studentpath.core.config import get_settings

settings = get_settings()


@dataclass
class _Window:
    count: int
    last_reset: float


class RateLimiter:
    """Fixed-window request counter keyed by caller."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: Dict[str, _Window] = {}
        self._lock = threading.Lock()

    def check(self, key: str, limit: int = 5, window_seconds: float = 60) -> bool:
        """Count one request for `key`. Returns True while within `limit`."""
        now = self._clock()
        with self._lock:
            record = self._store.get(key)
            if record is None:
                record = _Window(count=0, last_reset=now)
                self._store[key] = record

            if now - record.last_reset > window_seconds:
                record.count = 0
                record.last_reset = now

            record.count += 1
            return record.count <= limit

    def reset(self) -> None:
        with self._lock:
            self._store.clear()


limiter = RateLimiter()


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "unknown-ip"


def rate_limit(
    limit: Optional[int] = None,
    window: Optional[float] = None,
    message: str = "Too many requests",
):
    """
    Dependency factory. Every limited route draws on the caller's single
    per-IP counter; `limit` is this route's ceiling on that counter.

    Usage:
        @router.post("/login", dependencies=[Depends(rate_limit(5, 60))])
    """
    def dependency(request: Request) -> None:
        max_requests = limit if limit is not None else settings.login_rate_limit
        window_seconds = window if window is not None else settings.rate_limit_window_seconds
        if not limiter.check(client_ip(request), max_requests, window_seconds):
            raise HTTPException(status_code=429, detail=message)

    return dependency
