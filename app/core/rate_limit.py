from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from threading import Lock

from fastapi import Depends, HTTPException, Request, status

from app.core.config import settings


@dataclass
class _Window:
    hits: deque[float] = field(default_factory=deque)
    last_seen: float = 0.0


class SlidingWindowLimiter:
    """In-process sliding-window limiter keyed by "<scope>:<client>".

    State is per worker process; several replicas each count on their own.
    """

    def __init__(self, *, max_keys: int = 20_000) -> None:
        self._max_keys = max_keys
        self._lock = Lock()
        self._windows: dict[str, _Window] = {}

    def hit(self, key: str, *, limit: int, window_seconds: int) -> tuple[bool, int]:
        """Record one request; return (allowed, retry_after_seconds)."""
        now = time.monotonic()
        window_start = now - float(window_seconds)

        with self._lock:
            window = self._windows.setdefault(key, _Window(last_seen=now))
            window.last_seen = now
            hits = window.hits

            while hits and hits[0] <= window_start:
                hits.popleft()

            if len(hits) >= limit:
                retry_after = int(window_seconds - (now - hits[0])) + 1
                return False, max(1, retry_after)

            hits.append(now)

            if len(self._windows) > self._max_keys:
                self._evict_idle(now, idle_seconds=window_seconds * 10)

            return True, 0

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def _evict_idle(self, now: float, *, idle_seconds: int) -> None:
        cutoff = now - float(idle_seconds)
        for key in [k for k, w in self._windows.items() if w.last_seen < cutoff]:
            del self._windows[key]


limiter = SlidingWindowLimiter()


def client_key(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip() or "unknown"
    if request.client:
        return request.client.host
    return "unknown"


def rate_limit(scope: str, *, limit: int | None = None, window_seconds: int | None = None):
    """Dependency factory; limits default to the auth settings."""

    def _dep(request: Request) -> None:
        ok, retry_after = limiter.hit(
            f"{scope}:{client_key(request)}",
            limit=limit or settings.auth_rate_limit,
            window_seconds=window_seconds or settings.rate_limit_window_seconds,
        )
        if not ok:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests",
                headers={"Retry-After": str(retry_after)},
            )

    return Depends(_dep)
