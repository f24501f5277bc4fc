from __future__ import annotations

import threading
import time
from collections import defaultdict
from collections.abc import Callable

from fastapi import HTTPException, status

from app.core.config import get_settings


class _RateMemoryStore:
    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._hits: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()
        self._clock = clock
        self._last_sweep = 0.0

    def check(self, key: str, limit: int, window_seconds: int) -> bool:
        now = self._clock()
        cutoff = now - window_seconds
        with self._lock:
            if now - self._last_sweep >= window_seconds:
                self._sweep(cutoff)
                self._last_sweep = now
            hits = self._hits[key]
            hits[:] = [ts for ts in hits if ts > cutoff]
            if len(hits) >= limit:
                return False
            hits.append(now)
            return True

    def _sweep(self, cutoff: float) -> None:
        # Keys whose every hit has aged out are dropped.
        stale = [key for key, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for key in stale:
            del self._hits[key]

    def clear(self) -> None:
        with self._lock:
            self._hits.clear()
            self._last_sweep = 0.0


_store = _RateMemoryStore()


def enforce_rate_limit(kind: str, identifier: str) -> None:
    settings = get_settings()
    limit = settings.rate_limit_refresh_per_min
    if not _store.check(f"{kind}:{identifier}", limit, 60):
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=f"Rate limit exceeded for {kind}",
        )


def reset_rate_limits() -> None:
    _store.clear()
