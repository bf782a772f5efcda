"""
Fixed-window rate limiting for the public contact endpoint.

Counters live in a RateLimitStore. The default store is an in-memory dict,
so limits are per process and reset on restart. Expired counters are purged
once per window. A shared key/value store with expiry can be plugged in
for multi-instance deployments.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol, Tuple


@dataclass
class WindowCounter:
    count: int
    reset_at: float


class RateLimitStore(Protocol):
    def get(self, key: str) -> Optional[WindowCounter]: ...

    def set(self, key: str, counter: WindowCounter) -> None: ...

    def purge_expired(self, now: float) -> int: ...


class InMemoryRateLimitStore:
    def __init__(self) -> None:
        self._counters: Dict[str, WindowCounter] = {}

    def get(self, key: str) -> Optional[WindowCounter]:
        return self._counters.get(key)

    def set(self, key: str, counter: WindowCounter) -> None:
        self._counters[key] = counter

    def purge_expired(self, now: float) -> int:
        """Drop counters whose window has ended. Returns how many were dropped."""
        expired = [key for key, counter in self._counters.items() if now > counter.reset_at]
        for key in expired:
            del self._counters[key]
        return len(expired)

    def clear(self) -> None:
        self._counters.clear()

    def __len__(self) -> int:
        return len(self._counters)


class FixedWindowRateLimiter:
    """
    At most `max_requests` hits per key per window.

    The window starts with the first hit of a key and is not extended by
    later hits. Rejected hits do not touch the counter.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.time,
        store: Optional[RateLimitStore] = None,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._store = store if store is not None else InMemoryRateLimitStore()
        # sync routes run in a thread pool
        self._lock = threading.Lock()
        self._next_purge = self._clock() + window_seconds

    def hit(self, key: str) -> Tuple[bool, int]:
        """Spend one slot for `key`. Returns (allowed, remaining)."""
        now = self._clock()
        with self._lock:
            # Keys come from client headers, so expired ones are swept once per window
            if now >= self._next_purge:
                self._store.purge_expired(now)
                self._next_purge = now + self.window_seconds

            counter = self._store.get(key)
            if counter is None or now > counter.reset_at:
                self._store.set(key, WindowCounter(count=1, reset_at=now + self.window_seconds))
                return True, self.max_requests - 1

            if counter.count >= self.max_requests:
                return False, 0

            counter.count += 1
            self._store.set(key, counter)
            return True, self.max_requests - counter.count
