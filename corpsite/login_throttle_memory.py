"""In-process login throttle. State is lost on restart and not shared between
workers; use the redis backend for multi-instance deployments."""
from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from .login_throttle import LoginThrottle


@dataclass
class _Entry:
    fails: int = 0
    blocked_until: float = 0.0
    last_failure: float = 0.0


class MemoryLoginThrottle(LoginThrottle):  # type: ignore[misc]
    def __init__(
        self,
        *,
        max_failures: int = 5,
        block_seconds: int = 600,
        max_keys: int = 10000,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.max_failures = max_failures
        self.block_seconds = block_seconds
        self.max_keys = max_keys
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: _Entry, now: float) -> bool:
        # Unblocked counters also age out after one block window of quiet
        if entry.blocked_until:
            return entry.blocked_until <= now
        return now - entry.last_failure >= self.block_seconds

    def is_blocked(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not entry.blocked_until:
                return False
            if entry.blocked_until <= now:
                del self._entries[key]
                return False
            return True

    def record_failure(self, key: str) -> None:
        now = self._clock()
        with self._lock:
            self._record_failure_locked(key, now)

    def try_attempt(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.blocked_until > now:
                return False
            self._record_failure_locked(key, now)
            return True

    def _record_failure_locked(self, key: str, now: float) -> None:
        entry = self._entries.get(key)
        if entry is None or self._expired(entry, now):
            entry = _Entry(last_failure=now)
            self._entries[key] = entry
            if len(self._entries) > self.max_keys:
                self._sweep(now)
        entry.fails += 1
        entry.last_failure = now
        if entry.fails >= self.max_failures:
            entry.blocked_until = now + self.block_seconds

    def record_success(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def retry_after(self, key: str) -> int:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.blocked_until <= now:
                return 0
            return max(1, math.ceil(entry.blocked_until - now))

    def _sweep(self, now: float) -> None:
        """Drop expired entries, then the least recently failed ones, until under the cap."""
        for k in [k for k, e in self._entries.items() if self._expired(e, now)]:
            del self._entries[k]
        overflow = len(self._entries) - self.max_keys
        if overflow > 0:
            oldest = sorted(self._entries.items(), key=lambda kv: kv[1].last_failure)[:overflow]
            for k, _ in oldest:
                del self._entries[k]


__all__ = ["MemoryLoginThrottle"]
