"""Shared login throttle on Redis: INCR a failure counter with EXPIRE set on the
first increment; at the threshold SET NX a block key with a TTL of the block window."""
from __future__ import annotations

import redis

from .login_throttle import LoginThrottle


class RedisLoginThrottle(LoginThrottle):  # type: ignore[misc]
    def __init__(
        self,
        url: str,
        prefix: str,
        *,
        max_failures: int = 5,
        block_seconds: int = 600,
        client: redis.Redis | None = None,
    ) -> None:
        if client is None:
            client = redis.Redis.from_url(url, decode_responses=False, socket_connect_timeout=2)
            # from_url is lazy; fail here so the factory can fall back at startup
            client.ping()
        self._client = client
        self._prefix = prefix
        self.max_failures = max_failures
        self.block_seconds = block_seconds

    def _fails_key(self, key: str) -> str:
        return f"{self._prefix}fails:{key}"

    def _block_key(self, key: str) -> str:
        return f"{self._prefix}block:{key}"

    def is_blocked(self, key: str) -> bool:
        return bool(self._client.exists(self._block_key(key)))

    def _count_failure(self, key: str) -> int:
        fk = self._fails_key(key)
        pipe = self._client.pipeline(transaction=True)
        pipe.incr(fk, 1)
        pipe.ttl(fk)
        count, ttl = pipe.execute()
        if int(count) == 1 or int(ttl) < 0:
            self._client.expire(fk, self.block_seconds)
        if int(count) >= self.max_failures:
            # nx: later racers must not extend the window
            self._client.set(self._block_key(key), b"1", ex=self.block_seconds, nx=True)
        return int(count)

    def record_failure(self, key: str) -> None:
        self._count_failure(key)

    def try_attempt(self, key: str) -> bool:
        if self.is_blocked(key):
            return False
        # INCR is atomic, so at most max_failures attempts get through per window
        return self._count_failure(key) <= self.max_failures

    def record_success(self, key: str) -> None:
        self._client.delete(self._fails_key(key), self._block_key(key))

    def retry_after(self, key: str) -> int:
        ttl = self._client.ttl(self._block_key(key))
        if ttl is None or int(ttl) < 0:
            return 0
        return int(ttl)


__all__ = ["RedisLoginThrottle"]
