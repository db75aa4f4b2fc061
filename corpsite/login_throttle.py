"""Login throttle Protocol (is_blocked/try_attempt/record_failure/record_success) and a factory
that selects the memory or redis backend from app config."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from flask import Request

log = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


class RateLimitError(Exception):
    """Raised when a login attempt arrives while its key is blocked.

    Attributes:
        retry_after: Seconds until next permitted attempt.
    """
    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after


@runtime_checkable
class LoginThrottle(Protocol):
    def is_blocked(self, key: str) -> bool: ...  # pragma: no cover
    def record_failure(self, key: str) -> None: ...  # pragma: no cover

    def try_attempt(self, key: str) -> bool:  # pragma: no cover
        """Atomically refuse a blocked key or count the attempt as a failure.

        Login counts the attempt before checking the password and clears it with
        ``record_success``, so parallel guesses cannot all pass a separate check.
        """
        ...

    def record_success(self, key: str) -> None: ...  # pragma: no cover
    def retry_after(self, key: str) -> int: ...  # pragma: no cover


def client_address(request: Request, trust_proxy: bool = False) -> str:
    """Best-effort client identity for throttling.

    ``X-Forwarded-For`` is client-controlled, so its first hop is only used when the
    app is deployed behind a proxy that overwrites it (``TRUST_PROXY_HEADERS``).
    """
    if trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.remote_addr or UNKNOWN_CLIENT


def throttle_key(client: str, login_id: str) -> str:
    return f"{client}:{login_id}"


def build_login_throttle(cfg: Mapping[str, object]) -> LoginThrottle:
    max_failures = int(cfg.get("LOGIN_MAX_FAILURES") or 5)
    block_seconds = int(cfg.get("LOGIN_BLOCK_SECONDS") or 600)
    backend = str(cfg.get("LOGIN_THROTTLE_BACKEND") or "memory").lower()
    if backend == "redis":
        from .login_throttle_redis import RedisLoginThrottle

        try:
            return RedisLoginThrottle(
                str(cfg.get("REDIS_URL") or "redis://localhost:6379/0"),
                str(cfg.get("LOGIN_THROTTLE_PREFIX") or "corpsite:login:"),
                max_failures=max_failures,
                block_seconds=block_seconds,
            )
        except Exception:
            # Unreachable at startup: per-process state rather than none. Outages after
            # startup surface as request errors.
            log.exception("redis login throttle unavailable; using in-memory backend")
    elif backend != "memory":
        log.warning("unknown LOGIN_THROTTLE_BACKEND=%r; using in-memory backend", backend)
    from .login_throttle_memory import MemoryLoginThrottle

    return MemoryLoginThrottle(
        max_failures=max_failures,
        block_seconds=block_seconds,
        max_keys=int(cfg.get("LOGIN_THROTTLE_MAX_KEYS") or 10000),
    )


__all__ = [
    "UNKNOWN_CLIENT",
    "RateLimitError",
    "LoginThrottle",
    "client_address",
    "throttle_key",
    "build_login_throttle",
]
