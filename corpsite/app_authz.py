"""Request-level session and authorization helpers.

Handlers re-check the session here even though the route gate already ran, and
content writes additionally consult the access policy.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from flask import g, request
from sqlalchemy.orm import Session

from .access_policy import can_edit, get_effective_allowed_keys
from .roles import Role, satisfies
from .session_codec import SESSION_COOKIE_NAME, SessionData, decode_session

P = ParamSpec("P")
R = TypeVar("R")


class SessionError(Exception):
    """Signals a 401 unauthorized due to missing/invalid session."""

    def __init__(self, message: str = "authentication required"):
        super().__init__(message)


class AuthzError(Exception):
    """Signals a 403: authenticated, but not permitted."""

    required: Role | None

    def __init__(self, message: str = "forbidden", required: Role | None = None):
        super().__init__(message)
        self.required = required


def get_admin_session() -> SessionData | None:
    return decode_session(request.cookies.get(SESSION_COOKIE_NAME))


def require_session() -> SessionData:
    sess = get_admin_session()
    if sess is None:
        raise SessionError("authentication required")
    g.admin_role = sess["role"]
    return sess


def require_role(required: Role) -> SessionData:
    sess = require_session()
    if not satisfies(sess["role"], required):
        raise AuthzError(f"{required} role required", required=required)
    return sess


def require_roles(required: Role) -> Callable[[Callable[P, R]], Callable[P, R]]:
    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            require_role(required)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def ensure_content_access(db: Session, key: str) -> SessionData:
    """Raise unless the current session may edit ``key``.

    The message names the restriction but never lists the allowed keys.
    """
    sess = require_session()
    allowed = get_effective_allowed_keys(db) if sess["role"] != "super" else []
    if not can_edit(sess["role"], key, allowed):
        raise AuthzError("Forbidden: this page is not editable by your role")
    return sess


__all__ = [
    "SessionError",
    "AuthzError",
    "get_admin_session",
    "require_session",
    "require_role",
    "require_roles",
    "ensure_content_access",
]
