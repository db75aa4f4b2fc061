"""Admin session cookie codec.

The cookie value is ``"{role}:{token}"`` where ``token`` is the secret configured
for that role (``ADMIN_SESSION_TOKEN`` / ``SUPER_ADMIN_SESSION_TOKEN``). Nothing is
stored server-side; rotating a role's token logs out every session of that role.
"""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from typing import TypedDict

from flask import current_app, has_app_context

from .roles import Role, to_role

SESSION_COOKIE_NAME = "admin_session"

_TOKEN_CONFIG_KEYS: dict[Role, str] = {
    "admin": "ADMIN_SESSION_TOKEN",
    "super": "SUPER_ADMIN_SESSION_TOKEN",
}


class SessionData(TypedDict):
    role: Role


def configured_tokens() -> dict[Role, str]:
    if not has_app_context():
        return {}
    cfg = current_app.config
    return {role: str(cfg.get(name) or "") for role, name in _TOKEN_CONFIG_KEYS.items()}


def issue_session(role: Role, tokens: Mapping[Role, str] | None = None) -> str | None:
    """Return the cookie value for ``role``, or None when its token is not configured."""
    tokens = configured_tokens() if tokens is None else tokens
    token = tokens.get(role) or ""
    if not token:
        return None
    return f"{role}:{token}"


def decode_session(value: str | None, tokens: Mapping[Role, str] | None = None) -> SessionData | None:
    if not value or not isinstance(value, str):
        return None
    role_part, sep, token = value.partition(":")
    role = to_role(role_part)
    if not sep or role is None or not token:
        return None
    tokens = configured_tokens() if tokens is None else tokens
    expected = tokens.get(role) or ""
    if not expected:
        return None
    if not hmac.compare_digest(token.encode("utf-8"), expected.encode("utf-8")):
        return None
    return {"role": role}


__all__ = [
    "SESSION_COOKIE_NAME",
    "SessionData",
    "configured_tokens",
    "issue_session",
    "decode_session",
]
