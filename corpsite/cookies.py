"""The ``admin_session`` cookie on responses.

Always HttpOnly, SameSite=Lax and scoped to ``/``; Secure everywhere except
DEBUG/TESTING, where the app is served over plain http.
"""
from __future__ import annotations

from flask import current_app
from werkzeug.wrappers.response import Response

from .session_codec import SESSION_COOKIE_NAME

DEFAULT_MAX_AGE = 43200


def cookie_secure() -> bool:
    cfg = current_app.config
    return not (cfg.get("DEBUG") or cfg.get("TESTING"))


def session_max_age() -> int:
    return int(current_app.config.get("SESSION_MAX_AGE_SECONDS") or DEFAULT_MAX_AGE)


def set_session_cookie(resp: Response, value: str) -> Response:
    resp.set_cookie(
        SESSION_COOKIE_NAME,
        value,
        max_age=session_max_age(),
        path="/",
        secure=cookie_secure(),
        httponly=True,
        samesite="Lax",
    )
    return resp


def clear_session_cookie(resp: Response) -> Response:
    # Same attributes as when set, or browsers keep the original cookie
    resp.set_cookie(
        SESSION_COOKIE_NAME,
        "",
        max_age=0,
        expires=0,
        path="/",
        secure=cookie_secure(),
        httponly=True,
        samesite="Lax",
    )
    return resp


__all__ = ["cookie_secure", "session_max_age", "set_session_cookie", "clear_session_cookie"]
