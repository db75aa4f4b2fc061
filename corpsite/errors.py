"""Central error handling.

Every failure leaves the app as the JSON envelope
``{"ok": false, "error": <code>, "message": <text>}`` with the matching status.
"""
from __future__ import annotations

import uuid
from typing import Literal, NotRequired, TypedDict

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

ErrorCode = Literal[
    "invalid",
    "unauthorized",
    "forbidden",
    "not_found",
    "rate_limited",
    "misconfigured",
    "internal",
]


class ErrorResponse(TypedDict):
    ok: Literal[False]
    error: ErrorCode
    message: NotRequired[str]


class DomainError(Exception):
    status = 400
    code: ErrorCode = "invalid"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)
        self.message = message or self.code


class ValidationError(DomainError):
    status = 400
    code = "invalid"


class NotFoundError(DomainError):
    status = 404
    code = "not_found"


_STATUS_MAPPING: dict[int, ErrorCode] = {
    400: "invalid",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "not_found",
    413: "invalid",
    415: "invalid",
    429: "rate_limited",
}


def make_error(error: ErrorCode, message: str | None = None, status: int = 400):
    payload: ErrorResponse = {"ok": False, "error": error}
    if message:
        payload["message"] = message
    resp = jsonify(payload)
    resp.status_code = status
    return resp


def register_error_handlers(app: Flask) -> None:
    # Import lazily to avoid circulars
    from .app_authz import AuthzError, SessionError
    from .credentials import ConfigurationError
    from .login_throttle import RateLimitError

    @app.errorhandler(SessionError)
    def _session(e: SessionError):
        return make_error("unauthorized", str(e) or "authentication required", 401)

    @app.errorhandler(AuthzError)
    def _authz(e: AuthzError):
        return make_error("forbidden", str(e) or "forbidden", 403)

    @app.errorhandler(RateLimitError)
    def _rate_limit(e: RateLimitError):
        r = make_error("rate_limited", str(e) or "Too many login attempts", 429)
        r.headers["Retry-After"] = str(max(int(e.retry_after), 1))
        return r

    @app.errorhandler(ConfigurationError)
    def _misconfigured(e: ConfigurationError):
        # Setting names stay in the server log only
        app.logger.error("auth misconfiguration path=%s missing=%s", request.path, ",".join(e.missing) or "-")
        return make_error("misconfigured", "Server auth env is not configured", 500)

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return make_error(e.code, e.message, e.status)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        status = e.code or 500
        code = _STATUS_MAPPING.get(status)
        if code is None:
            return make_error("internal", "internal error", status if status >= 500 else 400)
        return make_error(code, e.description, status)

    @app.errorhandler(Exception)
    def _unhandled(e: Exception):
        incident_id = str(uuid.uuid4())
        app.logger.exception("Unhandled exception incident_id=%s path=%s", incident_id, request.path)
        r = make_error("internal", "internal error", 500)
        r.headers["X-Incident-Id"] = incident_id
        return r


__all__ = [
    "ErrorCode",
    "ErrorResponse",
    "DomainError",
    "ValidationError",
    "NotFoundError",
    "make_error",
    "register_error_handlers",
]
