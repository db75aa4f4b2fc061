from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, make_response, request

from .access_policy import get_effective_allowed_keys
from .app_authz import SessionError, require_session
from .cookies import clear_session_cookie, set_session_cookie
from .credentials import (
    ConfigurationError,
    CredentialSettings,
    missing_auth_settings,
    validate_login_credentials,
)
from .db import get_session
from .errors import ValidationError
from .login_throttle import LoginThrottle, RateLimitError, client_address, throttle_key
from .roles import Role
from .session_codec import issue_session

bp = Blueprint("auth_api", __name__, url_prefix="/api/admin")

log = logging.getLogger(__name__)

INVALID_CREDENTIALS = "아이디 또는 비밀번호가 올바르지 않습니다."
TOO_MANY_ATTEMPTS = "Too many failed login attempts. Try again later."


def _throttle() -> LoginThrottle:
    return current_app.login_throttle  # type: ignore[attr-defined]


def authenticate(login_id: str, password: str) -> tuple[Role, str]:
    """Check credentials for the current request and return (role, cookie value).

    Raises ConfigurationError (500), RateLimitError (429) or SessionError (401).
    """
    missing = missing_auth_settings(current_app.config)
    if missing:
        raise ConfigurationError(missing=missing)

    throttle = _throttle()
    client = client_address(request, bool(current_app.config.get("TRUST_PROXY_HEADERS")))
    key = throttle_key(client, login_id)
    # Counted before the password check; a successful login clears it below
    if not throttle.try_attempt(key):
        log.warning({"event": "login_throttled", "client": client})
        raise RateLimitError(TOO_MANY_ATTEMPTS, throttle.retry_after(key))

    role = validate_login_credentials(login_id, password, CredentialSettings.from_config(current_app.config))
    if role is None:
        log.warning({"event": "login_failed", "client": client})
        raise SessionError(INVALID_CREDENTIALS)

    cookie_value = issue_session(role)
    if cookie_value is None:
        raise ConfigurationError("Session token is not configured", missing=[f"{role} session token"])
    throttle.record_success(key)
    log.info({"event": "login_ok", "client": client, "role": role})
    return role, cookie_value


@bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError("JSON object body required")
    login_id = str(data.get("id") or "").strip()
    password = str(data.get("password") or "")
    if not login_id or not password:
        raise ValidationError("id and password are required")
    role, cookie_value = authenticate(login_id, password)
    return set_session_cookie(make_response(jsonify({"ok": True, "role": role})), cookie_value)


@bp.post("/logout")
def logout():
    return clear_session_cookie(make_response(jsonify({"ok": True})))


@bp.get("/me")
def me():
    sess = require_session()
    if sess["role"] == "super":
        allowed = ["*"]
    else:
        db = get_session()
        try:
            allowed = get_effective_allowed_keys(db)
        finally:
            db.close()
    return jsonify({"ok": True, "role": sess["role"], "allowedContentKeys": allowed})
