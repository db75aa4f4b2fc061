"""Role gate for admin pages and APIs, installed as a ``before_request`` hook.

Each request is classified by path; protected requests must carry a session
cookie whose role satisfies the route's requirement. APIs get a JSON 401/403,
pages are redirected to the login form with the original path in ``next``.
Nothing is cached between requests, so policy changes and token rotation apply
to the very next request.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlencode

from flask import Flask, redirect, request
from werkzeug.wrappers.response import Response

from .app_authz import AuthzError, SessionError, get_admin_session
from .roles import Role, satisfies

log = logging.getLogger(__name__)

LOGIN_PAGE = "/admin/login"


class RouteKind(Enum):
    UNPROTECTED = "unprotected"
    PAGE = "page"
    API = "api"


@dataclass(frozen=True)
class GateDecision:
    kind: RouteKind
    required: Role | None = None


_PUBLIC_PATHS = frozenset({LOGIN_PAGE, "/api/admin/login", "/api/admin/logout"})

_PROTECTED_API_EXACT = frozenset({"/api/content"})
_PROTECTED_API_PREFIXES: tuple[str, ...] = ("/api/admin/",)

_SUPER_PREFIXES: tuple[str, ...] = (
    "/admin/system",
    "/api/admin/accounts",
    "/api/admin/backup",
    "/api/admin/policy",
    "/api/admin/inquiries",
)


def _matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


def required_role(path: str) -> Role:
    return "super" if any(_matches(path, p) for p in _SUPER_PREFIXES) else "admin"


def classify(path: str) -> GateDecision:
    path = path.rstrip("/") or "/"
    if path in _PUBLIC_PATHS:
        return GateDecision(RouteKind.UNPROTECTED)
    if path in _PROTECTED_API_EXACT or any(path.startswith(p) for p in _PROTECTED_API_PREFIXES):
        return GateDecision(RouteKind.API, required_role(path))
    if _matches(path, "/admin"):
        return GateDecision(RouteKind.PAGE, required_role(path))
    return GateDecision(RouteKind.UNPROTECTED)


def login_redirect(path: str) -> Response:
    return redirect(f"{LOGIN_PAGE}?{urlencode({'next': path})}")


def gate_request() -> Response | None:
    decision = classify(request.path)
    if decision.kind is RouteKind.UNPROTECTED or decision.required is None:
        return None
    sess = get_admin_session()
    role = sess["role"] if sess else None
    if satisfies(role, decision.required):
        return None
    log.info(
        {
            "event": "gate_denied",
            "path": request.path,
            "kind": decision.kind.value,
            "required": decision.required,
            "role": role,
        }
    )
    if decision.kind is RouteKind.PAGE:
        return login_redirect(request.path)
    if role is None:
        raise SessionError("Unauthorized")
    raise AuthzError("Forbidden", required=decision.required)


def init_route_gate(app: Flask) -> None:
    app.before_request(gate_request)


__all__ = [
    "LOGIN_PAGE",
    "RouteKind",
    "GateDecision",
    "required_role",
    "classify",
    "login_redirect",
    "gate_request",
    "init_route_gate",
]
