"""Super-admin management of the admin role: allow-list policy and account overview."""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from .access_policy import get_effective_allowed_keys, set_allowed_keys
from .app_authz import require_roles
from .db import get_session
from .errors import ValidationError

bp = Blueprint("policy_api", __name__, url_prefix="/api/admin")

log = logging.getLogger(__name__)


@bp.get("/policy")
@require_roles("super")
def get_policy():
    db = get_session()
    try:
        return jsonify({"allowedContentKeys": get_effective_allowed_keys(db)})
    finally:
        db.close()


@bp.patch("/policy")
@require_roles("super")
def update_policy():
    body = request.get_json(silent=True)
    keys = body.get("allowedContentKeys") if isinstance(body, dict) else None
    if not isinstance(keys, list):
        raise ValidationError("allowedContentKeys must be an array")
    db = get_session()
    try:
        cleaned = set_allowed_keys(db, keys)
    finally:
        db.close()
    log.info({"event": "policy_updated", "count": len(cleaned)})
    return jsonify({"ok": True, "allowedContentKeys": cleaned})


@bp.get("/accounts")
@require_roles("super")
def accounts():
    db = get_session()
    try:
        admin_allowed = get_effective_allowed_keys(db)
    finally:
        db.close()
    return jsonify(
        {
            "accounts": [
                {
                    "role": "super",
                    "name": "시스템 운영자",
                    "permissions": ["content:*", "accounts:manage", "system:manage", "backup:manage"],
                },
                {
                    "role": "admin",
                    "name": "일반 관리자",
                    "permissions": ["content:partial"],
                    "allowedContentKeys": admin_allowed,
                },
            ]
        }
    )
