from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from .access_policy import POLICY_KEY
from .app_authz import AuthzError, ensure_content_access
from .content_repo import CONTENT_FIELDS, SiteContentRepo
from .db import get_session
from .errors import ValidationError
from .inquiry_api import INQUIRY_PREFIX

bp = Blueprint("content_api", __name__, url_prefix="/api/content")

log = logging.getLogger(__name__)

DEFAULT_CONTENT_KEY = "home"
MAX_KEY_LENGTH = 200

# Rows with their own endpoints; generic writes would bypass their validation
_RESERVED_PREFIXES: tuple[str, ...] = (INQUIRY_PREFIX, "analytics_")


def _is_reserved(key: str) -> bool:
    return key == POLICY_KEY or key.startswith(_RESERVED_PREFIXES)


def _empty(key: str) -> dict:
    data = {name: "" for name in CONTENT_FIELDS}
    data["key"] = key
    return data


@bp.get("")
def get_content():
    key = (request.args.get("key") or DEFAULT_CONTENT_KEY).strip()
    db = get_session()
    try:
        ensure_content_access(db, key)
        row = SiteContentRepo(db).get(key)
        return jsonify({"data": row.to_dict() if row else _empty(key)})
    finally:
        db.close()


@bp.patch("")
def update_content():
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("JSON object body required")
    key = str(body.get("key") or DEFAULT_CONTENT_KEY).strip()
    if len(key) > MAX_KEY_LENGTH:
        raise ValidationError("key is too long")
    db = get_session()
    try:
        sess = ensure_content_access(db, key)
        if _is_reserved(key):
            raise AuthzError("Forbidden: this key is managed by a dedicated endpoint")
        fields = {name: str(body.get(name) or "") for name in CONTENT_FIELDS}
        row = SiteContentRepo(db).upsert(key, **fields)
        log.info({"event": "content_updated", "key": key, "role": sess["role"]})
        return jsonify({"data": row.to_dict()})
    finally:
        db.close()
