from __future__ import annotations

import logging
from datetime import UTC, datetime

from flask import Blueprint, jsonify, request

from .app_authz import require_roles
from .content_repo import CONTENT_FIELDS, SiteContentRepo
from .db import get_session
from .errors import ValidationError

bp = Blueprint("backup_api", __name__, url_prefix="/api/admin/backup")

log = logging.getLogger(__name__)


@bp.get("")
@require_roles("super")
def export_backup():
    db = get_session()
    try:
        rows = [r.to_dict() for r in SiteContentRepo(db).all()]
    finally:
        db.close()
    return jsonify({"exportedAt": datetime.now(UTC).isoformat(), "count": len(rows), "rows": rows})


@bp.post("")
@require_roles("super")
def restore_backup():
    body = request.get_json(silent=True)
    rows = body.get("rows") if isinstance(body, dict) else None
    if not isinstance(rows, list):
        raise ValidationError("rows 배열이 필요합니다.")
    # Rows without a string key are skipped, not rejected
    sanitized = [
        {"key": r["key"], **{name: str(r.get(name) or "") for name in CONTENT_FIELDS}}
        for r in rows
        if isinstance(r, dict) and isinstance(r.get("key"), str) and r["key"].strip()
    ]
    db = get_session()
    try:
        restored = SiteContentRepo(db).upsert_many(sanitized)
    finally:
        db.close()
    log.info({"event": "backup_restored", "rows": restored})
    return jsonify({"ok": True, "restored": restored})
