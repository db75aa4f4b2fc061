"""Contact-form inquiries: public submission plus super-admin triage.

Each inquiry is a ``site_content`` row keyed ``inquiry_<epoch ms>`` whose body holds
``{name, phone, message, createdAt, status, note}`` as JSON.
"""

from __future__ import annotations

import json
import logging
import time
from datetime import UTC, datetime

from flask import Blueprint, jsonify, request

from .app_authz import require_roles
from .content_repo import SiteContentRepo
from .db import get_session
from .errors import NotFoundError, ValidationError

bp = Blueprint("inquiry_api", __name__, url_prefix="/api")

log = logging.getLogger(__name__)

INQUIRY_PREFIX = "inquiry_"
STATUSES = ("new", "done")
MAX_FIELD_LENGTH = 2000


def _load_body(raw: str | None) -> dict:
    try:
        parsed = json.loads(raw or "{}")
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _serialize(row) -> dict:
    parsed = _load_body(row.body)
    title = row.title or ""
    return {
        "key": row.key,
        "name": parsed.get("name") or title.removeprefix("문의 - "),
        "phone": parsed.get("phone") or row.subtitle or "",
        "message": parsed.get("message") or "",
        "note": parsed.get("note") or "",
        "createdAt": parsed.get("createdAt"),
        "status": parsed.get("status") or "new",
    }


@bp.post("/inquiry")
def submit_inquiry():
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        raise ValidationError("잘못된 요청입니다.")
    # Honeypot: bots fill every field, humans never see this one
    if body.get("website"):
        return jsonify({"ok": True})
    name = str(body.get("name") or "").strip()[:MAX_FIELD_LENGTH]
    phone = str(body.get("phone") or "").strip()[:MAX_FIELD_LENGTH]
    message = str(body.get("message") or "").strip()[:MAX_FIELD_LENGTH]
    if not name or not phone or not message:
        raise ValidationError("필수 항목을 입력해주세요.")
    db = get_session()
    try:
        repo = SiteContentRepo(db)
        ms = int(time.time() * 1000)
        while repo.get(f"{INQUIRY_PREFIX}{ms}") is not None:
            ms += 1
        key = f"{INQUIRY_PREFIX}{ms}"
        repo.insert(
            key,
            title=f"문의 - {name}",
            subtitle=phone,
            body=json.dumps(
                {
                    "name": name,
                    "phone": phone,
                    "message": message,
                    "createdAt": datetime.now(UTC).isoformat(),
                    "status": "new",
                },
                ensure_ascii=False,
            ),
        )
    finally:
        db.close()
    log.info({"event": "inquiry_received", "key": key})
    return jsonify({"ok": True})


@bp.get("/admin/inquiries")
@require_roles("super")
def list_inquiries():
    db = get_session()
    try:
        rows = SiteContentRepo(db).list_by_prefix(INQUIRY_PREFIX)
        return jsonify({"inquiries": [_serialize(r) for r in rows]})
    finally:
        db.close()


@bp.patch("/admin/inquiries")
@require_roles("super")
def update_inquiry():
    body = request.get_json(silent=True) or {}
    if not isinstance(body, dict):
        raise ValidationError("잘못된 요청입니다.")
    key = str(body.get("key") or "")
    status = str(body.get("status") or "")
    note = body.get("note") if isinstance(body.get("note"), str) else None
    if not key.startswith(INQUIRY_PREFIX) or (status not in STATUSES and note is None):
        raise ValidationError("잘못된 요청입니다.")
    db = get_session()
    try:
        repo = SiteContentRepo(db)
        row = repo.get(key)
        if row is None:
            raise NotFoundError("문의를 찾을 수 없습니다.")
        parsed = _load_body(row.body)
        if status in STATUSES:
            parsed["status"] = status
        if note is not None:
            parsed["note"] = note[:MAX_FIELD_LENGTH]
        repo.upsert(key, body=json.dumps(parsed, ensure_ascii=False))
    finally:
        db.close()
    return jsonify({"ok": True})


@bp.delete("/admin/inquiries")
@require_roles("super")
def delete_inquiry():
    key = str(request.args.get("key") or "")
    if not key.startswith(INQUIRY_PREFIX):
        raise ValidationError("잘못된 key입니다.")
    db = get_session()
    try:
        SiteContentRepo(db).delete(key)
    finally:
        db.close()
    return jsonify({"ok": True})
