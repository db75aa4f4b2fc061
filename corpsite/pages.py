"""Server-rendered pages: the public site shell and the admin panel entry points."""

from __future__ import annotations

from urllib.parse import urlsplit

from flask import Blueprint, abort, make_response, redirect, render_template, request

from .access_policy import get_effective_allowed_keys
from .app_authz import SessionError, get_admin_session, require_role, require_session
from .auth_api import authenticate
from .cookies import set_session_cookie
from .content_repo import SiteContentRepo
from .credentials import ConfigurationError
from .db import get_session
from .login_throttle import RateLimitError
from .site_sections import (
    MENU_LABELS_KEY,
    MENU_VISIBILITY_KEY,
    SECTION_SLUGS,
    build_site_sections,
    parse_menu_labels,
    parse_menu_visibility,
    section_label,
)

bp = Blueprint("pages", __name__)


def safe_next(target: str | None, default: str = "/admin") -> str:
    """Only local absolute paths are honoured as post-login destinations."""
    if not target or not target.startswith("/") or "\\" in target:
        return default
    # Browsers drop tab/CR/LF, so "/\t/host" would become "//host"
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in target):
        return default
    parts = urlsplit(target)
    if parts.scheme or parts.netloc or target.startswith("//"):
        return default
    return target


def _site_chrome(repo: SiteContentRepo) -> dict:
    labels_row = repo.get(MENU_LABELS_KEY)
    visibility_row = repo.get(MENU_VISIBILITY_KEY)
    labels = parse_menu_labels(labels_row.body if labels_row else None)
    visibility = parse_menu_visibility(visibility_row.body if visibility_row else None)
    return {"sections": build_site_sections(labels, visibility), "labels": labels}


@bp.get("/")
def home():
    db = get_session()
    try:
        repo = SiteContentRepo(db)
        row = repo.get("home")
        return render_template("home.html", content=row, **_site_chrome(repo))
    finally:
        db.close()


@bp.get("/<slug>")
def section(slug: str):
    if slug not in SECTION_SLUGS:
        abort(404)
    db = get_session()
    try:
        repo = SiteContentRepo(db)
        chrome = _site_chrome(repo)
        return render_template(
            "section.html",
            slug=slug,
            label=section_label(slug, chrome["labels"]),
            content=repo.get(slug),
            **chrome,
        )
    finally:
        db.close()


@bp.route("/admin/login", methods=["GET", "POST"])
def admin_login():
    next_url = safe_next(request.values.get("next"))
    if request.method == "GET":
        if get_admin_session() is not None:
            return redirect(next_url)
        return render_template("admin/login.html", vm={"next": next_url})
    login_id = (request.form.get("id") or "").strip()
    password = request.form.get("password") or ""
    if not login_id or not password:
        return render_template("admin/login.html", vm={"next": next_url, "error": "아이디와 비밀번호를 입력해주세요."}), 400
    try:
        _, cookie_value = authenticate(login_id, password)
    except SessionError as e:
        return render_template("admin/login.html", vm={"next": next_url, "error": str(e)}), 401
    except RateLimitError as e:
        resp = make_response(render_template("admin/login.html", vm={"next": next_url, "error": str(e)}), 429)
        resp.headers["Retry-After"] = str(max(int(e.retry_after), 1))
        return resp
    except ConfigurationError:
        return render_template("admin/login.html", vm={"next": next_url, "error": "서버 인증 설정이 필요합니다."}), 500
    return set_session_cookie(redirect(next_url), cookie_value)


@bp.get("/admin")
def admin_index():
    sess = require_session()
    db = get_session()
    try:
        allowed = None if sess["role"] == "super" else get_effective_allowed_keys(db)
    finally:
        db.close()
    return render_template("admin/index.html", role=sess["role"], allowed=allowed)


@bp.get("/admin/system")
def admin_system():
    require_role("super")
    db = get_session()
    try:
        allowed = get_effective_allowed_keys(db)
    finally:
        db.close()
    return render_template("admin/system.html", allowed=allowed)


@bp.get("/healthz")
def healthz():
    return {"status": "ok"}, 200
