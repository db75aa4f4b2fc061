"""Flask application factory.

Provides:
 - Configuration from environment (.env honoured) with per-call overrides
 - DB engine initialization and per-request session cleanup
 - Login throttle backend selection
 - Route gate for admin pages/APIs
 - Unified JSON error envelope
 - Request id + structured request log line
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Any

from dotenv import load_dotenv
from flask import Flask, g, request
from werkzeug.wrappers.response import Response

from .app_authz import get_admin_session
from .auth_api import bp as auth_api_bp
from .backup_api import bp as backup_api_bp
from .config import Config
from .content_api import bp as content_api_bp
from .db import create_all, init_engine, remove_session
from .errors import register_error_handlers
from .inquiry_api import bp as inquiry_api_bp
from .logging_setup import install_log_handler
from .login_throttle import build_login_throttle
from .pages import bp as pages_bp
from .policy_api import bp as policy_api_bp
from .route_gate import init_route_gate


def create_app(config_override: dict[str, Any] | None = None) -> Flask:
    load_dotenv()
    base_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
    app = Flask(
        __name__,
        template_folder=os.path.join(base_dir, "templates"),
        static_url_path="/static",
        static_folder=os.path.join(base_dir, "static"),
    )
    # --- Configuration ---
    cfg = Config.from_env()
    if config_override:
        known = {k: v for k, v in config_override.items() if hasattr(cfg, k)}
        if known:
            cfg.override(known)
    if not os.getenv("DATABASE_URL") and cfg.database_url == "sqlite:///dev.db":
        # Stable absolute dev DB path under the instance folder
        os.makedirs(app.instance_path, exist_ok=True)
        cfg.database_url = f"sqlite:///{os.path.join(app.instance_path, 'dev.db')}"
    app.config.update(cfg.to_flask_dict())
    if config_override:
        for k, v in config_override.items():  # also allow direct Flask config keys
            if k.isupper():
                app.config[k] = v

    log = install_log_handler(app.config.get("LOG_LEVEL"))

    # --- DB setup ---
    init_engine(cfg.database_url, force=bool(app.config.get("FORCE_DB_REINIT")))
    if app.config.get("TESTING") or os.getenv("DEV_CREATE_ALL", "0") == "1":
        create_all()

    @app.teardown_appcontext
    def _remove_db_session(_exc: BaseException | None) -> None:
        remove_session()

    # --- Login throttle ---
    app.login_throttle = build_login_throttle(app.config)  # type: ignore[attr-defined]

    # --- Error handling ---
    register_error_handlers(app)

    # --- Request id / timing (before the gate so denials are logged with an id) ---
    req_log = logging.getLogger("corpsite.request")

    @app.before_request
    def _before_req() -> None:
        g._t0 = time.perf_counter()
        g.request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())

    init_route_gate(app)

    @app.after_request
    def _after_req(resp: Response) -> Response:
        dur_ms = int((time.perf_counter() - getattr(g, "_t0", time.perf_counter())) * 1000)
        rid = getattr(g, "request_id", None) or str(uuid.uuid4())
        resp.headers["X-Request-Id"] = rid
        if request.path.startswith(("/api/", "/admin")) and "Cache-Control" not in resp.headers:
            resp.headers["Cache-Control"] = "no-store"
        sess = get_admin_session()
        req_log.info(
            {
                "method": request.method,
                "path": request.path,
                "status": resp.status_code,
                "duration_ms": dur_ms,
                "role": sess["role"] if sess else None,
            }
        )
        return resp

    # --- Register blueprints ---
    app.register_blueprint(auth_api_bp)
    app.register_blueprint(policy_api_bp)
    app.register_blueprint(content_api_bp)
    app.register_blueprint(inquiry_api_bp)
    app.register_blueprint(backup_api_bp)
    app.register_blueprint(pages_bp)

    log.info(
        "app created throttle=%s db=%s",
        type(app.login_throttle).__name__,  # type: ignore[attr-defined]
        cfg.database_url.split("@")[-1],
    )
    return app


__all__ = ["create_app"]
