"""Logger wiring for the ``corpsite`` namespace.

Module loggers (``corpsite.auth_api``, ``corpsite.route_gate`` ...) emit dict
messages; one handler on the package logger prints them with the request id.
"""

from __future__ import annotations

import logging
import os

from flask import g, has_request_context

PACKAGE_LOGGER = "corpsite"


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = getattr(g, "request_id", "-") if has_request_context() else "-"
        return True


def install_log_handler(level: str | None = None) -> logging.Logger:
    log = logging.getLogger(PACKAGE_LOGGER)
    # Avoid duplicate attachment when create_app runs more than once (tests)
    if not any(getattr(h, "_corpsite", False) for h in log.handlers):
        h = logging.StreamHandler()
        h._corpsite = True  # type: ignore[attr-defined]
        h.addFilter(RequestIdFilter())
        h.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s rid=%(request_id)s %(message)s"))
        log.addHandler(h)
    log.setLevel((level or os.getenv("LOG_LEVEL", "INFO")).upper())
    return log


__all__ = ["PACKAGE_LOGGER", "RequestIdFilter", "install_log_handler"]
