"""Admin credential checks.

Passwords are configured per role through the environment, preferably as a hash:

* werkzeug format, as produced by ``generate_password_hash`` (``scrypt:32768:8:1$salt$hash``)
* legacy ``scrypt:<base64 salt>:<base64 key>`` (N=16384, r=8, p=1)

Plaintext passwords (``ADMIN_PASSWORD`` / ``SUPER_ADMIN_PASSWORD``) are honoured only
when ``ALLOW_PLAINTEXT_PASSWORDS`` is on and are logged as deprecated on use.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from collections.abc import Mapping
from dataclasses import dataclass

from werkzeug.security import check_password_hash

from .roles import Role

log = logging.getLogger(__name__)

_LEGACY_SCRYPT_PARAMS = {"n": 16384, "r": 8, "p": 1}


class ConfigurationError(Exception):
    """Required auth settings are missing; surfaced as a generic 500."""

    def __init__(self, message: str = "Server auth env is not configured", missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


@dataclass(frozen=True)
class RoleCredentials:
    role: Role
    login_id: str
    password: str = ""
    password_hash: str = ""

    def has_secret(self, allow_plaintext: bool) -> bool:
        return bool(self.password_hash) or (allow_plaintext and bool(self.password))


@dataclass(frozen=True)
class CredentialSettings:
    super_admin: RoleCredentials
    admin: RoleCredentials
    allow_plaintext: bool = False

    @classmethod
    def from_config(cls, cfg: Mapping[str, object]) -> CredentialSettings:
        def _s(name: str) -> str:
            return str(cfg.get(name) or "")

        return cls(
            super_admin=RoleCredentials(
                role="super",
                login_id=_s("SUPER_ADMIN_ID"),
                password=_s("SUPER_ADMIN_PASSWORD"),
                password_hash=_s("SUPER_ADMIN_PASSWORD_HASH"),
            ),
            admin=RoleCredentials(
                role="admin",
                login_id=_s("ADMIN_ID"),
                password=_s("ADMIN_PASSWORD"),
                password_hash=_s("ADMIN_PASSWORD_HASH"),
            ),
            allow_plaintext=bool(cfg.get("ALLOW_PLAINTEXT_PASSWORDS")),
        )

    def ordered(self) -> tuple[RoleCredentials, RoleCredentials]:
        return (self.super_admin, self.admin)


def missing_auth_settings(cfg: Mapping[str, object]) -> list[str]:
    """Names of settings that must be present before anyone may log in."""
    settings = CredentialSettings.from_config(cfg)
    missing = [
        name
        for name in ("SUPER_ADMIN_ID", "ADMIN_ID", "SUPER_ADMIN_SESSION_TOKEN", "ADMIN_SESSION_TOKEN")
        if not cfg.get(name)
    ]
    if not settings.super_admin.has_secret(settings.allow_plaintext):
        missing.append("SUPER_ADMIN_PASSWORD_HASH")
    if not settings.admin.has_secret(settings.allow_plaintext):
        missing.append("ADMIN_PASSWORD_HASH")
    return missing


def _verify_legacy_scrypt(password: str, encoded: str) -> bool:
    parts = encoded.split(":")
    if len(parts) != 3 or parts[0] != "scrypt" or not parts[1] or not parts[2]:
        return False
    try:
        salt = base64.b64decode(parts[1], validate=True)
        key = base64.b64decode(parts[2], validate=True)
    except (binascii.Error, ValueError):
        return False
    if not key:
        return False
    derived = hashlib.scrypt(password.encode("utf-8"), salt=salt, dklen=len(key), **_LEGACY_SCRYPT_PARAMS)
    return hmac.compare_digest(derived, key)


def verify_password_hash(password: str, encoded: str) -> bool:
    if "$" in encoded:
        try:
            return check_password_hash(encoded, password)
        except ValueError:
            # Unknown method in the stored hash
            return False
    return _verify_legacy_scrypt(password, encoded)


def verify_password(password: str, creds: RoleCredentials, allow_plaintext: bool) -> bool:
    if not password:
        return False
    if creds.password_hash:
        return verify_password_hash(password, creds.password_hash)
    if not (allow_plaintext and creds.password):
        return False
    log.warning("plaintext password configured for role=%s; set a *_PASSWORD_HASH instead", creds.role)
    return hmac.compare_digest(password.encode("utf-8"), creds.password.encode("utf-8"))


def validate_login_credentials(login_id: str, password: str, settings: CredentialSettings) -> Role | None:
    """Return the role the credentials authenticate as, or None.

    Both the id and the password are evaluated for every role so an unknown id
    costs the same as a wrong password.
    """
    for creds in settings.ordered():
        if not creds.login_id:
            continue
        id_ok = hmac.compare_digest(login_id.encode("utf-8"), creds.login_id.encode("utf-8"))
        pw_ok = verify_password(password, creds, settings.allow_plaintext)
        if id_ok and pw_ok:
            return creds.role
    return None


__all__ = [
    "ConfigurationError",
    "RoleCredentials",
    "CredentialSettings",
    "missing_auth_settings",
    "verify_password_hash",
    "verify_password",
    "validate_login_credentials",
]
