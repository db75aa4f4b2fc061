from __future__ import annotations

import os
from dataclasses import dataclass, field


def _split_csv(raw: str) -> list[str]:
    return [s for s in [p.strip() for p in raw.split(",")] if s]


def _flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Config:
    secret_key: str = "change-me"
    database_url: str = "sqlite:///dev.db"
    # Per-role cookie secrets; rotating one invalidates every session of that role
    admin_session_token: str = ""
    super_admin_session_token: str = ""
    admin_id: str = ""
    admin_password: str = ""
    admin_password_hash: str = ""
    super_admin_id: str = ""
    super_admin_password: str = ""
    super_admin_password_hash: str = ""
    admin_allowed_keys: list[str] = field(default_factory=list)
    session_max_age_seconds: int = 43200  # 12h
    login_max_failures: int = 5
    login_block_seconds: int = 600
    login_throttle_backend: str = "memory"
    login_throttle_max_keys: int = 10000
    login_throttle_prefix: str = "corpsite:login:"
    redis_url: str = "redis://localhost:6379/0"
    trust_proxy_headers: bool = False
    allow_plaintext_passwords: bool = False

    @classmethod
    def from_env(cls) -> Config:
        return cls(
            secret_key=os.getenv("SECRET_KEY", "change-me"),
            database_url=os.getenv("DATABASE_URL", "sqlite:///dev.db"),
            admin_session_token=os.getenv("ADMIN_SESSION_TOKEN", ""),
            super_admin_session_token=os.getenv("SUPER_ADMIN_SESSION_TOKEN", ""),
            admin_id=os.getenv("ADMIN_ID", ""),
            admin_password=os.getenv("ADMIN_PASSWORD", ""),
            admin_password_hash=os.getenv("ADMIN_PASSWORD_HASH", ""),
            super_admin_id=os.getenv("SUPER_ADMIN_ID", ""),
            super_admin_password=os.getenv("SUPER_ADMIN_PASSWORD", ""),
            super_admin_password_hash=os.getenv("SUPER_ADMIN_PASSWORD_HASH", ""),
            admin_allowed_keys=_split_csv(os.getenv("ADMIN_ALLOWED_KEYS", "")),
            session_max_age_seconds=int(os.getenv("SESSION_MAX_AGE_SECONDS", "43200")),
            login_max_failures=int(os.getenv("LOGIN_MAX_FAILURES", "5")),
            login_block_seconds=int(os.getenv("LOGIN_BLOCK_SECONDS", "600")),
            login_throttle_backend=os.getenv("LOGIN_THROTTLE_BACKEND", "memory").strip().lower() or "memory",
            login_throttle_max_keys=int(os.getenv("LOGIN_THROTTLE_MAX_KEYS", "10000")),
            login_throttle_prefix=os.getenv("LOGIN_THROTTLE_PREFIX", "corpsite:login:"),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            trust_proxy_headers=_flag("TRUST_PROXY_HEADERS"),
            allow_plaintext_passwords=_flag("ALLOW_PLAINTEXT_PASSWORDS"),
        )

    def override(self, d: dict):
        for k, v in d.items():
            if hasattr(self, k):
                setattr(self, k, v)

    def to_flask_dict(self):
        return {
            "SECRET_KEY": self.secret_key,
            "SQLALCHEMY_DATABASE_URI": self.database_url,
            "ADMIN_SESSION_TOKEN": self.admin_session_token,
            "SUPER_ADMIN_SESSION_TOKEN": self.super_admin_session_token,
            "ADMIN_ID": self.admin_id,
            "ADMIN_PASSWORD": self.admin_password,
            "ADMIN_PASSWORD_HASH": self.admin_password_hash,
            "SUPER_ADMIN_ID": self.super_admin_id,
            "SUPER_ADMIN_PASSWORD": self.super_admin_password,
            "SUPER_ADMIN_PASSWORD_HASH": self.super_admin_password_hash,
            "ADMIN_ALLOWED_KEYS": list(self.admin_allowed_keys),
            "SESSION_MAX_AGE_SECONDS": self.session_max_age_seconds,
            "LOGIN_MAX_FAILURES": self.login_max_failures,
            "LOGIN_BLOCK_SECONDS": self.login_block_seconds,
            "LOGIN_THROTTLE_BACKEND": self.login_throttle_backend,
            "LOGIN_THROTTLE_MAX_KEYS": self.login_throttle_max_keys,
            "LOGIN_THROTTLE_PREFIX": self.login_throttle_prefix,
            "REDIS_URL": self.redis_url,
            "TRUST_PROXY_HEADERS": self.trust_proxy_headers,
            "ALLOW_PLAINTEXT_PASSWORDS": self.allow_plaintext_passwords,
            # Flask's own session cookie is unused for auth but keep it hardened
            "SESSION_COOKIE_HTTPONLY": True,
            "SESSION_COOKIE_SAMESITE": "Lax",
        }
