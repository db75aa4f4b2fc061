"""Which content keys the ``admin`` role may edit.

The effective allow-list is resolved from an ordered list of providers, first
non-empty answer wins:

1. the policy document stored under ``admin_policy`` (managed by ``super``),
2. ``ADMIN_ALLOWED_KEYS`` from the environment,
3. the site section slugs.

``super`` is never restricted. An admin allowed ``<key>`` may also edit the
derived ``<key>_extra`` and ``<key>_style`` rows of that section.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

from flask import current_app, has_app_context
from sqlalchemy.orm import Session

from .content_repo import SiteContentRepo
from .errors import ValidationError
from .roles import Role
from .site_sections import SECTION_SLUGS

log = logging.getLogger(__name__)

POLICY_KEY = "admin_policy"
DERIVED_SUFFIXES: tuple[str, ...] = ("_extra", "_style")


def clean_keys(keys: Iterable[object]) -> list[str]:
    """Trim, drop empties and duplicates, keep first-seen order."""
    out: list[str] = []
    for k in keys:
        s = str(k).strip()
        if s and s not in out:
            out.append(s)
    return out


class AllowedKeysProvider(Protocol):
    name: str

    def allowed_keys(self) -> list[str] | None: ...  # pragma: no cover


class StoredPolicyProvider:
    name = "stored_policy"

    def __init__(self, db: Session):
        self.db = db

    def allowed_keys(self) -> list[str] | None:
        row = SiteContentRepo(self.db).get(POLICY_KEY)
        if row is None or not row.body:
            return None
        try:
            doc = json.loads(row.body)
        except ValueError:
            log.warning("malformed %s document; falling back to configured defaults", POLICY_KEY)
            return None
        keys = doc.get("allowedContentKeys") if isinstance(doc, dict) else None
        if not isinstance(keys, list):
            log.warning("%s document has no allowedContentKeys list; ignoring", POLICY_KEY)
            return None
        return clean_keys(keys)


class ConfiguredKeysProvider:
    name = "environment"

    def __init__(self, keys: Sequence[str] | str | None):
        if isinstance(keys, str):
            keys = keys.split(",")
        self.keys = clean_keys(keys or [])

    def allowed_keys(self) -> list[str] | None:
        return list(self.keys)


class SectionDefaultsProvider:
    name = "section_defaults"

    def allowed_keys(self) -> list[str] | None:
        return list(SECTION_SLUGS)


def resolve_allowed_keys(providers: Iterable[AllowedKeysProvider]) -> list[str]:
    for provider in providers:
        keys = provider.allowed_keys()
        if keys:
            return keys
    return []


def configured_default_keys() -> list[str]:
    """Allow-list used when no policy document is stored."""
    env_keys = current_app.config.get("ADMIN_ALLOWED_KEYS") if has_app_context() else None
    return resolve_allowed_keys([ConfiguredKeysProvider(env_keys), SectionDefaultsProvider()])


def default_providers(db: Session) -> list[AllowedKeysProvider]:
    env_keys = current_app.config.get("ADMIN_ALLOWED_KEYS") if has_app_context() else None
    return [StoredPolicyProvider(db), ConfiguredKeysProvider(env_keys), SectionDefaultsProvider()]


def get_effective_allowed_keys(db: Session) -> list[str]:
    return resolve_allowed_keys(default_providers(db))


def set_allowed_keys(db: Session, keys: Iterable[object]) -> list[str]:
    """Persist the admin allow-list. An empty list would lock admins out of every page."""
    cleaned = clean_keys(keys)
    if not cleaned:
        raise ValidationError("allowedContentKeys must contain at least one key")
    SiteContentRepo(db).upsert(
        POLICY_KEY,
        title="admin policy",
        subtitle="",
        body=json.dumps({"allowedContentKeys": cleaned}, ensure_ascii=False),
        hero_image_url="",
    )
    return cleaned


def base_key(key: str) -> str | None:
    for suffix in DERIVED_SUFFIXES:
        if key.endswith(suffix) and len(key) > len(suffix):
            return key[: -len(suffix)]
    return None


def can_edit(role: Role, key: str, allowed: Sequence[str]) -> bool:
    if role == "super":
        return True
    if key in allowed:
        return True
    base = base_key(key)
    return base is not None and base in allowed


__all__ = [
    "POLICY_KEY",
    "DERIVED_SUFFIXES",
    "clean_keys",
    "AllowedKeysProvider",
    "StoredPolicyProvider",
    "ConfiguredKeysProvider",
    "SectionDefaultsProvider",
    "resolve_allowed_keys",
    "configured_default_keys",
    "default_providers",
    "get_effective_allowed_keys",
    "set_allowed_keys",
    "base_key",
    "can_edit",
]
