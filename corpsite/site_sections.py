"""Catalogue of the site's top-level sections.

Menu labels and visibility can be overridden from the admin panel; the overrides
are stored as JSON objects in the ``menu_labels`` / ``menu_visibility`` content rows.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

MENU_LABELS_KEY = "menu_labels"
MENU_VISIBILITY_KEY = "menu_visibility"


@dataclass(frozen=True)
class SiteSection:
    label: str
    slug: str


DEFAULT_SITE_SECTIONS: tuple[SiteSection, ...] = (
    SiteSection("회사소개", "company"),
    SiteSection("콤프레샤", "compressor"),
    SiteSection("에어크리닝시스템", "air-cleaning"),
    SiteSection("발전기", "generator"),
    SiteSection("친환경에너지", "eco-energy"),
    SiteSection("산업기계", "industrial"),
    SiteSection("거래실적", "records"),
    SiteSection("특가판매", "special-sale"),
    SiteSection("제품AS", "as"),
    SiteSection("고객센터", "support"),
)

SECTION_SLUGS: tuple[str, ...] = tuple(s.slug for s in DEFAULT_SITE_SECTIONS)


def _parse_object(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def parse_menu_labels(raw: str | None) -> dict[str, str]:
    return {str(k): v for k, v in _parse_object(raw).items() if isinstance(v, str)}


def parse_menu_visibility(raw: str | None) -> dict[str, bool]:
    return {str(k): v for k, v in _parse_object(raw).items() if isinstance(v, bool)}


def build_site_sections(
    labels: dict[str, str] | None = None, visibility: dict[str, bool] | None = None
) -> list[SiteSection]:
    labels = labels or {}
    visibility = visibility or {}
    return [
        SiteSection((labels.get(s.slug) or "").strip() or s.label, s.slug)
        for s in DEFAULT_SITE_SECTIONS
        if visibility.get(s.slug) is not False
    ]


def section_label(slug: str, labels: dict[str, str] | None = None) -> str:
    for s in DEFAULT_SITE_SECTIONS:
        if s.slug == slug:
            return ((labels or {}).get(slug) or "").strip() or s.label
    return slug


__all__ = [
    "MENU_LABELS_KEY",
    "MENU_VISIBILITY_KEY",
    "SiteSection",
    "DEFAULT_SITE_SECTIONS",
    "SECTION_SLUGS",
    "parse_menu_labels",
    "parse_menu_visibility",
    "build_site_sections",
    "section_label",
]
