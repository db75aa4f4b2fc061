from __future__ import annotations

from collections.abc import Iterable, Mapping

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import SiteContent

CONTENT_FIELDS = ("title", "subtitle", "body", "hero_image_url")


class SiteContentRepo:
    """Row-level access to the ``site_content`` table.

    Writes commit immediately; callers own the session lifetime.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> SiteContent | None:
        return self.db.get(SiteContent, key)

    def upsert(self, key: str, **fields: str) -> SiteContent:
        row = self.get(key)
        if row is None:
            row = SiteContent(key=key)
            self.db.add(row)
        for name in CONTENT_FIELDS:
            if name in fields:
                setattr(row, name, fields[name] if fields[name] is not None else "")
            elif getattr(row, name) is None:
                setattr(row, name, "")
        self.db.commit()
        return row

    def upsert_many(self, rows: Iterable[Mapping[str, str]]) -> int:
        # Last occurrence of a key wins
        by_key = {data["key"]: data for data in rows}
        for key, data in by_key.items():
            row = self.get(key)
            if row is None:
                row = SiteContent(key=key)
                self.db.add(row)
            for name in CONTENT_FIELDS:
                setattr(row, name, data.get(name) or "")
        self.db.commit()
        return len(by_key)

    def insert(self, key: str, **fields: str) -> SiteContent:
        row = SiteContent(key=key, **{n: fields.get(n) or "" for n in CONTENT_FIELDS})
        self.db.add(row)
        self.db.commit()
        return row

    def list_by_prefix(self, prefix: str, *, newest_first: bool = True) -> list[SiteContent]:
        order = SiteContent.key.desc() if newest_first else SiteContent.key.asc()
        stmt = select(SiteContent).where(SiteContent.key.startswith(prefix, autoescape=True)).order_by(order)
        return list(self.db.scalars(stmt))

    def all(self) -> list[SiteContent]:
        return list(self.db.scalars(select(SiteContent).order_by(SiteContent.key.asc())))

    def delete(self, key: str) -> bool:
        row = self.get(key)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True


__all__ = ["CONTENT_FIELDS", "SiteContentRepo"]
