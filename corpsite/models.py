"""SQLAlchemy models. Every piece of site copy, the admin policy document and
inbound inquiries share the single key/value ``site_content`` table."""

from datetime import UTC, datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class SiteContent(Base):
    __tablename__ = "site_content"
    key: Mapped[str] = mapped_column(String(200), primary_key=True)
    title: Mapped[str] = mapped_column(Text, default="")
    subtitle: Mapped[str] = mapped_column(Text, default="")
    body: Mapped[str] = mapped_column(Text, default="")
    hero_image_url: Mapped[str] = mapped_column(Text, default="")
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "title": self.title or "",
            "subtitle": self.subtitle or "",
            "body": self.body or "",
            "hero_image_url": self.hero_image_url or "",
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
