from __future__ import annotations

from datetime import datetime
from sqlalchemy import (
    String, Integer, DateTime, Text, JSON, UniqueConstraint
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class RssItem(Base):
    __tablename__ = "rss_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # FeedSource.id, stored as a value copy
    source: Mapped[str] = mapped_column(String(100), nullable=False)
    guid: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    link: Mapped[str] = mapped_column(Text, nullable=False)
    pub_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # optional payloads
    content_snippet: Mapped[str | None] = mapped_column(Text, nullable=True)
    categories: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    creator: Mapped[str | None] = mapped_column(Text, nullable=True)
    iso_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)

    fetched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("source", "guid", name="uq_rss_items_source_guid"),
    )
