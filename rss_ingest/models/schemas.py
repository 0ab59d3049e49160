from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Raw items come from the transport as loose dicts with no guaranteed keys.
RawFeedItem = dict[str, Any]


class FeedSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    display_name: str


class FeedItem(BaseModel):
    """Canonical feed item, one row per (source, guid)."""

    model_config = ConfigDict(from_attributes=True)

    source: str
    guid: str
    title: str
    link: str
    pub_date: datetime
    content_snippet: str | None = None
    categories: list[str] = Field(default_factory=list)
    creator: str | None = None
    iso_date: datetime | None = None
    content: str | None = None
    fetched_at: datetime

    @field_validator("pub_date", "iso_date", "fetched_at")
    @classmethod
    def _assume_utc(cls, v: datetime | None) -> datetime | None:
        # SQLite hands back naive datetimes
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v
