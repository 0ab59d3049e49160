from __future__ import annotations

import calendar
import time
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

from rss_ingest.models.schemas import FeedItem, FeedSource, RawFeedItem
from rss_ingest.services.categories import normalize_categories
from rss_ingest.services.exceptions import InvalidItemError


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value.strip() else None


def _as_key(value: Any) -> str | None:
    if isinstance(value, str):
        return _as_str(value)
    # custom transports may hand over numeric ids
    if isinstance(value, (int, float)) and not isinstance(value, bool) and value:
        return str(value)
    return None


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_datetime(value: Any) -> datetime | None:
    """
    Best-effort date parsing for feed fields.
    Accepts datetime, time.struct_time, RFC 822 (RSS pubDate) and ISO 8601 strings.
    Returns a UTC-aware datetime, or None when nothing usable is found.
    """
    if isinstance(value, datetime):
        return _to_utc(value)
    if isinstance(value, time.struct_time):
        return datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)

    raw = _as_str(value)
    if raw is None:
        return None
    raw = raw.strip()

    try:
        return _to_utc(parsedate_to_datetime(raw))
    except (TypeError, ValueError, IndexError):
        pass

    try:
        return _to_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))
    except ValueError:
        return None


def normalize_item(raw: RawFeedItem, source: FeedSource, now: datetime) -> FeedItem:
    """
    Map one raw feed item onto the canonical FeedItem for `source`.

    guid falls back to link; title and link are required. pub_date defaults to
    `now`, iso_date does not. Raises InvalidItemError when the item cannot be
    identified or lacks title/link.
    """
    link = _as_str(raw.get("link"))
    guid = _as_key(raw.get("guid")) or link
    if guid is None:
        raise InvalidItemError("Item has neither guid nor link")

    title = _as_str(raw.get("title"))
    if title is None:
        raise InvalidItemError(f"Item {guid} has no title")
    if link is None:
        raise InvalidItemError(f"Item {guid} has no link")

    return FeedItem(
        source=source.id,
        guid=guid,
        title=title,
        link=link,
        pub_date=parse_datetime(raw.get("pub_date")) or now,
        content_snippet=_as_str(raw.get("content_snippet")),
        categories=normalize_categories(raw.get("categories")),
        creator=_as_str(raw.get("creator")),
        iso_date=parse_datetime(raw.get("iso_date")),
        content=_as_str(raw.get("content")),
        fetched_at=now,
    )
