from __future__ import annotations

import html
import re
import time
from datetime import datetime, timezone
from typing import Any

import feedparser
import requests

from rss_ingest.config.settings import get_settings
from rss_ingest.models.schemas import RawFeedItem
from rss_ingest.services.exceptions import FetchError

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


def _snippet(markup: str | None) -> str | None:
    if not markup:
        return None
    text = _WS_RE.sub(" ", html.unescape(_TAG_RE.sub(" ", markup))).strip()
    return text or None


def _iso(parsed: Any) -> str | None:
    if not isinstance(parsed, time.struct_time):
        return None
    dt = datetime(*parsed[:6], tzinfo=timezone.utc)
    return dt.isoformat().replace("+00:00", "Z")


def _categories(entry: dict[str, Any]) -> list[str] | None:
    tags = entry.get("tags")
    if not isinstance(tags, list):
        return None
    terms = [t.get("term") for t in tags if isinstance(t, dict)]
    return [t for t in terms if isinstance(t, str) and t.strip()]


def _content(entry: dict[str, Any]) -> str | None:
    blocks = entry.get("content")
    if isinstance(blocks, list) and blocks:
        value = blocks[0].get("value") if isinstance(blocks[0], dict) else None
        if isinstance(value, str):
            return value
    return None


def entry_to_raw_item(entry: dict[str, Any]) -> RawFeedItem:
    """
    Map a feedparser entry onto the loose raw item shape the normalizer reads.
    """
    summary = entry.get("summary") or entry.get("description")
    return {
        "guid": entry.get("id") or entry.get("guid"),
        "link": entry.get("link"),
        "title": entry.get("title"),
        "pub_date": entry.get("published") or entry.get("updated"),
        "iso_date": _iso(entry.get("published_parsed") or entry.get("updated_parsed")),
        "content_snippet": _snippet(summary),
        "categories": _categories(entry),
        "creator": entry.get("author"),
        "content": _content(entry),
    }


def fetch_feed(url: str, timeout: float | None = None) -> list[RawFeedItem]:
    """
    Download and parse one RSS/Atom feed into raw items.

    Raises FetchError on network errors, HTTP errors or a document feedparser
    cannot make sense of.
    """
    s = get_settings()
    try:
        r = requests.get(
            url,
            timeout=timeout or s.fetch_timeout_seconds,
            headers={"User-Agent": s.fetch_user_agent},
        )
        r.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch feed: {url} ({e})") from e

    # keep the server-declared charset; feedparser looks headers up in lower case
    headers = {k.lower(): v for k, v in r.headers.items()}
    feed = feedparser.parse(r.content, response_headers=headers)

    entries = getattr(feed, "entries", None)
    if getattr(feed, "bozo", 0) and not entries:
        exc = getattr(feed, "bozo_exception", None)
        msg = f"Invalid RSS/Atom feed: {url}"
        if exc:
            msg += f" ({exc})"
        raise FetchError(msg)

    if not isinstance(entries, list):
        raise FetchError(f"Feed has no entries: {url}")
    return [entry_to_raw_item(e) for e in entries]
