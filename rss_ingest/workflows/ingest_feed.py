from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from rss_ingest.config.feeds import get_feed_source
from rss_ingest.db.database import Database, get_database
from rss_ingest.models.schemas import FeedItem, FeedSource, RawFeedItem
from rss_ingest.services.exceptions import FetchError, InvalidItemError
from rss_ingest.services.feed_fetcher import fetch_feed
from rss_ingest.services.normalizer import normalize_item
from rss_ingest.services.upsert import upsert_item

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], list[RawFeedItem]]


@dataclass
class ItemOutcome:
    index: int
    item: FeedItem | None = None
    created: bool = False
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class FetchReport:
    source: FeedSource
    outcomes: list[ItemOutcome] = field(default_factory=list)

    @property
    def new_items(self) -> list[FeedItem]:
        return [o.item for o in self.outcomes if o.created and o.item is not None]

    @property
    def updated_count(self) -> int:
        return sum(1 for o in self.outcomes if o.ok and not o.created)

    @property
    def failed(self) -> list[ItemOutcome]:
        return [o for o in self.outcomes if not o.ok]


def _process_item(
    index: int,
    raw: RawFeedItem,
    source: FeedSource,
    now: datetime,
    database: Database,
) -> ItemOutcome:
    try:
        item = normalize_item(raw, source, now)
        stored, created = upsert_item(item, database=database)
    except Exception as e:
        # one bad item never takes the batch down
        label = (raw.get("guid") or raw.get("link")) if isinstance(raw, dict) else None
        logger.warning(
            "Error processing %s item #%s (%r): %s",
            source.display_name, index, label, e,
            exc_info=not isinstance(e, InvalidItemError),
        )
        return ItemOutcome(index=index, error=e)

    if created:
        logger.info("New RSS item added: %s", stored.title)
    return ItemOutcome(index=index, item=stored, created=created)


def ingest_source(
    source_key: str,
    *,
    fetcher: Fetcher | None = None,
    database: Database | None = None,
) -> FetchReport:
    """
    Fetch one registered feed and upsert every item, returning per-item outcomes.

    UnknownSourceError and FetchError abort the call before anything is written.
    Item-level failures are recorded in the report and logged.
    """
    source = get_feed_source(source_key)
    fetch = fetcher or fetch_feed
    db = database or get_database()

    logger.info("Fetching %s RSS feed...", source.display_name)
    try:
        raw_items = list(fetch(source.url))
    except FetchError:
        raise
    except Exception as e:
        raise FetchError(f"Failed to fetch {source.display_name}: {e}") from e

    db.ensure_connected()

    now = datetime.now(timezone.utc)
    report = FetchReport(source=source)
    for index, raw in enumerate(raw_items):
        report.outcomes.append(_process_item(index, raw, source, now, db))

    logger.info(
        "%s RSS fetch complete. Added %s new items (%s updated, %s failed).",
        source.display_name,
        len(report.new_items),
        report.updated_count,
        len(report.failed),
    )
    return report


def fetch_by_source(
    source_key: str,
    *,
    fetcher: Fetcher | None = None,
    database: Database | None = None,
) -> list[FeedItem]:
    """Fetch a registered feed and return only the items created by this call."""
    return ingest_source(source_key, fetcher=fetcher, database=database).new_items


def fetch_marketwatch() -> list[FeedItem]:
    return fetch_by_source("marketwatch")


def fetch_nasdaq() -> list[FeedItem]:
    return fetch_by_source("nasdaq")
