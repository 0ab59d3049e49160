from __future__ import annotations

import logging

from rss_ingest.config.settings import get_settings
from rss_ingest.db.database import Database
from rss_ingest.db.store import find_one_and_replace_or_insert
from rss_ingest.models.schemas import FeedItem
from rss_ingest.services.exceptions import DuplicateKeyRace, UpsertError

logger = logging.getLogger(__name__)


def upsert_item(item: FeedItem, database: Database | None = None) -> tuple[FeedItem, bool]:
    """
    Insert `item` if its (source, guid) is new, else overwrite the stored row.

    Returns (stored_item, was_newly_created). The flag comes straight from the
    store's insert/update branch. Losing an insert race to a concurrent caller
    is retried as an update.
    """
    s = get_settings()
    key = {"source": item.source, "guid": item.guid}
    record = item.model_dump()

    for attempt in range(1, s.upsert_max_attempts + 1):
        try:
            row, created = find_one_and_replace_or_insert(key, record, database=database)
        except DuplicateKeyRace:
            logger.debug(
                "Insert race on %s/%s (attempt %s), retrying as update",
                item.source, item.guid, attempt,
            )
            continue
        return FeedItem.model_validate(row), created

    raise UpsertError(
        f"Gave up on {item.source}/{item.guid} after {s.upsert_max_attempts} attempts"
    )
