from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from rss_ingest.db.database import Database, get_database
from rss_ingest.db.models import RssItem
from rss_ingest.services.exceptions import DuplicateKeyRace


def find_one_and_replace_or_insert(
    filter: dict[str, Any],
    record: dict[str, Any],
    database: Database | None = None,
) -> tuple[RssItem, bool]:
    """
    Replace the row matching `filter` with `record`, or insert it.

    Runs in a single transaction. Returns (row, created) where `created` is
    True only when this call inserted the row. An insert that trips the
    (source, guid) unique constraint raises DuplicateKeyRace; the caller
    should retry, which will then take the update branch.
    """
    db = database or get_database()

    with db.session() as session:
        row = session.scalars(
            select(RssItem).filter_by(**filter).with_for_update()
        ).first()

        created = row is None
        if row is None:
            row = RssItem(**record)
            session.add(row)
        else:
            for key, value in record.items():
                setattr(row, key, value)

        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            if created:
                raise DuplicateKeyRace(
                    f"Concurrent insert for {filter!r}"
                ) from e
            raise

    return row, created
