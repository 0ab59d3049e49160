from datetime import datetime, timezone

import pytest
from sqlalchemy import func, select

from rss_ingest.db.database import Database
from rss_ingest.db.models import RssItem
from rss_ingest.models.schemas import FeedItem


@pytest.fixture()
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'data' / 'feeds.db'}")
    yield db
    db.dispose()


def count_rows(db: Database) -> int:
    with db.session() as session:
        return session.scalar(select(func.count()).select_from(RssItem))


def make_item(**overrides) -> FeedItem:
    fields = {
        "source": "marketwatch-top",
        "guid": "https://e.co/1",
        "title": "Stocks rally",
        "link": "https://e.co/1",
        "pub_date": datetime(2025, 1, 6, 14, 30, tzinfo=timezone.utc),
        "content_snippet": "Markets closed higher.",
        "categories": ["Markets"],
        "creator": "Jane Doe",
        "iso_date": datetime(2025, 1, 6, 14, 30, tzinfo=timezone.utc),
        "content": "<p>Markets closed higher.</p>",
        "fetched_at": datetime(2025, 1, 6, 15, 0, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return FeedItem(**fields)
