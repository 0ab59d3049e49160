from __future__ import annotations

from rss_ingest.models.schemas import FeedSource
from rss_ingest.services.exceptions import UnknownSourceError


FEED_SOURCES: dict[str, FeedSource] = {
    "marketwatch": FeedSource(
        id="marketwatch-top",
        url="https://www.marketwatch.com/rss/topstories",
        display_name="MarketWatch Top Stories",
    ),
    "nasdaq": FeedSource(
        id="nasdaq-news",
        url="https://www.nasdaq.com/feed/nasdaq-original/rss.xml",
        display_name="NASDAQ News",
    ),
    "reuters": FeedSource(
        id="reuters-business",
        url="https://www.reutersagency.com/feed/?taxonomy=best-sectors&post_type=best",
        display_name="Reuters Business News",
    ),
    "seekingalpha": FeedSource(
        id="seekingalpha-news",
        url="https://seekingalpha.com/market_currents.xml",
        display_name="Seeking Alpha",
    ),
}


def get_feed_source(source_key: str) -> FeedSource:
    try:
        return FEED_SOURCES[source_key]
    except KeyError:
        raise UnknownSourceError(source_key) from None
