class RssIngestError(Exception):
    """Base class for feed ingestion errors."""


class UnknownSourceError(RssIngestError):
    """Raised when a source key is not in the feed registry."""

    def __init__(self, source_key: str) -> None:
        super().__init__(f"Unknown RSS feed source: {source_key}")
        self.source_key = source_key


class FetchError(RssIngestError):
    """Raised when a feed cannot be fetched or parsed. Fatal to the whole batch."""


class InvalidItemError(RssIngestError):
    """Raised when a raw item has no usable guid, title or link."""


class CategoryNormalizationError(RssIngestError):
    """Raised while mapping category objects; never leaves the normalizer."""


class DuplicateKeyRace(RssIngestError):
    """Raised when an insert loses to a concurrent insert of the same (source, guid)."""


class UpsertError(RssIngestError):
    """Raised when an item could not be written after all retries."""
