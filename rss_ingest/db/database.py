from __future__ import annotations

import logging
import threading
from pathlib import Path

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from rss_ingest.config.settings import get_settings
from rss_ingest.db.models import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Process-wide store handle.

    ensure_connected() builds the engine, creates tables (idempotent) and checks
    connectivity once; concurrent callers block on the same lock and reuse the
    first caller's engine. dispose() tears it down, after which the next
    ensure_connected() starts over.
    """

    def __init__(self, url: str | None = None) -> None:
        self._url = url
        self._engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None
        self._lock = threading.Lock()

    @property
    def url(self) -> str:
        return self._url or get_settings().database_url

    def ensure_connected(self) -> Engine:
        engine = self._engine
        if engine is not None:
            return engine

        with self._lock:
            if self._engine is None:
                self._engine = self._connect()
                self._sessions = sessionmaker(self._engine, expire_on_commit=False)
            return self._engine

    def session(self) -> Session:
        self.ensure_connected()
        assert self._sessions is not None
        return self._sessions()

    def dispose(self) -> None:
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                logger.info("Database connection closed")
            self._engine = None
            self._sessions = None

    def _connect(self) -> Engine:
        s = get_settings()
        url = make_url(self.url)
        connect_args = {}

        if url.get_backend_name() == "sqlite":
            if url.database and url.database != ":memory:":
                Path(url.database).parent.mkdir(parents=True, exist_ok=True)
            # writers wait for each other instead of failing with "database is locked"
            connect_args["timeout"] = s.sqlite_busy_timeout_seconds
            connect_args["check_same_thread"] = False

        engine = create_engine(url, future=True, connect_args=connect_args)

        # Create all tables
        Base.metadata.create_all(engine)

        # Connectivity check
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))

        logger.info("Database ready: %s", url.render_as_string(hide_password=True))
        return engine


_database = Database()


def get_database() -> Database:
    return _database


def get_engine() -> Engine:
    return _database.ensure_connected()


def init_db() -> None:
    """
    Create tables (idempotent) and verify connectivity.
    """
    _database.ensure_connected()


def close_db() -> None:
    _database.dispose()
