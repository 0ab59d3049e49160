from dotenv import load_dotenv
from pydantic import BaseModel, Field
import os

load_dotenv()

def _to_int(v: str | None, default: int) -> int:
    if v is None or not v.strip():
        return default
    return int(v.strip())

def _to_float(v: str | None, default: float) -> float:
    if v is None or not v.strip():
        return default
    return float(v.strip())


class Settings(BaseModel):
    database_url: str = Field(default="sqlite:///data/feeds.db")
    sqlite_busy_timeout_seconds: float = Field(default=30.0)

    log_level: str = Field(default="INFO")
    log_file: str = Field(default="logs/run.log")

    fetch_timeout_seconds: float = Field(default=20.0)
    fetch_user_agent: str = Field(default="rss-ingest/0.1")

    # insert conflicts are retried as updates this many times
    upsert_max_attempts: int = Field(default=3, ge=1)


_settings: Settings | None = None

def get_settings() -> Settings:
    global _settings
    if _settings is not None:
        return _settings

    _settings = Settings(
        database_url=os.getenv("DATABASE_URL", "sqlite:///data/feeds.db"),
        sqlite_busy_timeout_seconds=_to_float(os.getenv("SQLITE_BUSY_TIMEOUT_SECONDS"), 30.0),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE", "logs/run.log"),
        fetch_timeout_seconds=_to_float(os.getenv("FETCH_TIMEOUT_SECONDS"), 20.0),
        fetch_user_agent=os.getenv("FETCH_USER_AGENT", "rss-ingest/0.1"),
        upsert_max_attempts=_to_int(os.getenv("UPSERT_MAX_ATTEMPTS"), 3),
    )
    return _settings

