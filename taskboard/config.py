"""Runtime configuration read from the environment."""
import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    database_url: str
    max_revisions_per_note: int
    comment_edit_window: timedelta
    log_level: str


def _database_url() -> str:
    url = os.getenv("DATABASE_URL", "sqlite:///./taskboard.db")
    # Render/Heroku hand out postgres:// but SQLAlchemy needs postgresql://
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def load_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults."""
    max_revisions = int(os.getenv("MAX_REVISIONS_PER_NOTE", "50"))
    if max_revisions < 1:
        raise ValueError("MAX_REVISIONS_PER_NOTE must be at least 1")

    window_minutes = int(os.getenv("COMMENT_EDIT_WINDOW_MINUTES", "15"))
    if window_minutes < 0:
        raise ValueError("COMMENT_EDIT_WINDOW_MINUTES cannot be negative")

    return Settings(
        database_url=_database_url(),
        max_revisions_per_note=max_revisions,
        comment_edit_window=timedelta(minutes=window_minutes),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
