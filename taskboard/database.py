"""Engine, session factory and declarative base."""
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from taskboard.config import get_settings


def build_engine(url: str):
    """SQLite for local runs and tests, a small pre-pinged pool for anything else."""
    if url.startswith("sqlite"):
        # Requests are served from a threadpool, not the thread that opened the file
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url, pool_pre_ping=True, pool_size=5, max_overflow=10)


engine = build_engine(get_settings().database_url)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """One session per request; closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
