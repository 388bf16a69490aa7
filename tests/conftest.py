"""Pytest configuration and shared fixtures."""
import os
from datetime import datetime, timedelta

# Keep the app module from creating a database file on import
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from taskboard.database import Base
from taskboard.models.audit import ChangeRecord, Revision  # noqa: F401
from taskboard.models.domain import Category, Comment, Note, Tag, Todo  # noqa: F401
from taskboard.services.comments import CommentService
from taskboard.services.context import ActorContext
from taskboard.services.notes import NoteService
from taskboard.services.revisions import RevisionStore
from taskboard.services.todos import TodoService


class FakeClock:
    """A clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def db_session():
    """Create a fresh in-memory database for each test."""
    # StaticPool so the API tests' worker thread sees the same database
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False)
    session = TestingSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 2, 9, 0, 0))


@pytest.fixture
def actor(clock):
    return ActorContext(actor_id="user_123", now=clock)


@pytest.fixture
def other_actor(clock):
    return ActorContext(actor_id="user_456", now=clock)


@pytest.fixture
def todo_service(db_session, actor):
    return TodoService(db_session, actor)


@pytest.fixture
def revision_store(db_session, clock):
    return RevisionStore(db_session, max_revisions=50, now=clock)


@pytest.fixture
def note_service(db_session, actor, revision_store):
    return NoteService(db_session, actor, revision_store)


@pytest.fixture
def comment_service(db_session, actor):
    return CommentService(db_session, actor, edit_window=timedelta(minutes=15))


@pytest.fixture
def sample_todo(todo_service):
    """A pending, medium-priority todo with a description."""
    return todo_service.create(
        title="Write quarterly report",
        description="Numbers from finance first",
    )


@pytest.fixture
def sample_tags(db_session, actor):
    tags = [Tag(user_id=actor.actor_id, name=name) for name in ("work", "urgent", "home")]
    db_session.add_all(tags)
    db_session.commit()
    return tags
