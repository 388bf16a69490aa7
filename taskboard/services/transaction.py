"""Transaction boundary shared by every mutating service call."""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from taskboard.services.errors import PersistenceFailure


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    Commit everything done inside the block, or nothing.

    Store errors are re-raised as PersistenceFailure (original chained);
    any other exception is re-raised untouched. Both roll back first.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceFailure(str(exc.__class__.__name__)) from exc
    except Exception:
        db.rollback()
        raise
