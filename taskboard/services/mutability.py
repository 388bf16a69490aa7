"""
Time-boxed mutability guard.

A record may be changed or deleted only for a fixed window after it was
created, and never once it has been soft-deleted. Comments are the only
user today.
"""
from datetime import datetime, timedelta
from typing import Optional

from taskboard.models.domain import Comment
from taskboard.services.errors import EditWindowExpiredError


def can_mutate(
    created_at: datetime,
    deleted_at: Optional[datetime],
    now: datetime,
    window: timedelta,
) -> bool:
    """True while now - created_at < window and the record is not deleted."""
    if deleted_at is not None:
        return False
    return now - created_at < window


def ensure_mutable(comment: Comment, now: datetime, window: timedelta) -> None:
    """Raise EditWindowExpiredError when the guard rejects a change to the comment."""
    if not can_mutate(comment.created_at, comment.deleted_at, now, window):
        raise EditWindowExpiredError("Comment", comment.id)
