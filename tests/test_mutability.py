"""
Tests for the comment edit window.

A comment may be edited or deleted only within the window after it was
written, and never once deleted. Running out of time is reported
separately from not being the author.
"""
from datetime import datetime, timedelta

import pytest

from taskboard.models.domain import Comment
from taskboard.models.enums import CommentableType
from taskboard.services.comments import CommentService
from taskboard.services.errors import AuthorizationError, EditWindowExpiredError, NotFoundError
from taskboard.services.mutability import can_mutate

WINDOW = timedelta(minutes=15)
T0 = datetime(2026, 3, 2, 9, 0, 0)


class TestCanMutate:

    def test_inside_window(self):
        assert can_mutate(T0, None, T0 + timedelta(minutes=14, seconds=59), WINDOW)

    def test_window_boundary_is_closed(self):
        assert not can_mutate(T0, None, T0 + WINDOW, WINDOW)

    def test_after_window(self):
        assert not can_mutate(T0, None, T0 + timedelta(minutes=15, seconds=1), WINDOW)

    def test_deleted_is_never_mutable(self):
        assert not can_mutate(T0, T0, T0 + timedelta(seconds=1), WINDOW)


@pytest.fixture
def comment(comment_service, sample_todo):
    return comment_service.create(sample_todo.id, "Looks good to me")


class TestCommentEditWindow:

    def test_update_just_inside_window(self, comment_service, sample_todo, comment, clock):
        clock.advance(minutes=14, seconds=59)

        updated = comment_service.update(sample_todo.id, comment.id, "Looks great")

        assert updated.content == "Looks great"

    def test_update_after_window_is_refused(self, db_session, comment_service, sample_todo, comment, clock):
        clock.advance(minutes=15, seconds=1)

        with pytest.raises(EditWindowExpiredError) as exc_info:
            comment_service.update(sample_todo.id, comment.id, "Too late")

        assert exc_info.value.code == "EDIT_TIME_EXPIRED"
        stored = db_session.query(Comment).filter(Comment.id == comment.id).one()
        assert stored.content == "Looks good to me"

    def test_deleted_comment_cannot_be_updated(self, comment_service, sample_todo, comment, clock):
        comment_service.delete(sample_todo.id, comment.id)
        clock.advance(seconds=1)

        with pytest.raises(EditWindowExpiredError):
            comment_service.update(sample_todo.id, comment.id, "Back from the dead")

    def test_delete_inside_window_is_soft(self, db_session, comment_service, sample_todo, comment, clock):
        deleted_at = clock.advance(minutes=1)

        comment_service.delete(sample_todo.id, comment.id)

        stored = db_session.query(Comment).filter(Comment.id == comment.id).one()
        assert stored.deleted_at == deleted_at
        assert comment_service.list(sample_todo.id) == []

    def test_delete_after_window_is_refused(self, comment_service, sample_todo, comment, clock):
        clock.advance(minutes=30)

        with pytest.raises(EditWindowExpiredError):
            comment_service.delete(sample_todo.id, comment.id)

    def test_other_author_is_unauthorized_not_expired(self, db_session, comment_service, sample_todo, clock):
        """Someone else's comment is refused as unauthorized, even inside the window."""
        foreign = Comment(
            content="Written by a collaborator",
            user_id="user_456",
            commentable_type=CommentableType.TODO,
            commentable_id=sample_todo.id,
            created_at=clock(),
            updated_at=clock(),
        )
        db_session.add(foreign)
        db_session.commit()

        with pytest.raises(AuthorizationError):
            comment_service.update(sample_todo.id, foreign.id, "Not yours")
        with pytest.raises(AuthorizationError):
            comment_service.delete(sample_todo.id, foreign.id)

        assert not comment_service.is_editable(foreign)

    def test_comment_on_another_users_todo_is_not_found(self, db_session, other_actor, sample_todo):
        with pytest.raises(NotFoundError):
            CommentService(db_session, other_actor).create(sample_todo.id, "Hi")

    def test_comment_under_wrong_todo_is_not_found(self, comment_service, todo_service, comment):
        other_todo = todo_service.create(title="Another task")

        with pytest.raises(NotFoundError):
            comment_service.update(other_todo.id, comment.id, "Moved")

    def test_target_is_the_todo(self, comment, sample_todo):
        assert comment.commentable_type == CommentableType.TODO
        assert comment.target.id == sample_todo.id

    def test_editable_flag_follows_window(self, comment_service, comment, clock):
        assert comment_service.is_editable(comment)

        clock.advance(minutes=15)

        assert not comment_service.is_editable(comment)
