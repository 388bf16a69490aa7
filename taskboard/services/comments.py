"""
Comment service - comments on todos, editable only for a short window.
"""
import logging
from datetime import timedelta
from typing import List

from sqlalchemy.orm import Session

from taskboard.models.domain import Comment, CommentTarget, Todo
from taskboard.services.context import ActorContext
from taskboard.services.errors import AuthorizationError, NotFoundError
from taskboard.services.mutability import can_mutate, ensure_mutable
from taskboard.services.transaction import transaction

logger = logging.getLogger("taskboard.comments")

DEFAULT_EDIT_WINDOW = timedelta(minutes=15)


class CommentService:
    """Comments on the acting user's todos."""

    def __init__(self, db: Session, actor: ActorContext, edit_window: timedelta = DEFAULT_EDIT_WINDOW):
        self.db = db
        self.actor = actor
        self.edit_window = edit_window

    def list(self, todo_id: int) -> List[Comment]:
        """Live comments on a todo, oldest first."""
        target = self._todo_target(todo_id)
        return (
            self.db.query(Comment)
            .filter(
                Comment.commentable_type == target.type,
                Comment.commentable_id == target.id,
                Comment.deleted_at.is_(None),
            )
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )

    def create(self, todo_id: int, content: str) -> Comment:
        with transaction(self.db):
            target = self._todo_target(todo_id)
            now = self.actor.now()
            comment = Comment(
                content=content,
                user_id=self.actor.actor_id,
                target=target,
                created_at=now,
                updated_at=now,
            )
            self.db.add(comment)
            self.db.flush()

        logger.info("comment %s added to todo %s by %s", comment.id, todo_id, self.actor.actor_id)
        return comment

    def update(self, todo_id: int, comment_id: int, content: str) -> Comment:
        """Change a comment's content while its edit window is open and it is not deleted."""
        with transaction(self.db):
            comment = self._find(todo_id, comment_id)
            self._check_owner(comment, "update")
            now = self.actor.now()
            ensure_mutable(comment, now, self.edit_window)

            comment.content = content
            comment.updated_at = now

        return comment

    def delete(self, todo_id: int, comment_id: int) -> None:
        """Soft-delete a comment while its edit window is open."""
        with transaction(self.db):
            comment = self._find(todo_id, comment_id)
            self._check_owner(comment, "delete")
            now = self.actor.now()
            ensure_mutable(comment, now, self.edit_window)

            comment.deleted_at = now
            comment.updated_at = now

        logger.info("comment %s deleted by %s", comment_id, self.actor.actor_id)

    def is_editable(self, comment: Comment) -> bool:
        """Whether the acting user could still change this comment right now."""
        return comment.user_id == self.actor.actor_id and can_mutate(
            comment.created_at, comment.deleted_at, self.actor.now(), self.edit_window
        )

    def _todo_target(self, todo_id: int) -> CommentTarget:
        owned = (
            self.db.query(Todo.id)
            .filter(Todo.id == todo_id, Todo.user_id == self.actor.actor_id)
            .first()
        )
        if owned is None:
            raise NotFoundError("Todo", todo_id)
        return CommentTarget.todo(todo_id)

    def _find(self, todo_id: int, comment_id: int) -> Comment:
        target = self._todo_target(todo_id)
        comment = self.db.query(Comment).filter(Comment.id == comment_id).first()
        if comment is None or comment.target != target:
            raise NotFoundError("Comment", comment_id)
        return comment

    def _check_owner(self, comment: Comment, action: str) -> None:
        if comment.user_id != self.actor.actor_id:
            raise AuthorizationError("Comment", action)
