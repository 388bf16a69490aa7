"""
Todo service - every todo mutation goes through here.

Each create/update/delete commits the todo and its ChangeRecord in a
single transaction; if the change log write fails the todo change is
rolled back with it.
"""
import logging
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from taskboard.models.audit import ChangeRecord
from taskboard.models.domain import Category, Comment, Tag, Todo
from taskboard.models.enums import CommentableType, HistoryAction, TodoPriority, TodoStatus
from taskboard.services.change_recorder import ChangeRecorder
from taskboard.services.context import ActorContext
from taskboard.services.diff import TodoSnapshot
from taskboard.services.errors import NotFoundError
from taskboard.services.pagination import Page
from taskboard.services.transaction import transaction

logger = logging.getLogger("taskboard.todos")

UPDATABLE_FIELDS = (
    "title",
    "description",
    "category_id",
    "completed",
    "priority",
    "status",
    "due_date",
    "position",
    "tag_ids",
)


class TodoService:
    """CRUD over todos with an audit entry for every real change."""

    def __init__(self, db: Session, actor: ActorContext):
        self.db = db
        self.actor = actor
        self.recorder = ChangeRecorder(db, now=actor.now)

    def get(self, todo_id: int) -> Todo:
        """A todo owned by the acting user."""
        todo = (
            self.db.query(Todo)
            .filter(Todo.id == todo_id, Todo.user_id == self.actor.actor_id)
            .first()
        )
        if todo is None:
            raise NotFoundError("Todo", todo_id)
        return todo

    def list(self, page: Page) -> Tuple[List[Todo], int]:
        query = self.db.query(Todo).filter(Todo.user_id == self.actor.actor_id)
        total = query.count()
        todos = (
            query.order_by(Todo.position.asc(), Todo.created_at.desc(), Todo.id.desc())
            .offset(page.offset)
            .limit(page.per_page)
            .all()
        )
        return todos, total

    def create(
        self,
        title: str,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        priority: Optional[TodoPriority] = None,
        status: Optional[TodoStatus] = None,
        due_date: Optional[date] = None,
        position: Optional[int] = None,
        tag_ids: Optional[Iterable[int]] = None,
    ) -> Todo:
        """Create a todo and its CREATED record."""
        with transaction(self.db):
            status = status or TodoStatus.PENDING
            todo = Todo(
                user_id=self.actor.actor_id,
                title=title,
                description=description,
                category_id=self._owned_category_id(category_id),
                priority=priority or TodoPriority.MEDIUM,
                status=status,
                completed=status == TodoStatus.COMPLETED,
                due_date=due_date,
                position=position if position is not None else self._next_position(),
            )
            if tag_ids:
                todo.tags = self._owned_tags(tag_ids)
            now = self.actor.now()
            todo.created_at = now
            todo.updated_at = now
            self.db.add(todo)
            self.db.flush()

            self.recorder.record_change(
                todo.id, None, TodoSnapshot.of(todo), self.actor.actor_id, HistoryAction.CREATED
            )

        logger.info("todo %s created by %s", todo.id, self.actor.actor_id)
        return todo

    def update(self, todo_id: int, changes: Dict[str, Any]) -> Tuple[Todo, Optional[ChangeRecord]]:
        """
        Apply a partial update.

        Only keys present in changes are touched. A category_id of 0 or None
        clears the category; tag_ids replaces the whole tag set. Returns the
        todo and its new ChangeRecord, or None when nothing actually changed.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"cannot update fields: {', '.join(sorted(unknown))}")

        with transaction(self.db):
            todo = self.get(todo_id)
            before = TodoSnapshot.of(todo)

            if "title" in changes:
                todo.title = changes["title"]
            if "description" in changes:
                todo.description = changes["description"]
            if "category_id" in changes:
                todo.category_id = self._owned_category_id(changes["category_id"] or None)
            if "priority" in changes and changes["priority"] is not None:
                todo.priority = changes["priority"]
            if "due_date" in changes:
                todo.due_date = changes["due_date"]
            if "position" in changes and changes["position"] is not None:
                todo.position = changes["position"]
            if "tag_ids" in changes and changes["tag_ids"] is not None:
                todo.tags = self._owned_tags(changes["tag_ids"])
            self._sync_status_and_completed(todo, changes)

            after = TodoSnapshot.of(todo)
            if after != before:
                todo.updated_at = self.actor.now()
            self.db.flush()

            record = self.recorder.record_change(todo.id, before, after, self.actor.actor_id)

        if record is None:
            logger.debug("todo %s saved by %s with no changes", todo.id, self.actor.actor_id)
        else:
            logger.info("todo %s %s by %s", todo.id, record.action.value, self.actor.actor_id)
        return todo, record

    def delete(self, todo_id: int) -> ChangeRecord:
        """Delete a todo and its comments, recording its final state."""
        with transaction(self.db):
            todo = self.get(todo_id)
            final = TodoSnapshot.of(todo)

            self.db.query(Comment).filter(
                Comment.commentable_type == CommentableType.TODO,
                Comment.commentable_id == todo.id,
            ).delete(synchronize_session="fetch")
            self.db.delete(todo)
            self.db.flush()

            record = self.recorder.record_change(
                todo_id, final, None, self.actor.actor_id, HistoryAction.DELETED
            )

        logger.info("todo %s deleted by %s", todo_id, self.actor.actor_id)
        return record

    def history(self, todo_id: int, page: Page) -> Tuple[List[ChangeRecord], int]:
        """The change log of a todo the actor owns, newest first."""
        self.get(todo_id)
        return self.recorder.list_change_records(todo_id, page)

    def _sync_status_and_completed(self, todo: Todo, changes: Dict[str, Any]) -> None:
        completed = changes.get("completed")
        if completed is not None:
            todo.completed = completed
            if completed:
                todo.status = TodoStatus.COMPLETED
            elif todo.status == TodoStatus.COMPLETED:
                todo.status = TodoStatus.PENDING

        status = changes.get("status")
        if status is not None:
            todo.status = status
            todo.completed = status == TodoStatus.COMPLETED

    def _next_position(self) -> int:
        highest = (
            self.db.query(func.coalesce(func.max(Todo.position), 0))
            .filter(Todo.user_id == self.actor.actor_id)
            .scalar()
        )
        return highest + 1

    def _owned_category_id(self, category_id: Optional[int]) -> Optional[int]:
        if category_id is None:
            return None
        exists = (
            self.db.query(Category.id)
            .filter(Category.id == category_id, Category.user_id == self.actor.actor_id)
            .first()
        )
        if exists is None:
            raise NotFoundError("Category", category_id)
        return category_id

    def _owned_tags(self, tag_ids: Iterable[int]) -> List[Tag]:
        wanted = set(tag_ids)
        if not wanted:
            return []
        tags = (
            self.db.query(Tag)
            .filter(Tag.id.in_(wanted), Tag.user_id == self.actor.actor_id)
            .order_by(Tag.id)
            .all()
        )
        missing = wanted - {tag.id for tag in tags}
        if missing:
            raise NotFoundError("Tag", min(missing))
        return tags
