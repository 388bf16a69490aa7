"""Domain models - the mutable records owned by users."""
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from taskboard.database import Base
from taskboard.models.enums import CommentableType, TodoPriority, TodoStatus


def utcnow() -> datetime:
    """Naive UTC timestamp, the representation every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


todo_tags = Table(
    "todo_tags",
    Base.metadata,
    Column("todo_id", Integer, ForeignKey("todos.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class Category(Base):
    """A user's grouping for todos. Names are unique per user."""
    __tablename__ = "categories"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_categories_user_name"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String(50), nullable=False)
    color = Column(String(7), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class Tag(Base):
    """A free-form label. Names are unique per user."""
    __tablename__ = "tags"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_tags_user_name"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String(30), nullable=False)
    color = Column(String(7), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)


class Todo(Base):
    """
    A task owned by a single user.

    Invariants enforced in the service layer:
    - status and completed never disagree (completed <=> status == completed)
    - every state transition is mirrored by a ChangeRecord in the same transaction
    """
    __tablename__ = "todos"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    completed = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=True, index=True)
    priority = Column(SQLEnum(TodoPriority), nullable=False, default=TodoPriority.MEDIUM)
    status = Column(SQLEnum(TodoStatus), nullable=False, default=TodoStatus.PENDING)
    due_date = Column(Date, nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    category = relationship("Category")
    tags = relationship("Tag", secondary=todo_tags, order_by="Tag.id")


class Note(Base):
    """
    A markdown note.

    Invariants:
    - last_edited_at moves only when the body changes (or a revision is restored)
    - body_plain is derived from body and never edited directly
    """
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
    title = Column(String(150), nullable=True)
    body = Column(Text, nullable=True)
    body_plain = Column(Text, nullable=True)
    pinned = Column(Boolean, nullable=False, default=False)
    archived_at = Column(DateTime, nullable=True, index=True)
    trashed_at = Column(DateTime, nullable=True, index=True)
    last_edited_at = Column(DateTime, nullable=False, default=utcnow)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    revisions = relationship(
        "Revision",
        back_populates="note",
        cascade="all, delete-orphan",
        order_by="Revision.created_at, Revision.id",
    )

    @property
    def is_archived(self) -> bool:
        return self.archived_at is not None

    @property
    def is_trashed(self) -> bool:
        return self.trashed_at is not None


@dataclass(frozen=True)
class CommentTarget:
    """The record a comment hangs off. Only todos can carry comments today."""
    type: CommentableType
    id: int

    @classmethod
    def todo(cls, todo_id: int) -> "CommentTarget":
        return cls(CommentableType.TODO, todo_id)


class Comment(Base):
    """
    A comment attached polymorphically to another record.

    Invariants:
    - content may change, and the comment may be deleted, only inside the edit window
    - deletion is soft: deleted_at is set, the row stays
    """
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    content = Column(Text, nullable=False)
    user_id = Column(String, nullable=False, index=True)
    commentable_type = Column(SQLEnum(CommentableType), nullable=False, index=True)
    commentable_id = Column(Integer, nullable=False, index=True)
    deleted_at = Column(DateTime, nullable=True, index=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def target(self) -> CommentTarget:
        return CommentTarget(self.commentable_type, self.commentable_id)

    @target.setter
    def target(self, value: CommentTarget) -> None:
        self.commentable_type = value.type
        self.commentable_id = value.id
