"""Enums for the taskboard - these define the valid values for states, actions and fields."""
from enum import Enum


class TodoStatus(str, Enum):
    """Workflow status of a todo."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class TodoPriority(str, Enum):
    """Priority of a todo. Medium is the default."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class HistoryAction(str, Enum):
    """The closed set of actions a ChangeRecord can describe."""
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    STATUS_CHANGED = "status_changed"
    PRIORITY_CHANGED = "priority_changed"


class TrackedField(str, Enum):
    """
    Todo fields covered by the change log.

    Declaration order is the order entries appear in a ChangeRecord.
    """
    TITLE = "title"
    COMPLETED = "completed"
    PRIORITY = "priority"
    STATUS = "status"
    DESCRIPTION = "description"
    DUE_DATE = "due_date"
    CATEGORY_ID = "category_id"
    TAG_IDS = "tag_ids"


class CommentableType(str, Enum):
    """Kinds of records a comment can be attached to."""
    TODO = "Todo"
