"""
Diff engine for todos.

Pure functions over TodoSnapshot values: nothing here touches the
database. The change recorder is the only caller that persists what
these functions produce.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, Optional, Union

from taskboard.models.enums import HistoryAction, TodoPriority, TodoStatus, TrackedField


@dataclass(frozen=True)
class TodoSnapshot:
    """The tracked fields of a todo at one instant."""
    title: str
    completed: bool = False
    priority: TodoPriority = TodoPriority.MEDIUM
    status: TodoStatus = TodoStatus.PENDING
    description: Optional[str] = None
    due_date: Optional[date] = None
    category_id: Optional[int] = None
    tag_ids: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self):
        # An empty description is the same as none at all
        if self.description == "":
            object.__setattr__(self, "description", None)
        if not isinstance(self.tag_ids, frozenset):
            object.__setattr__(self, "tag_ids", frozenset(self.tag_ids))

    @classmethod
    def of(cls, todo) -> "TodoSnapshot":
        """Capture the tracked fields of an ORM todo."""
        return cls(
            title=todo.title,
            completed=bool(todo.completed),
            priority=todo.priority,
            status=todo.status,
            description=todo.description,
            due_date=todo.due_date,
            category_id=todo.category_id,
            tag_ids=frozenset(tag.id for tag in todo.tags),
        )

    def value(self, tracked: TrackedField) -> Any:
        return getattr(self, tracked.value)


@dataclass(frozen=True)
class Single:
    """One-sided entry: the value on creation, or the final value on deletion."""
    value: Any

    def to_json(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Changed:
    """Two-sided entry for an update."""
    old: Any
    new: Any

    def to_json(self) -> Any:
        return [self.old, self.new]


FieldChange = Union[Single, Changed]
FieldChanges = Dict[TrackedField, FieldChange]


def plain(value: Any) -> Any:
    """JSON-friendly form of a tracked value."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, frozenset):
        return sorted(value)
    return value


def _is_empty(value: Any) -> bool:
    return value is None or value == frozenset()


def diff(before: TodoSnapshot, after: TodoSnapshot) -> FieldChanges:
    """
    Fields whose values differ between two snapshots, in tracked-field order.

    tag_ids are frozensets, so ordering of tags never counts as a change.
    """
    changes: FieldChanges = {}
    for tracked in TrackedField:
        old, new = before.value(tracked), after.value(tracked)
        if old != new:
            changes[tracked] = Changed(plain(old), plain(new))
    return changes


def snapshot_fields(snapshot: TodoSnapshot) -> FieldChanges:
    """Every non-empty field of a snapshot as single-sided entries."""
    return {
        tracked: Single(plain(snapshot.value(tracked)))
        for tracked in TrackedField
        if not _is_empty(snapshot.value(tracked))
    }


def classify(changes: Iterable[TrackedField]) -> HistoryAction:
    """
    Pick the most specific action for a set of changed fields.

    Status and completed move together, so that pair still counts as a
    status change.
    """
    keys = set(changes)
    if keys == {TrackedField.STATUS} or keys == {TrackedField.STATUS, TrackedField.COMPLETED}:
        return HistoryAction.STATUS_CHANGED
    if keys == {TrackedField.PRIORITY}:
        return HistoryAction.PRIORITY_CHANGED
    return HistoryAction.UPDATED


def to_json(changes: FieldChanges) -> Dict[str, Any]:
    return {tracked.value: change.to_json() for tracked, change in changes.items()}


def from_json(action: HistoryAction, data: Dict[str, Any]) -> FieldChanges:
    """
    Rebuild typed entries from a stored record.

    Raises ValueError on an unknown field name or a malformed pair.
    """
    single_sided = action in (HistoryAction.CREATED, HistoryAction.DELETED)
    changes: FieldChanges = {}
    for name, raw in data.items():
        tracked = TrackedField(name)
        if single_sided:
            changes[tracked] = Single(raw)
            continue
        if not isinstance(raw, list) or len(raw) != 2:
            raise ValueError(f"expected [old, new] for {name!r}, got {raw!r}")
        changes[tracked] = Changed(raw[0], raw[1])
    return changes
