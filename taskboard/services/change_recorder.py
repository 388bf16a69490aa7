"""
Change recorder - writes the append-only change log for todos.

The recorder adds and flushes; it never commits. The caller owns the
transaction so a todo's new state and its ChangeRecord land together.
"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from taskboard.models.audit import ChangeRecord
from taskboard.models.domain import utcnow
from taskboard.models.enums import HistoryAction, TrackedField
from taskboard.services.context import Clock
from taskboard.services.diff import (
    Changed,
    TodoSnapshot,
    classify,
    diff,
    from_json,
    snapshot_fields,
    to_json,
)
from taskboard.services.pagination import Page


class ChangeRecorder:
    """Turns todo transitions into ChangeRecords."""

    def __init__(self, db: Session, now: Clock = utcnow):
        self.db = db
        self.now = now

    def record_change(
        self,
        todo_id: int,
        before: Optional[TodoSnapshot],
        after: Optional[TodoSnapshot],
        actor_id: str,
        action: Optional[HistoryAction] = None,
    ) -> Optional[ChangeRecord]:
        """
        Persist the difference between two states of a todo.

        - CREATED: before is None; every non-empty field of after is recorded
        - DELETED: after is None; every non-empty field of before is recorded
        - anything else: only differing fields are recorded, and the action is
          classified from them when not given

        Returns None, writing nothing, when an update changed no field.
        """
        if action == HistoryAction.CREATED:
            if after is None:
                raise ValueError("a created record needs the new state")
            changes = snapshot_fields(after)
        elif action == HistoryAction.DELETED:
            if before is None:
                raise ValueError("a deleted record needs the final state")
            changes = snapshot_fields(before)
        else:
            if before is None or after is None:
                raise ValueError("an update record needs both states")
            changes = diff(before, after)
            if not changes:
                return None
            if action is None:
                action = classify(changes)

        record = ChangeRecord(
            entity_id=todo_id,
            actor_id=actor_id,
            action=action,
            field_changes=to_json(changes),
            created_at=self.now(),
        )
        self.db.add(record)
        self.db.flush()
        return record

    def list_change_records(self, todo_id: int, page: Page) -> Tuple[List[ChangeRecord], int]:
        """Records for one todo, newest first, with the total count."""
        query = self.db.query(ChangeRecord).filter(ChangeRecord.entity_id == todo_id)
        total = query.count()
        records = (
            query.order_by(ChangeRecord.created_at.desc(), ChangeRecord.id.desc())
            .offset(page.offset)
            .limit(page.per_page)
            .all()
        )
        return records, total


def _quoted(value) -> str:
    return "none" if value is None else f'"{value}"'


def describe(record: ChangeRecord) -> str:
    """One-line English summary of a record, for display."""
    if record.action == HistoryAction.CREATED:
        return "Todo created"
    if record.action == HistoryAction.DELETED:
        return "Todo deleted"

    changes = from_json(record.action, record.field_changes)
    if record.action == HistoryAction.STATUS_CHANGED and TrackedField.STATUS in changes:
        return _describe_field(TrackedField.STATUS, changes[TrackedField.STATUS])
    messages = [_describe_field(tracked, change) for tracked, change in changes.items()]
    if len(messages) == 1:
        return messages[0]
    if not messages:
        return "Todo updated"
    return f"{len(messages)} fields updated"


def _describe_field(tracked: TrackedField, change: Changed) -> str:
    old, new = change.old, change.new
    if tracked == TrackedField.COMPLETED:
        return "Marked as completed" if new else "Marked as not completed"
    if tracked == TrackedField.DESCRIPTION:
        if old is None:
            return "Description added"
        if new is None:
            return "Description removed"
        return "Description updated"
    if tracked == TrackedField.DUE_DATE:
        if old is None:
            return f"Due date set to {_quoted(new)}"
        if new is None:
            return "Due date removed"
    if tracked == TrackedField.CATEGORY_ID:
        if old is None:
            return "Category set"
        if new is None:
            return "Category removed"
        return "Category changed"
    if tracked == TrackedField.TAG_IDS:
        return "Tags changed"
    label = tracked.value.replace("_", " ").capitalize()
    return f"{label} changed from {_quoted(old)} to {_quoted(new)}"
