"""
Tests for the todo diff engine.

These are pure: no database, just snapshots in and field changes out.
"""
from datetime import date

import pytest

from taskboard.models.enums import HistoryAction, TodoPriority, TodoStatus, TrackedField
from taskboard.services.diff import (
    Changed,
    Single,
    TodoSnapshot,
    classify,
    diff,
    from_json,
    snapshot_fields,
    to_json,
)


@pytest.fixture
def base():
    return TodoSnapshot(
        title="Buy milk",
        description="Semi-skimmed",
        due_date=date(2026, 3, 10),
        category_id=4,
        tag_ids=frozenset({1, 2}),
    )


class TestDiff:
    """diff() returns only the fields that actually differ."""

    def test_identical_snapshots_have_no_changes(self, base):
        assert diff(base, base) == {}

    def test_tag_order_is_ignored(self):
        before = TodoSnapshot(title="t", tag_ids=[3, 1, 2])
        after = TodoSnapshot(title="t", tag_ids=[1, 2, 3])
        assert diff(before, after) == {}

    def test_tag_set_change_is_reported_sorted(self):
        before = TodoSnapshot(title="t", tag_ids=[3, 1])
        after = TodoSnapshot(title="t", tag_ids=[2, 1])
        assert diff(before, after) == {TrackedField.TAG_IDS: Changed([1, 3], [1, 2])}

    def test_single_status_change(self, base):
        after = TodoSnapshot(**{**base.__dict__, "status": TodoStatus.IN_PROGRESS})
        assert diff(base, after) == {TrackedField.STATUS: Changed("pending", "in_progress")}

    def test_multiple_fields_in_tracked_order(self, base):
        after = TodoSnapshot(**{**base.__dict__, "priority": TodoPriority.HIGH, "title": "Buy oat milk"})
        changes = diff(base, after)
        assert list(changes) == [TrackedField.TITLE, TrackedField.PRIORITY]
        assert changes[TrackedField.TITLE] == Changed("Buy milk", "Buy oat milk")
        assert changes[TrackedField.PRIORITY] == Changed("medium", "high")

    def test_empty_description_equals_none(self):
        assert diff(TodoSnapshot(title="t", description=""), TodoSnapshot(title="t")) == {}

    def test_due_date_values_are_iso_strings(self, base):
        after = TodoSnapshot(**{**base.__dict__, "due_date": None})
        assert diff(base, after) == {TrackedField.DUE_DATE: Changed("2026-03-10", None)}


class TestSnapshotFields:
    """snapshot_fields() captures the full state for create/delete entries."""

    def test_skips_empty_fields(self):
        fields = snapshot_fields(TodoSnapshot(title="Only a title"))
        assert fields == {
            TrackedField.TITLE: Single("Only a title"),
            TrackedField.COMPLETED: Single(False),
            TrackedField.PRIORITY: Single("medium"),
            TrackedField.STATUS: Single("pending"),
        }

    def test_includes_every_set_field(self, base):
        fields = snapshot_fields(base)
        assert fields[TrackedField.DESCRIPTION] == Single("Semi-skimmed")
        assert fields[TrackedField.CATEGORY_ID] == Single(4)
        assert fields[TrackedField.TAG_IDS] == Single([1, 2])


class TestClassify:

    def test_status_alone_is_status_changed(self):
        assert classify([TrackedField.STATUS]) == HistoryAction.STATUS_CHANGED

    def test_status_with_completed_is_status_changed(self):
        assert classify([TrackedField.COMPLETED, TrackedField.STATUS]) == HistoryAction.STATUS_CHANGED

    def test_priority_alone_is_priority_changed(self):
        assert classify([TrackedField.PRIORITY]) == HistoryAction.PRIORITY_CHANGED

    def test_anything_else_is_updated(self):
        assert classify([TrackedField.PRIORITY, TrackedField.TITLE]) == HistoryAction.UPDATED
        assert classify([TrackedField.STATUS, TrackedField.DUE_DATE]) == HistoryAction.UPDATED
        assert classify([TrackedField.TITLE]) == HistoryAction.UPDATED


class TestJson:
    """Stored JSON shape: plain values for single entries, [old, new] for changes."""

    def test_to_json_shapes(self):
        changes = {
            TrackedField.TITLE: Changed("a", "b"),
            TrackedField.STATUS: Changed("pending", "completed"),
        }
        assert to_json(changes) == {"title": ["a", "b"], "status": ["pending", "completed"]}
        assert to_json({TrackedField.TITLE: Single("a")}) == {"title": "a"}

    def test_from_json_reads_update_pairs(self):
        changes = from_json(HistoryAction.UPDATED, {"title": ["a", "b"]})
        assert changes == {TrackedField.TITLE: Changed("a", "b")}

    def test_from_json_reads_created_values(self):
        changes = from_json(HistoryAction.CREATED, {"tag_ids": [1, 2]})
        assert changes == {TrackedField.TAG_IDS: Single([1, 2])}

    def test_from_json_rejects_unknown_field(self):
        with pytest.raises(ValueError):
            from_json(HistoryAction.UPDATED, {"position": [1, 2]})

    def test_from_json_rejects_malformed_pair(self):
        with pytest.raises(ValueError):
            from_json(HistoryAction.UPDATED, {"title": "just one"})
