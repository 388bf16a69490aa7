"""
Tests for note listing: text search and the archived/trashed/pinned filters.
"""
import pytest

from taskboard.services.notes import NoteService
from taskboard.services.pagination import Page


@pytest.fixture
def notebook(note_service, clock):
    """Four notes, one per state, each edited a minute after the last."""
    notes = {}
    for name, body in (
        ("live", "Buy **oat** milk"),
        ("pinned", "Call the plumber"),
        ("archived", "Old recipe for OAT cookies"),
        ("trashed", "Draft letter"),
    ):
        clock.advance(minutes=1)
        notes[name] = note_service.create(title=name.capitalize(), body=body, pinned=name == "pinned")
    note_service.update(notes["archived"].id, {"archived": True})
    note_service.update(notes["trashed"].id, {"trashed": True})
    return notes


def titles(note_service, **filters):
    notes, total = note_service.list(Page(), **filters)
    assert total == len(notes)
    return [note.title for note in notes]


class TestNoteFilters:

    def test_default_hides_trash_but_keeps_archive(self, note_service, notebook):
        assert titles(note_service) == ["Pinned", "Archived", "Live"]

    def test_trashed_true_shows_only_trash(self, note_service, notebook):
        assert titles(note_service, trashed=True) == ["Trashed"]

    def test_trashed_false_matches_default(self, note_service, notebook):
        assert titles(note_service, trashed=False) == titles(note_service)

    def test_archived_is_tri_state(self, note_service, notebook):
        assert titles(note_service, archived=True) == ["Archived"]
        assert titles(note_service, archived=False) == ["Pinned", "Live"]

    def test_pinned_filter(self, note_service, notebook):
        assert titles(note_service, pinned=True) == ["Pinned"]
        assert titles(note_service, pinned=False) == ["Archived", "Live"]

    def test_other_users_notes_never_listed(self, db_session, other_actor, revision_store, notebook):
        assert NoteService(db_session, other_actor, revision_store).list(Page()) == ([], 0)


class TestNoteSearch:

    def test_matches_plain_body_case_insensitively(self, note_service, notebook):
        """Markdown is stripped before matching, so "**oat** milk" is found as "oat milk"."""
        assert titles(note_service, query="OAT MILK") == ["Live"]

    def test_matches_title(self, note_service, notebook):
        assert titles(note_service, query="pinn") == ["Pinned"]

    def test_search_combines_with_filters(self, note_service, notebook):
        assert titles(note_service, query="oat") == ["Archived", "Live"]
        assert titles(note_service, query="oat", archived=False) == ["Live"]

    def test_search_follows_body_edits(self, note_service, notebook):
        note_service.update(notebook["live"].id, {"body": "Buy rice"})

        assert titles(note_service, query="milk") == []
        assert titles(note_service, query="rice") == ["Live"]
