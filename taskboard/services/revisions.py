"""
Revision store and restore operator for notes.

Every body change writes a full snapshot (title + body) and then trims
the note's history back down to the configured cap, oldest first. Like
the change recorder, nothing here commits: callers wrap each call in a
transaction so the insert and the trim are never seen apart.
"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from taskboard.models.audit import Revision
from taskboard.models.domain import Note, utcnow
from taskboard.services.context import Clock
from taskboard.services.errors import NotFoundError
from taskboard.services.markdown import plain_body
from taskboard.services.pagination import Page

DEFAULT_MAX_REVISIONS = 50


class RevisionStore:
    """Capped, age-ordered revision history for notes."""

    def __init__(self, db: Session, max_revisions: int = DEFAULT_MAX_REVISIONS, now: Clock = utcnow):
        if max_revisions < 1:
            raise ValueError("max_revisions must be at least 1")
        self.db = db
        self.max_revisions = max_revisions
        self.now = now

    def snapshot_if_body_changed(
        self,
        note: Note,
        previous_body: Optional[str],
        actor_id: str,
    ) -> Optional[Revision]:
        """
        Write a revision of the note's current title and body if the body moved.

        The revision holds the state as of this edit, not the state before it.
        A missing body compares equal to an empty one.
        """
        if (note.body or "") == (previous_body or ""):
            return None

        revision = self._write(note, actor_id)
        self.enforce_retention(note.id)
        return revision

    def enforce_retention(self, note_id: int) -> int:
        """
        Delete everything but the newest max_revisions revisions of a note.

        Age is created_at, with id breaking ties. Returns how many were evicted.
        """
        count = self.db.query(Revision).filter(Revision.note_id == note_id).count()
        if count <= self.max_revisions:
            return 0

        keep_ids = [
            revision_id
            for (revision_id,) in self.db.query(Revision.id)
            .filter(Revision.note_id == note_id)
            .order_by(Revision.created_at.desc(), Revision.id.desc())
            .limit(self.max_revisions)
        ]
        evicted = (
            self.db.query(Revision)
            .filter(Revision.note_id == note_id, Revision.id.notin_(keep_ids))
            .delete(synchronize_session="fetch")
        )
        self.db.flush()
        return evicted

    def restore(self, note_id: int, revision_id: int, actor_id: str) -> Note:
        """
        Put a note back to the content of one of its revisions.

        The current content is snapshotted first, so a restore can itself be
        undone. The revision restored from gets no protection from eviction.
        """
        note = self.db.query(Note).filter(Note.id == note_id).first()
        if note is None:
            raise NotFoundError("Note", note_id)

        target = self.get_revision(note_id, revision_id)
        title, body = target.title, target.body

        self._write(note, actor_id)

        note.title = title
        note.body = body
        note.body_plain = plain_body(body)
        now = self.now()
        note.last_edited_at = now
        note.updated_at = now
        self.db.flush()

        self.enforce_retention(note_id)
        return note

    def get_revision(self, note_id: int, revision_id: int) -> Revision:
        """A revision, only if it belongs to the given note."""
        revision = (
            self.db.query(Revision)
            .filter(Revision.id == revision_id, Revision.note_id == note_id)
            .first()
        )
        if revision is None:
            raise NotFoundError("Revision", revision_id)
        return revision

    def list_revisions(self, note_id: int, page: Page) -> Tuple[List[Revision], int]:
        """Revisions for one note, newest first, with the total count."""
        query = self.db.query(Revision).filter(Revision.note_id == note_id)
        total = query.count()
        revisions = (
            query.order_by(Revision.created_at.desc(), Revision.id.desc())
            .offset(page.offset)
            .limit(page.per_page)
            .all()
        )
        return revisions, total

    def _write(self, note: Note, actor_id: str) -> Revision:
        revision = Revision(
            note_id=note.id,
            actor_id=actor_id,
            title=note.title,
            body=note.body,
            created_at=self.now(),
        )
        self.db.add(revision)
        self.db.flush()
        return revision
