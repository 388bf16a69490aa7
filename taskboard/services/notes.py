"""
Note service - CRUD over notes, with revisions written on every body change.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from taskboard.models.audit import Revision
from taskboard.models.domain import Note
from taskboard.services.context import ActorContext
from taskboard.services.errors import NotFoundError
from taskboard.services.markdown import plain_body
from taskboard.services.pagination import Page
from taskboard.services.revisions import RevisionStore
from taskboard.services.transaction import transaction

logger = logging.getLogger("taskboard.notes")

UPDATABLE_FIELDS = ("title", "body", "pinned", "archived", "trashed")


class NoteService:
    """Notes owned by the acting user."""

    def __init__(self, db: Session, actor: ActorContext, revisions: RevisionStore):
        self.db = db
        self.actor = actor
        self.revisions = revisions

    def get(self, note_id: int) -> Note:
        """A note owned by the acting user, trashed or not."""
        note = (
            self.db.query(Note)
            .filter(Note.id == note_id, Note.user_id == self.actor.actor_id)
            .first()
        )
        if note is None:
            raise NotFoundError("Note", note_id)
        return note

    def list(
        self,
        page: Page,
        query: Optional[str] = None,
        archived: Optional[bool] = None,
        trashed: Optional[bool] = None,
        pinned: Optional[bool] = None,
    ) -> Tuple[List[Note], int]:
        """
        Search the acting user's notes. Pinned notes first, then most recently edited.

        query matches title or body_plain, case-insensitively. archived,
        trashed and pinned are tri-state: None leaves the flag unfiltered,
        True keeps only notes with it set, False only notes without it.
        trashed differs only in its default: None leaves trashed notes out.
        """
        notes = self.db.query(Note).filter(Note.user_id == self.actor.actor_id)
        if query:
            pattern = f"%{query}%"
            notes = notes.filter(or_(Note.title.ilike(pattern), Note.body_plain.ilike(pattern)))
        if archived is not None:
            notes = notes.filter(
                Note.archived_at.isnot(None) if archived else Note.archived_at.is_(None)
            )
        if trashed:
            notes = notes.filter(Note.trashed_at.isnot(None))
        else:
            notes = notes.filter(Note.trashed_at.is_(None))
        if pinned is not None:
            notes = notes.filter(Note.pinned == pinned)
        total = notes.count()
        items = (
            notes.order_by(Note.pinned.desc(), Note.last_edited_at.desc(), Note.id.desc())
            .offset(page.offset)
            .limit(page.per_page)
            .all()
        )
        return items, total

    def create(self, title: Optional[str] = None, body: Optional[str] = None, pinned: bool = False) -> Note:
        """
        Create a note. A non-empty body gets its first revision straight away.

        A note created empty has no revision until its body is first written,
        so every revision holds content that can be restored.
        """
        with transaction(self.db):
            now = self.actor.now()
            note = Note(
                user_id=self.actor.actor_id,
                title=title,
                body=body,
                body_plain=plain_body(body),
                pinned=pinned,
                last_edited_at=now,
                created_at=now,
                updated_at=now,
            )
            self.db.add(note)
            self.db.flush()
            self.revisions.snapshot_if_body_changed(note, None, self.actor.actor_id)

        logger.info("note %s created by %s", note.id, self.actor.actor_id)
        return note

    def update(self, note_id: int, changes: Dict[str, Any]) -> Tuple[Note, Optional[Revision]]:
        """
        Apply a partial update.

        last_edited_at moves only when the body changes; title edits and
        pin/archive/trash toggles leave it alone. Returns the note and the
        revision written, if any.
        """
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"cannot update fields: {', '.join(sorted(unknown))}")

        with transaction(self.db):
            note = self.get(note_id)
            previous_body = note.body
            now = self.actor.now()

            if "title" in changes:
                note.title = changes["title"]
            if "body" in changes:
                note.body = changes["body"]
                note.body_plain = plain_body(note.body)
            if changes.get("pinned") is not None:
                note.pinned = changes["pinned"]
            if changes.get("archived") is not None:
                note.archived_at = now if changes["archived"] else None
            if changes.get("trashed") is not None:
                note.trashed_at = now if changes["trashed"] else None

            body_changed = (note.body or "") != (previous_body or "")
            if body_changed:
                note.last_edited_at = now
            note.updated_at = now
            self.db.flush()

            revision = self.revisions.snapshot_if_body_changed(note, previous_body, self.actor.actor_id)

        if revision is not None:
            logger.info("note %s edited by %s, revision %s", note.id, self.actor.actor_id, revision.id)
        return note, revision

    def delete(self, note_id: int, force: bool = False) -> None:
        """Move a note to the trash, or with force remove it and all its revisions."""
        with transaction(self.db):
            note = self.get(note_id)
            if force:
                self.db.query(Revision).filter(Revision.note_id == note.id).delete(
                    synchronize_session="fetch"
                )
                self.db.expire(note, ["revisions"])
                self.db.delete(note)
            else:
                note.trashed_at = self.actor.now()

        logger.info(
            "note %s %s by %s", note_id, "deleted" if force else "trashed", self.actor.actor_id
        )

    def list_revisions(self, note_id: int, page: Page) -> Tuple[List[Revision], int]:
        self.get(note_id)
        return self.revisions.list_revisions(note_id, page)

    def restore(self, note_id: int, revision_id: int) -> Note:
        """Restore a note from one of its revisions, keeping the current content as a revision."""
        with transaction(self.db):
            self.get(note_id)
            note = self.revisions.restore(note_id, revision_id, self.actor.actor_id)

        logger.info(
            "note %s restored from revision %s by %s", note_id, revision_id, self.actor.actor_id
        )
        return note
