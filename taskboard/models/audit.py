"""
History models - the change log for todos and the revision history for notes.

Both tables are append-mostly: rows are only ever inserted by the
services, and deleted only by revision retention or by cascade.
"""
from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from taskboard.database import Base
from taskboard.models.domain import utcnow
from taskboard.models.enums import HistoryAction


class ChangeRecord(Base):
    """
    Immutable audit entry describing one transition of a todo.

    Invariants:
    - Once written, never edited or deleted
    - Never written for an update that changed nothing
    - entity_id is a plain reference so the trail outlives the todo
    """
    __tablename__ = "change_records"
    __table_args__ = (Index("ix_change_records_entity_created", "entity_id", "created_at"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    entity_id = Column(Integer, nullable=False, index=True)
    actor_id = Column(String, nullable=False, index=True)
    action = Column(SQLEnum(HistoryAction), nullable=False, index=True)
    field_changes = Column(JSON, nullable=False)  # {field: value} or {field: [old, new]}
    created_at = Column(DateTime, nullable=False, default=utcnow)


class Revision(Base):
    """
    Full snapshot of a note's title and body at a point in time.

    Invariants:
    - Immutable once created
    - At most the configured cap per note; oldest evicted first
    """
    __tablename__ = "revisions"
    __table_args__ = (Index("ix_revisions_note_created", "note_id", "created_at"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    note_id = Column(Integer, ForeignKey("notes.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_id = Column(String, nullable=False, index=True)
    title = Column(String(150), nullable=True)
    body = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    note = relationship("Note", back_populates="revisions")
