"""
EchoNote Backend — Note SQLAlchemy Models
===========================================

What:  ORM models for the ``notes`` table and its ordered ``note_tags`` child.
Who:   Used by NoteService for CRUD and the list query pipeline.

Table Design Rationale:
    - UUID primary key: ids are not guessable
    - user_id: every read/update/delete filters on it (ownership invariant)
    - date: UTC, defaulted at insert; sort key of the list endpoint
    - tags: one row per (note, position). Filtering "has tag X" becomes an
      EXISTS subquery that works the same on PostgreSQL and SQLite.

    Composite index (user_id, date): the list endpoint always filters by owner
    and orders by date.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid, func
from sqlalchemy.ext.associationproxy import AssociationProxy, association_proxy
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from echonote.database import Base

DEFAULT_TAG = "Live Recording"


class NoteTag(Base):
    """One tag of a note, kept at its position in the note's tag list."""

    __tablename__ = "note_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    note_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    def __init__(self, name: str, **kwargs):
        super().__init__(name=name, **kwargs)

    def __repr__(self) -> str:
        return f"<NoteTag(note_id={self.note_id}, position={self.position}, name='{self.name}')>"


class Note(Base):
    """
    A note owned by exactly one user.

    Lifecycle:
        1. Created from a live recording, an uploaded transcript or free text
        2. Updated by the owner (title, content, tags, summary)
        3. Deleted by the owner
    """

    __tablename__ = "notes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(500), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    # selectin: tags load together with the note, no lazy IO under asyncio
    tag_links: Mapped[List[NoteTag]] = relationship(
        order_by=NoteTag.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    tags: AssociationProxy[List[str]] = association_proxy("tag_links", "name")

    owner: Mapped["User"] = relationship(back_populates="notes")  # noqa: F821

    __table_args__ = (
        Index("idx_notes_user_date", "user_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, title='{self.title}')>"
