"""
EchoNote Backend — Note Service
=================================

What:  Note CRUD and the list query pipeline (filter + search + sort + page).
How:   Every statement is built from the owner's id first; a note id on its
       own never reaches the database.
Who:   Called by routes/notes.py and routes/ai.py.

Ownership:
    get/update/delete filter on (id AND user_id). A note that exists but
    belongs to someone else is indistinguishable from a missing one: both
    raise NotFoundError (404).

List pipeline (GET /api/notes):
    WHERE user_id = :owner
      [AND EXISTS (note_tags WHERE name = :tag)]      filter, unless "all"
      [AND lower(title) LIKE lower('%' || :q || '%')]  search
    COUNT(*) over the same WHERE
    ORDER BY date DESC|ASC, id DESC|ASC
    OFFSET (page - 1) * limit LIMIT limit

    ``id`` is the tie-breaker so notes sharing a timestamp keep a stable
    position across pages.
"""

import logging
import math
import uuid
from typing import List, Optional

from sqlalchemy import asc, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from echonote.exceptions import DatabaseError, EchoNoteError, NotFoundError, ValidationError
from echonote.models.note import DEFAULT_TAG, Note, NoteTag
from echonote.schemas.common import MessageResponse
from echonote.schemas.note import (
    NoteCreateRequest,
    NoteListResponse,
    NoteQuery,
    NoteResponse,
    NoteUpdateRequest,
)

logger = logging.getLogger(__name__)


def parse_note_id(raw: str) -> uuid.UUID:
    """Malformed ids are reported exactly like unknown ones."""
    try:
        return uuid.UUID(raw)
    except (TypeError, ValueError):
        raise NotFoundError(resource="note", resource_id=raw)


def escape_like(term: str, escape: str = "\\") -> str:
    """Makes ``%`` and ``_`` in user input match literally in a LIKE pattern."""
    return (
        term.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )


def to_response(note: Note) -> NoteResponse:
    return NoteResponse(
        id=note.id,
        user_id=note.user_id,
        title=note.title,
        content=note.content or "",
        summary=note.summary,
        tags=list(note.tags),
        date=note.date,
    )


class NoteService:
    """
    Business logic for notes.

    Args:
        default_page_size: page size when the client sends no ``limit``
        max_page_size:     largest ``limit`` accepted; larger values are a 400
    """

    def __init__(self, default_page_size: int = 6, max_page_size: int = 100):
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    # ── Single note ───────────────────────────────────────────────────────

    async def _get_owned(self, db: AsyncSession, user_id: uuid.UUID, note_id: uuid.UUID) -> Note:
        result = await db.execute(
            select(Note).where(Note.id == note_id, Note.user_id == user_id)
        )
        note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(resource="note", resource_id=str(note_id))
        return note

    async def get_owned_note(self, db: AsyncSession, user_id: uuid.UUID, note_id: uuid.UUID) -> Note:
        """Returns the ORM object; used by the AI routes which need the raw text."""
        try:
            return await self._get_owned(db, user_id, note_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching note %s: %s", note_id, str(e))
            raise DatabaseError(context={"note_id": str(note_id)})

    async def get_note(self, db: AsyncSession, user_id: uuid.UUID, note_id: uuid.UUID) -> NoteResponse:
        return to_response(await self.get_owned_note(db, user_id, note_id))

    async def create_note(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        payload: NoteCreateRequest,
    ) -> NoteResponse:
        """
        Inserts a note owned by ``user_id``.

        Tags default to ["Live Recording"] when the body has none.
        """
        tags = payload.tags if payload.tags is not None else [DEFAULT_TAG]
        note = Note(
            user_id=user_id,
            title=payload.title.strip(),
            content=payload.content or "",
            summary=payload.summary,
            # explicit assignment; an untouched collection would lazy-load after flush
            tag_links=[NoteTag(name) for name in tags],
        )

        try:
            db.add(note)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating note: %s", str(e))
            raise DatabaseError(context={"operation": "create_note", "error_type": type(e).__name__})

        logger.info("Note %s created for user %s with tags %s", note.id, user_id, tags)
        return to_response(note)

    async def update_note(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        note_id: uuid.UUID,
        payload: NoteUpdateRequest,
    ) -> NoteResponse:
        """
        Partial update over title/content/tags/summary.

        A null title or null tags in the body leaves the stored value alone;
        a null summary clears it.
        """
        changes = payload.model_dump(exclude_unset=True)

        try:
            note = await self._get_owned(db, user_id, note_id)

            if changes.get("title") is not None:
                note.title = changes["title"].strip()
            if "content" in changes:
                note.content = changes["content"] or ""
            if "summary" in changes:
                note.summary = changes["summary"]
            if changes.get("tags") is not None:
                note.tags = changes["tags"]

            await db.flush()
        except EchoNoteError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error updating note %s: %s", note_id, str(e))
            raise DatabaseError(context={"note_id": str(note_id)})

        return to_response(note)

    async def delete_note(self, db: AsyncSession, user_id: uuid.UUID, note_id: uuid.UUID) -> MessageResponse:
        try:
            note = await self._get_owned(db, user_id, note_id)
            await db.delete(note)
            await db.flush()
        except EchoNoteError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error deleting note %s: %s", note_id, str(e))
            raise DatabaseError(context={"note_id": str(note_id)})

        logger.info("Note %s deleted by user %s", note_id, user_id)
        return MessageResponse(message="Note deleted")

    # ── List pipeline ─────────────────────────────────────────────────────

    def _resolve_page_size(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.default_page_size
        if limit < 1 or limit > self.max_page_size:
            raise ValidationError(
                message=f"limit must be between 1 and {self.max_page_size}",
                field="limit",
            )
        return limit

    async def list_notes(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        query: NoteQuery,
    ) -> NoteListResponse:
        """
        Returns one page of the owner's notes plus totals.

        A page past the end is an empty list, not an error. totalPages is
        ceil(totalNotes / limit), so it is 0 when nothing matches.
        """
        limit = self._resolve_page_size(query.limit)

        conditions = [Note.user_id == user_id]
        if query.tag is not None:
            conditions.append(Note.tag_links.any(NoteTag.name == query.tag))
        if query.title_search is not None:
            pattern = f"%{escape_like(query.title_search)}%"
            conditions.append(Note.title.ilike(pattern, escape="\\"))

        direction = asc if query.sort == "oldest" else desc

        try:
            count_result = await db.execute(
                select(func.count()).select_from(Note).where(*conditions)
            )
            total = count_result.scalar_one()

            result = await db.execute(
                select(Note)
                .where(*conditions)
                .order_by(direction(Note.date), direction(Note.id))
                .offset((query.page - 1) * limit)
                .limit(limit)
            )
            notes: List[Note] = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return NoteListResponse(
            notes=[to_response(note) for note in notes],
            current_page=query.page,
            total_pages=math.ceil(total / limit),
            total_notes=total,
        )
