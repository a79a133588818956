"""
EchoNote Backend — Notes Route Handlers
=========================================

What:  CRUD on /api/notes plus the filtered, searched, sorted, paginated list.
How:   Query parameters are validated here, packed into a NoteQuery and
       handed to NoteService together with the caller's id from the token.
Who:   Called by the client's dashboard and note detail pages.

Every handler is owner-scoped: a note id that belongs to somebody else, or
that is not a well-formed id at all, is answered with 404.
"""

import logging
import uuid
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from echonote.context import AppContext, get_context
from echonote.database import get_db_session
from echonote.schemas.common import ErrorResponse, MessageResponse
from echonote.schemas.note import (
    NoteCreateRequest,
    NoteListResponse,
    NoteQuery,
    NoteResponse,
    NoteUpdateRequest,
)
from echonote.security import get_current_user_id
from echonote.services.note_service import parse_note_id

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(
    prefix="/api",
    tags=["Notes"],
    responses={
        401: {"description": "No token", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
    },
)

_NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}


@router.post(
    "/notes",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Missing or blank title", "model": ErrorResponse}},
    summary="Create a note",
)
async def create_note(
    payload: NoteCreateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> NoteResponse:
    return await context.notes.create_note(db, user_id, payload)


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={
        400: {"description": "Invalid paging parameters", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List the caller's notes",
    description=(
        "Returns one page of the caller's notes. ``filter`` keeps notes carrying "
        "that tag (``all`` disables it), ``search`` matches titles "
        "case-insensitively, ``sort`` is ``latest`` or ``oldest``."
    ),
)
async def list_notes(
    filter: Optional[str] = Query(default=None, max_length=100, description="Tag to match; 'all' for every note"),
    search: Optional[str] = Query(default=None, max_length=500, description="Case-insensitive title substring"),
    sort: Literal["latest", "oldest"] = Query(default="latest", description="Date order"),
    page: int = Query(default=1, ge=1, description="1-based page number"),
    limit: Optional[int] = Query(default=None, ge=1, description="Items per page (default 6, max 100)"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> NoteListResponse:
    """
    Example client usage:
        GET /api/notes?page=2&limit=6&filter=Work&search=meeting&sort=oldest
    """
    query = NoteQuery(filter=filter, search=search, sort=sort, page=page, limit=limit)
    return await context.notes.list_notes(db, user_id, query)


@router.get(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses=_NOT_FOUND,
    summary="Get a single note",
)
async def get_note(
    note_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> NoteResponse:
    return await context.notes.get_note(db, user_id, parse_note_id(note_id))


@router.put(
    "/notes/{note_id}",
    response_model=NoteResponse,
    responses={**_NOT_FOUND, 400: {"description": "Blank title or invalid body", "model": ErrorResponse}},
    summary="Update title, content, tags or summary",
)
async def update_note(
    note_id: str,
    payload: NoteUpdateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> NoteResponse:
    return await context.notes.update_note(db, user_id, parse_note_id(note_id), payload)


@router.delete(
    "/notes/{note_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> MessageResponse:
    return await context.notes.delete_note(db, user_id, parse_note_id(note_id))
