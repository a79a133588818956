"""
EchoNote Backend — AI Route Handlers
======================================

What:  POST /api/notes/{id}/ai, POST /api/upload-audio and POST /api/ai-process.
How:   Resolve inputs (owned note, uploaded audio, request body), then call
       AIService. Model output is returned verbatim.

Failures:
    no Gemini key configured → 503
    upstream call failed     → 500 {"error": "AI generation failed"}
"""

import logging
import uuid

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from echonote.context import AppContext, get_context
from echonote.database import get_db_session
from echonote.schemas.ai import (
    AIProcessRequest,
    AIProcessResponse,
    NoteAIRequest,
    NoteAIResponse,
    TranscriptionResponse,
)
from echonote.schemas.common import ErrorResponse
from echonote.security import get_current_user_id
from echonote.services.media_service import AUDIO_TYPES
from echonote.services.note_service import parse_note_id

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["AI"],
    responses={
        401: {"description": "No token", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
        500: {"description": "AI generation failed", "model": ErrorResponse},
        503: {"description": "AI service is not configured", "model": ErrorResponse},
    },
)


@router.post(
    "/notes/{note_id}/ai",
    response_model=NoteAIResponse,
    responses={
        400: {"description": "Question without a query", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
    },
    summary="Summarise a note or ask a question about it",
)
async def note_ai(
    note_id: str,
    payload: NoteAIRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> NoteAIResponse:
    """
    The summary is not stored; the client saves it with PUT /api/notes/{id}.
    """
    note = await context.notes.get_owned_note(db, user_id, parse_note_id(note_id))
    response = await context.ai.assist_note(note.content or "", payload.action, payload.query)
    return NoteAIResponse(response=response)


@router.post(
    "/upload-audio",
    response_model=TranscriptionResponse,
    responses={400: {"description": "Missing, empty, oversized or non-audio file", "model": ErrorResponse}},
    summary="Transcribe an audio recording",
)
async def upload_audio(
    audio: UploadFile = File(..., description="Audio file (max 10MB)"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    context: AppContext = Depends(get_context),
) -> TranscriptionResponse:
    content, mime_type = await context.media.read_upload(audio, "audio", AUDIO_TYPES)
    logger.info("Audio upload from user %s: %d bytes, %s", user_id, len(content), mime_type)
    transcription = await context.ai.transcribe(content, mime_type)
    return TranscriptionResponse(transcription=transcription)


@router.post(
    "/ai-process",
    response_model=AIProcessResponse,
    responses={400: {"description": "Blank text or missing instruction", "model": ErrorResponse}},
    summary="Summarise, refine or query free text",
)
async def ai_process(
    payload: AIProcessRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    context: AppContext = Depends(get_context),
) -> AIProcessResponse:
    result = await context.ai.process(payload.text, payload.instruction, payload.type)
    return AIProcessResponse(result=result)
