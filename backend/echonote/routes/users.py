"""
EchoNote Backend — User Profile Route Handlers
================================================

What:  GET /api/user, PUT /api/user and POST /api/user/avatar.
Who:   Called by the client's Profile page.

Avatar upload:
    multipart/form-data, field ``avatar``, image/* only, at most
    MAX_UPLOAD_SIZE bytes. Stored on the user as a data URI and returned
    as ``{"profilePicture": "data:image/png;base64,..."}``.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from echonote.context import AppContext, get_context
from echonote.database import get_db_session
from echonote.schemas.common import ErrorResponse
from echonote.schemas.user import AvatarResponse, UserResponse, UserUpdateRequest
from echonote.security import get_current_user_id
from echonote.services.media_service import IMAGE_TYPES

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["User"],
    responses={
        401: {"description": "No token", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
    },
)


@router.get(
    "/user",
    response_model=UserResponse,
    responses={404: {"description": "User not found", "model": ErrorResponse}},
    summary="Current user's profile",
)
async def get_profile(
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> UserResponse:
    return await context.users.get_profile(db, user_id)


@router.put(
    "/user",
    response_model=UserResponse,
    responses={
        400: {"description": "Blank name or invalid body", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Update name and/or phone number",
)
async def update_profile(
    payload: UserUpdateRequest,
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> UserResponse:
    return await context.users.update_profile(db, user_id, payload)


@router.post(
    "/user/avatar",
    response_model=AvatarResponse,
    responses={
        400: {"description": "Missing, empty, oversized or non-image file", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Upload a profile picture",
)
async def upload_avatar(
    avatar: UploadFile = File(..., description="Image file (max 10MB)"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> AvatarResponse:
    content, mime_type = await context.media.read_upload(avatar, "avatar", IMAGE_TYPES)
    logger.info("Avatar upload for user %s: %d bytes, %s", user_id, len(content), mime_type)
    return await context.users.set_avatar(db, user_id, context.media.to_data_uri(content, mime_type))
