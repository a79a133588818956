"""
EchoNote Backend — Account Route Handlers
===========================================

What:  POST /api/signup, POST /api/login and GET /api/dashboard.
How:   Bodies are validated by Pydantic, then handed to AuthService. The
       dashboard greeting re-resolves the user behind the token.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from echonote.context import AppContext, get_context
from echonote.database import get_db_session
from echonote.models.user import User
from echonote.schemas.common import ErrorResponse, MessageResponse
from echonote.schemas.user import LoginRequest, SignupRequest, SignupResponse, TokenResponse
from echonote.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Email already exists or invalid body", "model": ErrorResponse}},
    summary="Create an account",
)
async def signup(
    payload: SignupRequest,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> SignupResponse:
    return await context.auth.register(db, payload)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={400: {"description": "User not found or wrong password", "model": ErrorResponse}},
    summary="Exchange credentials for a bearer token",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
) -> TokenResponse:
    """Issues a bearer token valid for TOKEN_EXPIRE_MINUTES (one hour by default)."""
    return await context.auth.authenticate(db, payload)


@router.get(
    "/dashboard",
    response_model=MessageResponse,
    responses={
        401: {"description": "No token, invalid or expired token, or unknown user", "model": ErrorResponse},
    },
    summary="Greeting for the signed-in user",
)
async def dashboard(user: User = Depends(get_current_user)) -> MessageResponse:
    return MessageResponse(message=f"Welcome {user.name}!")
