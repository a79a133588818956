"""
EchoNote Backend — Auth Gate
==============================

What:  FastAPI dependencies that guard every protected route.
How:   Reads ``Authorization: Bearer <token>`` and verifies it with the
       application's TokenService.

Outcomes:
    no bearer header         → AuthenticationError (401, "No token")
    bad / expired token      → InvalidTokenError   (403, "Invalid token")
    valid                    → user UUID, also stored on request.state.user_id

    ``get_current_user`` (dashboard) reports every failure as 401.
"""

import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from echonote.context import AppContext, get_context
from echonote.database import get_db_session
from echonote.exceptions import AuthenticationError, InvalidTokenError
from echonote.models.user import User

# auto_error=False: a missing header must become our 401 body, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    context: AppContext = Depends(get_context),
) -> uuid.UUID:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    user_id = context.tokens.verify(credentials.credentials)
    request.state.user_id = str(user_id)
    return user_id


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    context: AppContext = Depends(get_context),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    Resolves the full user record behind a valid token.

    Every failure here is a 401: a bad or expired token reads as
    "Invalid token" and a token for a user that no longer exists as
    "User not found".
    """
    try:
        user_id = await get_current_user_id(request, credentials, context)
    except InvalidTokenError as e:
        raise AuthenticationError(message=e.message, context=e.context)

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError(message="User not found")
    return user
