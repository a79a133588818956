"""
EchoNote Backend — Authentication Service
===========================================

What:  Signup (register) and login (authenticate) over the users table.
How:   bcrypt via passlib's CryptContext at a fixed cost factor (10 by
       default). Hashing and verification run in Starlette's threadpool so a
       slow hash only delays its own request.
Who:   Called by routes/auth.py.

Responses never include the password hash.
"""

import logging

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from echonote.exceptions import ConflictError, DatabaseError, InvalidCredentialsError
from echonote.models.user import User
from echonote.schemas.user import (
    LoginRequest,
    SignupRequest,
    SignupResponse,
    TokenResponse,
    UserSummary,
)
from echonote.services.token_service import TokenService

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


class PasswordHasher:
    """Salted bcrypt hashing with a fixed work factor."""

    def __init__(self, rounds: int = 10):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    async def hash(self, password: str) -> str:
        return await run_in_threadpool(self._context.hash, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await run_in_threadpool(self._context.verify, password, password_hash)


class AuthService:
    """
    Credential operations.

    Error mapping:
        duplicate email      → ConflictError (400)
        unknown email        → InvalidCredentialsError("User not found") (400)
        password mismatch    → InvalidCredentialsError("Wrong password") (400)
        store failure        → DatabaseError (500)
    """

    def __init__(self, passwords: PasswordHasher, tokens: TokenService):
        self.passwords = passwords
        self.tokens = tokens

    async def _find_by_email(self, db: AsyncSession, email: str):
        result = await db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def register(self, db: AsyncSession, payload: SignupRequest) -> SignupResponse:
        email = normalize_email(payload.email)

        try:
            if await self._find_by_email(db, email) is not None:
                raise ConflictError()

            user = User(
                name=payload.name,
                email=email,
                password_hash=await self.passwords.hash(payload.password),
            )
            db.add(user)
            await db.flush()
        except IntegrityError:
            # Concurrent signup with the same email won the unique index
            raise ConflictError()
        except SQLAlchemyError as e:
            logger.error("Database error during signup: %s", str(e))
            raise DatabaseError(context={"operation": "signup", "error_type": type(e).__name__})

        logger.info("User registered: %s", user.id)
        return SignupResponse(user=UserSummary(id=user.id, name=user.name, email=user.email))

    async def authenticate(self, db: AsyncSession, payload: LoginRequest) -> TokenResponse:
        try:
            user = await self._find_by_email(db, normalize_email(payload.email))
        except SQLAlchemyError as e:
            logger.error("Database error during login: %s", str(e))
            raise DatabaseError(context={"operation": "login", "error_type": type(e).__name__})

        if user is None:
            raise InvalidCredentialsError("User not found")

        if not await self.passwords.verify(payload.password, user.password_hash):
            logger.info("Failed login for user %s", user.id)
            raise InvalidCredentialsError("Wrong password")

        return TokenResponse(token=self.tokens.issue(user.id))
