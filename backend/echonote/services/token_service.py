"""
EchoNote Backend — Bearer Token Service
=========================================

What:  Issues and verifies signed, time-limited JWTs carrying a user id.
How:   python-jose HS256 with the ``JWT_SECRET``. Claims:
           id   user UUID as string
           iat  issued-at (unix seconds)
           exp  iat + TOKEN_EXPIRE_MINUTES (one hour by default)
Who:   AuthService issues tokens on login; the auth gate verifies them.

Verification is a pure function of (token, secret, current time): no
database lookup. There is no refresh token; clients log in again after expiry.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import JWTError, jwt

from echonote.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Signs and verifies bearer tokens.

    Args:
        secret:          HMAC signing secret
        algorithm:       JWS algorithm (HS256)
        expire_minutes:  token lifetime
        clock:           source of "now" used when issuing (tests backdate it)
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
        clock: Optional[Clock] = None,
    ):
        self._secret = secret
        self._algorithm = algorithm
        self.expires_in = timedelta(minutes=expire_minutes)
        self._clock = clock or _utcnow

    def issue(self, user_id: uuid.UUID) -> str:
        now = self._clock()
        claims = {
            "id": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.expires_in).timestamp()),
        }
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> uuid.UUID:
        """
        Checks signature and expiry and returns the embedded user id.

        Raises:
            InvalidTokenError: bad signature, expired, malformed, or an ``id``
                claim that is missing or not a UUID.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require_exp": True},
            )
        except JWTError as e:
            logger.info("Rejected bearer token: %s", type(e).__name__)
            raise InvalidTokenError(context={"reason": type(e).__name__})

        raw_id = payload.get("id")
        try:
            return uuid.UUID(str(raw_id))
        except (TypeError, ValueError):
            raise InvalidTokenError(context={"reason": "bad_subject"})
