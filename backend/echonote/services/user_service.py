"""
EchoNote Backend — User Profile Service
=========================================

What:  Profile read, partial profile update and avatar storage.
Who:   routes/users.py and the dashboard greeting.

The user id always comes from the verified bearer token. A token whose user
has since disappeared yields NotFoundError (404).
"""

import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from echonote.exceptions import DatabaseError, NotFoundError, ValidationError
from echonote.models.user import User
from echonote.schemas.user import AvatarResponse, UserResponse, UserUpdateRequest

logger = logging.getLogger(__name__)


class UserService:

    async def get_user(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))
        return user

    async def get_profile(self, db: AsyncSession, user_id: uuid.UUID) -> UserResponse:
        user = await self.get_user(db, user_id)
        return UserResponse.model_validate(user)

    async def update_profile(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        payload: UserUpdateRequest,
    ) -> UserResponse:
        """
        Applies only the fields present in the request body.

        ``name`` may not be blank; ``phoneNumber`` may be cleared with "" or null.
        """
        user = await self.get_user(db, user_id)
        changes = payload.model_dump(exclude_unset=True)

        if "name" in changes:
            name = (changes["name"] or "").strip()
            if not name:
                raise ValidationError(message="Name must not be blank", field="name")
            user.name = name

        if "phone_number" in changes:
            phone = (changes["phone_number"] or "").strip()
            user.phone_number = phone or None

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})

        logger.info("Profile updated for user %s (%s)", user_id, ", ".join(sorted(changes)) or "no fields")
        return UserResponse.model_validate(user)

    async def set_avatar(self, db: AsyncSession, user_id: uuid.UUID, data_uri: str) -> AvatarResponse:
        user = await self.get_user(db, user_id)
        user.profile_picture = data_uri
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error storing avatar for %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": str(user_id)})
        return AvatarResponse(profile_picture=data_uri)
