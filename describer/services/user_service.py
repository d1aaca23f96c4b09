"""
User profile business logic.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from describer.core.exceptions import NotFound, ValidationFailure
from describer.models.representation import Representation
from describer.models.user import User
from describer.schemas.user import UserUpdateRequest

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_user(self, user_id: UUID) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFound("user")
        return user

    async def update_user(self, user: User, data: UserUpdateRequest) -> User:
        """Update profile fields. Emails are stored lowercased."""
        if data.email is not None:
            email = data.email.lower()
            if email != user.email:
                taken = await self.db.execute(
                    select(select(User.id).where(User.email == email, User.id != user.id).exists())
                )
                if taken.scalar():
                    raise ValidationFailure({"email": ["has already been taken"]})
                user.email = email

        if data.display_name is not None:
            user.display_name = data.display_name

        await self.db.flush()
        await self.db.refresh(user)
        return user

    async def delete_user(self, user: User) -> None:
        authored = await self.db.execute(
            select(select(Representation.id).where(Representation.author_id == user.id).exists())
        )
        if authored.scalar():
            raise ValidationFailure({"base": ["The user has authored representations"]})

        await self.db.delete(user)
        await self.db.flush()
        logger.info("Deleted user %s", user.id)
