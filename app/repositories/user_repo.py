"""
User Repository

Data access layer for User model.
All user-related database operations.
"""

from typing import Optional
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, func

from app.repositories.base import BaseRepository
from app.models import User
from app.schemas.auth import UserRegister
from app.core.security import get_password_hash

class UserRepository(BaseRepository[User]):
    """Repository for User model."""

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    # =================
    # Get by email
    # =================
    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get a user by email address, ignoring case.

        Single-row lookup through ix_users_email_lower.
        """
        try:
            result = await self.db.execute(
                select(User).where(func.lower(User.email) == email.strip().lower())
            )
        except SQLAlchemyError as e:
            raise await self._fail("look up", e) from e
        return result.scalar_one_or_none()

    # =================
    # Create user
    # =================
    async def create_user(self, user_data: UserRegister) -> User:
        """Create a new user."""
        return await self.create(
            email=user_data.email.strip().lower(),
            password_hash=get_password_hash(user_data.password),
            full_name=user_data.full_name,
            is_active=True,
        )

    # =================
    # Update password
    # =================
    async def set_password(self, user_id, new_password: str) -> Optional[User]:
        """
        Replace a user's password hash.

        Returns None when the user does not exist.
        """
        return await self.update(user_id, password_hash=get_password_hash(new_password))

    # =================
    # Record login
    # =================
    async def touch_last_login(self, user_id) -> Optional[User]:
        """Stamp last_login with the current time."""
        return await self.update(user_id, last_login=datetime.now(timezone.utc))
