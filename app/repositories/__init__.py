"""
Data access layer. One repository per table, all sharing an AsyncSession.
"""

from app.repositories.base import BaseRepository, as_uuid
from app.repositories.user_repo import UserRepository
from app.repositories.password_reset_repo import PasswordResetRepository, UserId

__all__ = [
    "BaseRepository",
    "as_uuid",
    "UserRepository",
    "PasswordResetRepository",
    "UserId",
]
