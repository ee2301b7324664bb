from app.models.base import Base
from app.models.user import User
from app.models.password_reset import PasswordResetCode

__all__ = [
    "Base",
    "User",
    "PasswordResetCode",
]
