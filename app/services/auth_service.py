"""
Account sign-in for FundingOS users.

Registration, password login and JWT refresh. Password *reset* lives in
password_reset_service; both share the users table through UserRepository.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthenticationError, ValidationError
from app.core.security import (
    create_access_token,
    create_token_pair,
    verify_password,
    verify_refresh_token,
    verify_token,
)
from app.models import User
from app.repositories import UserRepository
from app.schemas.auth import TokenRefreshResponse, TokenResponse, UserLogin, UserRegister, UserResponse

logger = logging.getLogger(__name__)


def user_response(user: User) -> UserResponse:
    """Public view of a user row."""
    return UserResponse(
        id=str(user.id),
        email=user.email,
        full_name=user.full_name,
        is_active=user.is_active,
        created_at=user.created_at,
        last_login=user.last_login,
    )


class AuthService:
    """
    Service class for account sign-in.
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)

    # ============================================================
    # Registration
    # ============================================================
    async def register(self, user_data: UserRegister) -> TokenResponse:
        """
        Create an account and sign it in.

        Raises:
            ValidationError: If the email is already registered
        """
        if await self.user_repo.get_by_email(user_data.email):
            raise ValidationError("A user with this email already exists")

        user = await self.user_repo.create_user(user_data)
        logger.info(f"Registered user {user.id}")

        return self._token_response(user)

    # ============================================================
    # Password Login
    # ============================================================
    async def login(self, login_data: UserLogin) -> TokenResponse:
        """
        Check email and password, then issue a token pair.

        Unknown email and wrong password give the same error.

        Raises:
            AuthenticationError: If the credentials are rejected
        """
        user = await self.user_repo.get_by_email(login_data.email)

        if user is None or not verify_password(login_data.password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            raise AuthenticationError("This account has been deactivated")

        user = await self.user_repo.touch_last_login(user.id)
        return self._token_response(user)

    # ============================================================
    # Token Refresh
    # ============================================================
    async def refresh_token(self, refresh_token: str) -> TokenRefreshResponse:
        """
        Trade a refresh token for a fresh access token.

        Raises:
            AuthenticationError: If the token or its user is no longer valid
        """
        user = await self._active_user(verify_refresh_token(refresh_token))
        if user is None:
            raise AuthenticationError("Invalid or expired refresh token")

        return TokenRefreshResponse(
            access_token=create_access_token(subject=str(user.id)),
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )

    # ============================================================
    # Bearer Token -> User
    # ============================================================
    async def get_current_user(self, token: str) -> User:
        """
        Resolve an access token to an active user.

        Raises:
            AuthenticationError: If the token is invalid or the user is gone
        """
        payload = verify_token(token)
        user = await self._active_user(payload.get("sub") if payload else None)
        if user is None:
            raise AuthenticationError("Invalid or expired token")
        return user

    # ============================================================
    # Helpers
    # ============================================================
    async def _active_user(self, user_id) -> Optional[User]:
        if not user_id:
            return None
        try:
            user = await self.user_repo.get_by_id(user_id)
        except ValueError:
            # subject is not a UUID
            logger.debug(f"Token subject {user_id!r} is not a user id")
            return None
        if user is None or not user.is_active:
            return None
        return user

    def _token_response(self, user: User) -> TokenResponse:
        return TokenResponse(**create_token_pair(str(user.id)), user=user_response(user))
