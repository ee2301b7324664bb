"""
Password Reset Service

Emailed six-digit code flow for forgotten passwords.

    request_flow(email)              -> code issued and emailed
    verify_flow(email, code)         -> bool, nothing changes
    reset_flow(email, code, pw)      -> code consumed, password replaced

Callers never learn whether an email belongs to an account: unknown
emails look exactly like a sent code on request, and exactly like a
wrong code on verify and reset.
"""

import logging
from typing import Optional

from fastapi import BackgroundTasks
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AuthProviderError, InvalidResetCode, StorageError
from app.core.security import generate_reset_code
from app.models.password_reset import PasswordResetCode
from app.repositories import PasswordResetRepository, UserRepository, UserId
from app.utils.email import send_password_reset_code

logger = logging.getLogger(__name__)


class PasswordResetService:
    """
    Service class for the reset-code lifecycle.
    """
    def __init__(self, db: AsyncSession):
        self.db = db
        self.user_repo = UserRepository(db)
        self.reset_repo = PasswordResetRepository(db)

    # ============================================================
    # Code lifecycle
    # ============================================================

    async def issue(
        self,
        user_id: UserId,
        code: str,
        ttl_minutes: Optional[int] = None
    ) -> PasswordResetCode:
        """
        Persist a hashed reset code for a user.

        Raises:
            StorageError: If the insert fails
        """
        return await self.reset_repo.issue(user_id, code, ttl_minutes)

    async def verify(self, user_id: UserId, code: str) -> bool:
        """True if `code` matches one of the user's newest live codes."""
        return await self.reset_repo.verify(user_id, code)

    async def consume(self, user_id: UserId, code: str) -> bool:
        """True only for the single call that spends the code."""
        return await self.reset_repo.consume(user_id, code)

    async def reset_password(self, user_id: UserId, new_password: str) -> None:
        """
        Set a new password in the account store.

        Length rules are enforced by the request schema, not here.

        Raises:
            AuthProviderError: If the account is missing, inactive, or
                the store rejects the update
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None or not user.is_active:
            raise AuthProviderError(f"Account {user_id} cannot accept a new password")

        try:
            updated = await self.user_repo.set_password(user_id, new_password)
        except StorageError as e:
            raise AuthProviderError(f"Password update rejected for {user_id}") from e

        if updated is None:
            raise AuthProviderError(f"Account {user_id} disappeared during password update")

    # ============================================================
    # Flows
    # ============================================================

    async def request_flow(
        self,
        email: str,
        background_tasks: Optional[BackgroundTasks] = None
    ) -> None:
        """
        Issue and email a reset code if the email belongs to an account.

        Returns normally whether or not the account exists. With
        `background_tasks` the email goes out after the response, otherwise
        it is sent from a worker thread before returning.

        Raises:
            StorageError: If the code cannot be stored
        """
        user = await self.user_repo.get_by_email(email)
        if user is None or not user.is_active:
            logger.info("Password reset requested for unknown or inactive account")
            return

        code = generate_reset_code()
        await self.issue(user.id, code)
        logger.info(f"Password reset code issued for user {user.id}")

        if background_tasks is not None:
            background_tasks.add_task(self._deliver, email, code)
        else:
            await run_in_threadpool(self._deliver, email, code)

    async def verify_flow(self, email: str, code: str) -> bool:
        """Check a code for an email. Unknown or inactive accounts just return False."""
        user = await self.user_repo.get_by_email(email)
        if user is None or not user.is_active:
            return False
        return await self.verify(user.id, code)

    async def reset_flow(self, email: str, code: str, new_password: str) -> None:
        """
        Spend a reset code and apply the new password.

        Raises:
            InvalidResetCode: Unknown email, wrong code, expired code or
                already used code, all reported the same way
            AuthProviderError: If the password update is rejected
        """
        user = await self.user_repo.get_by_email(email)
        if user is None or not user.is_active:
            raise InvalidResetCode()

        if not await self.verify(user.id, code):
            raise InvalidResetCode()

        # A concurrent reset may have spent the code since verify
        if not await self.consume(user.id, code):
            raise InvalidResetCode()

        await self.reset_password(user.id, new_password)
        logger.info(f"Password reset completed for user {user.id}")

    # ============================================================
    # Helper Methods
    # ============================================================

    @staticmethod
    def _deliver(email: str, code: str) -> None:
        """Send the code. Delivery problems are logged, never raised."""
        try:
            sent = send_password_reset_code(
                email=email,
                code=code,
                expires_in_minutes=settings.PASSWORD_RESET_CODE_EXPIRE_MINUTES
            )
        except Exception:
            logger.exception("Password reset email raised during delivery")
            return
        if not sent:
            logger.warning("Password reset email could not be delivered")
