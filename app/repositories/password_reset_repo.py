"""
Password Reset Repository

Data access layer for PasswordResetCode model.
All reset-code persistence lives here: issue, verify, consume.
"""

from typing import Optional, List, Union
from datetime import datetime, timezone, timedelta
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select, update, and_

from app.repositories.base import BaseRepository, as_uuid
from app.models.password_reset import PasswordResetCode
from app.core.config import settings
from app.core.security import hash_reset_code, reset_code_matches

UserId = Union[str, uuid.UUID]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PasswordResetRepository(BaseRepository[PasswordResetCode]):
    """Repository for PasswordResetCode model."""

    def __init__(self, db: AsyncSession):
        super().__init__(PasswordResetCode, db)

    # =================
    # Issue
    # =================
    async def issue(
        self,
        user_id: UserId,
        code: str,
        ttl_minutes: Optional[int] = None
    ) -> PasswordResetCode:
        """
        Store a new reset code for a user.

        Only the hash of `code` is written. Earlier codes stay valid
        unless PASSWORD_RESET_INVALIDATE_PREVIOUS is set.

        Args:
            user_id: Owning user
            code: The raw six-digit code
            ttl_minutes: Lifetime, defaults to PASSWORD_RESET_CODE_EXPIRE_MINUTES

        Raises:
            StorageError: If the insert fails
        """
        if ttl_minutes is None:
            ttl_minutes = settings.PASSWORD_RESET_CODE_EXPIRE_MINUTES

        if settings.PASSWORD_RESET_INVALIDATE_PREVIOUS:
            await self.invalidate_user_codes(user_id)

        now = _utcnow()
        return await self.create(
            user_id=as_uuid(user_id),
            code_hash=hash_reset_code(code),
            created_at=now,
            expires_at=now + timedelta(minutes=ttl_minutes),
        )

    # =================
    # Outstanding codes
    # =================
    async def get_outstanding(
        self,
        user_id: UserId,
        limit: Optional[int] = None
    ) -> List[PasswordResetCode]:
        """
        Unconsumed, unexpired codes for a user, newest first.

        Args:
            user_id: Owning user
            limit: Maximum rows to return, all if None
        """
        query = (
            select(PasswordResetCode)
            .where(
                and_(
                    PasswordResetCode.user_id == as_uuid(user_id),
                    PasswordResetCode.consumed_at.is_(None),
                    PasswordResetCode.expires_at > _utcnow()
                )
            )
            .order_by(PasswordResetCode.created_at.desc())
        )
        if limit is not None:
            query = query.limit(limit)

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            raise await self._fail("load", e) from e
        return list(result.scalars().all())

    # =================
    # Verify
    # =================
    async def verify(self, user_id: UserId, code: str) -> bool:
        """
        Check a code against the newest outstanding codes for a user.

        Read only; calling it any number of times changes nothing.
        """
        rows = await self.get_outstanding(
            user_id, limit=settings.PASSWORD_RESET_VERIFY_WINDOW
        )
        return any(reset_code_matches(code, row.code_hash) for row in rows)

    # =================
    # Consume
    # =================
    async def consume(self, user_id: UserId, code: str) -> bool:
        """
        Spend a code exactly once.

        The matching row is flipped with a conditional UPDATE guarded by
        `consumed_at IS NULL`, so when several callers race on the same
        code only one of them sees a changed row.

        Returns:
            True if this call consumed the code, False otherwise
        """
        rows = await self.get_outstanding(user_id)
        match = next(
            (row for row in rows if reset_code_matches(code, row.code_hash)),
            None
        )
        if match is None:
            return False

        return await self.mark_consumed(match.id)

    async def mark_consumed(self, reset_id: uuid.UUID) -> bool:
        """
        Compare-and-set consumed_at on a single row.

        Returns:
            True if the row went from unconsumed to consumed in this call
        """
        now = _utcnow()
        statement = (
            update(PasswordResetCode)
            .where(
                and_(
                    PasswordResetCode.id == reset_id,
                    PasswordResetCode.consumed_at.is_(None),
                    PasswordResetCode.expires_at > now
                )
            )
            .values(consumed_at=now)
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(statement)
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._fail("consume", e) from e
        return result.rowcount == 1

    # =================
    # Invalidate user codes
    # =================
    async def invalidate_user_codes(self, user_id: UserId) -> int:
        """
        Mark every outstanding code for a user as consumed.

        Returns:
            Number of rows invalidated
        """
        statement = (
            update(PasswordResetCode)
            .where(
                and_(
                    PasswordResetCode.user_id == as_uuid(user_id),
                    PasswordResetCode.consumed_at.is_(None)
                )
            )
            .values(consumed_at=_utcnow())
            .execution_options(synchronize_session=False)
        )

        try:
            result = await self.db.execute(statement)
            await self.db.commit()
        except SQLAlchemyError as e:
            raise await self._fail("invalidate", e) from e
        return result.rowcount
