"""
Base Repository

Abstract base class for all repositories.
Provides common database operations.

Any SQLAlchemy failure surfaces as StorageError so services never
deal with driver exceptions directly.
"""

import uuid
from typing import Generic, TypeVar, Type, Optional, Any, Union
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select

from app.core.exceptions import StorageError

ModelType = TypeVar("ModelType")


def as_uuid(value: Union[str, uuid.UUID]) -> uuid.UUID:
    """Coerce a string id (e.g. a JWT subject) into a UUID."""
    return value if isinstance(value, uuid.UUID) else uuid.UUID(str(value))


class BaseRepository(Generic[ModelType]):
    """
    Base repository class with common CRUD operations.

    All repositories should inherit from this class.
    """
    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    # -----------------------------
    # Error translation
    # -----------------------------
    async def _fail(self, action: str, exc: SQLAlchemyError) -> StorageError:
        """Roll back the session and build a StorageError for `action`."""
        await self.db.rollback()
        return StorageError(f"Failed to {action} {self.model.__name__}: {exc}")

    # -----------------------------
    # Get Element By id
    # -----------------------------
    async def get_by_id(self, id: Any) -> Optional[ModelType]:
        """Get a record by ID."""
        try:
            result = await self.db.execute(
                select(self.model).where(self.model.id == as_uuid(id))
            )
        except SQLAlchemyError as e:
            raise await self._fail("load", e) from e
        return result.scalar_one_or_none()

    # -----------------------------
    # Create Single Record
    # -----------------------------
    async def create(self, **kwargs) -> ModelType:
        """Create a new record."""
        instance = self.model(**kwargs)
        self.db.add(instance)
        try:
            await self.db.commit()
            await self.db.refresh(instance)
        except SQLAlchemyError as e:
            raise await self._fail("create", e) from e
        return instance

    # -----------------------------
    # Update record
    # -----------------------------
    async def update(self, id: Any, **kwargs) -> Optional[ModelType]:
        """Update a record by ID."""
        instance = await self.get_by_id(id)
        if not instance:
            return None

        for key, value in kwargs.items():
            setattr(instance, key, value)

        try:
            await self.db.commit()
            await self.db.refresh(instance)
        except SQLAlchemyError as e:
            raise await self._fail("update", e) from e
        return instance
