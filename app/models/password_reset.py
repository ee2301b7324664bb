"""
Password Reset Model

One row per issued reset code. The code itself is never stored, only
its SHA-256 hash.

A row is usable while consumed_at is NULL and expires_at is in the
future. Expiry has no status column; it is evaluated at query time.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship
from .base import BaseModel

class PasswordResetCode(BaseModel):
    __tablename__ = "password_reset_codes"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    code_hash = Column(String(64), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    consumed_at = Column(DateTime(timezone=True), nullable=True)

    # Relationship
    user = relationship("User", back_populates="reset_codes")

    __table_args__ = (
        Index("ix_password_reset_codes_user_outstanding", "user_id", "consumed_at", "expires_at"),
    )
