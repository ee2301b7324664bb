from sqlalchemy import Column, String, Boolean, DateTime, Index, func
from sqlalchemy.orm import relationship
from .base import BaseModel

class User(BaseModel):
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)

    # Relationships - User OWNS these
    reset_codes = relationship("PasswordResetCode", back_populates="user", cascade="all, delete-orphan")

    # Serves UserRepository.get_by_email, which matches on lower(email)
    __table_args__ = (
        Index("ix_users_email_lower", func.lower(email), unique=True),
    )
