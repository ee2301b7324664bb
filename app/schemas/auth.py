import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ============================================================
# Requests
# ============================================================

class UserRegister(BaseModel):
    """New grant-seeker account"""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "grants@acme.org",
                "password": "Proposal2024",
                "full_name": "Dana Okafor",
            }
        }
    )

    email: EmailStr
    password: str = Field(min_length=8, max_length=100)
    full_name: str = Field(min_length=2, max_length=100)

    @field_validator("password")
    @classmethod
    def password_has_letter_and_digit(cls, v: str) -> str:
        if not re.search(r"[A-Za-z]", v):
            raise ValueError("Password must contain at least one letter")
        if not re.search(r"\d", v):
            raise ValueError("Password must contain at least one digit")
        return v

    @field_validator("full_name")
    @classmethod
    def collapse_whitespace(cls, v: str) -> str:
        return " ".join(v.split())


class UserLogin(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "grants@acme.org", "password": "Proposal2024"}}
    )

    email: EmailStr
    password: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str


# ============================================================
# Responses
# ============================================================

class UserResponse(BaseModel):
    """Public account fields. The password hash is never exposed."""

    id: str
    email: str
    full_name: str
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class TokenRefreshResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds


class TokenResponse(TokenRefreshResponse):
    """Access + refresh pair returned by register and login"""

    refresh_token: str
    user: UserResponse


class ErrorResponse(BaseModel):
    """Body of every application error"""

    model_config = ConfigDict(json_schema_extra={"example": {"error": "Invalid email or password"}})

    error: str
