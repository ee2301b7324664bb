from datetime import datetime, timezone, timedelta
from typing import Any, Union, Optional, Dict
import hashlib
import hmac
import secrets
import uuid

import bcrypt
from jose import JWTError, jwt

from app.core.config import settings


# =====================================================
# Passwords (bcrypt)
# =====================================================
# bcrypt only looks at the first 72 bytes and recent releases reject longer input
BCRYPT_MAX_BYTES = 72


def _bcrypt_input(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str) -> str:
    """Salted bcrypt hash of a plain-text password."""
    if not password:
        raise ValueError("Password cannot be empty")
    return bcrypt.hashpw(_bcrypt_input(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    try:
        return bcrypt.checkpw(_bcrypt_input(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


# =====================================================
# Token Type Constants
# =====================================================
TOKEN_TYPE_ACCESS = "access"
TOKEN_TYPE_REFRESH = "refresh"


# =====================================================
# JWT Creation Functions
# =====================================================
def _create_token(
    subject: Union[str, Any],
    token_type: str,
    expires_delta: timedelta
) -> str:
    now = datetime.now(timezone.utc)

    to_encode = {
        "exp": now + expires_delta,
        "sub": str(subject),
        "type": token_type,
        "iat": now,
        "jti": str(uuid.uuid4())
    }

    return jwt.encode(
        to_encode,
        settings.SECRET_KEY,
        algorithm=settings.ALGORITHM
    )


def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.
    """
    return _create_token(
        subject,
        TOKEN_TYPE_ACCESS,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )


def create_refresh_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT refresh token.
    """
    return _create_token(
        subject,
        TOKEN_TYPE_REFRESH,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    )


# =====================================================
# Token Verification Functions
# =====================================================
def verify_token(
    token: str,
    token_type: str = TOKEN_TYPE_ACCESS
) -> Optional[Dict[str, Any]]:
    """
    Verify a JWT token and return its payload if valid.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM]
        )

        if payload.get("type") != token_type:
            return None

        return payload

    except JWTError:
        return None


def verify_refresh_token(token: str) -> Optional[str]:
    """
    Verify refresh token and return the subject.
    """
    payload = verify_token(token, TOKEN_TYPE_REFRESH)
    return payload.get("sub") if payload else None


# =====================================================
# Reset Code Functions
# =====================================================
RESET_CODE_MIN = 100000
RESET_CODE_MAX = 999999


def generate_reset_code() -> str:
    """
    Generate a six-digit numeric reset code.

    Uniform over 100000..999999, so it never starts with a zero.
    """
    return str(RESET_CODE_MIN + secrets.randbelow(RESET_CODE_MAX - RESET_CODE_MIN + 1))


def hash_reset_code(code: str) -> str:
    """
    One-way hash of a reset code (hex SHA-256, unsalted).
    """
    return hashlib.sha256(code.encode("utf-8")).hexdigest()


def reset_code_matches(code: str, code_hash: str) -> bool:
    """Constant-time comparison of a raw code against a stored hash."""
    return hmac.compare_digest(hash_reset_code(code), code_hash)


# =====================================================
# Token Helper Functions
# =====================================================
def create_token_pair(subject: Union[str, Any]) -> Dict[str, Any]:
    """
    Create and return access + refresh token pair.
    """
    return {
        "access_token": create_access_token(subject),
        "refresh_token": create_refresh_token(subject),
        "token_type": "bearer",
        "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    }
