from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    TokenResponse,
    TokenRefreshResponse,
    RefreshTokenRequest,
    UserResponse,
    ErrorResponse,
)
from app.services.auth_service import AuthService, user_response
from app.api.deps import get_current_user
from app.models.user import User

# ============================================================
# Router Setup
# ============================================================

router = APIRouter(tags=["Authentication"])


# ============================================================
# Registration
# ============================================================

@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Email already registered"}},
)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Create a grant-seeker account.

    Returns a token pair so the client is signed in straight away.
    """
    return await AuthService(db).register(user_data)


# ============================================================
# Login
# ============================================================
@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def login(
    login_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    Sign in with email and password.

    - **email**: registered address, any case
    - **password**: current password (or the one just set via password reset)
    """
    return await AuthService(db).login(login_data)


# ============================================================
# Token Refresh
# ============================================================
@router.post(
    "/refresh",
    response_model=TokenRefreshResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid refresh token"}},
)
async def refresh_token(
    request_data: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    return await AuthService(db).refresh_token(request_data.refresh_token)


# ============================================================
# Current User
# ============================================================
@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Profile of the signed-in user."""
    return user_response(current_user)
