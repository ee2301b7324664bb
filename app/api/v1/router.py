from fastapi import APIRouter
from app.api.v1.endpoints import auth, password_reset, matching

# ============================================================
# Main API v1 Router
# ============================================================

api_router = APIRouter()

# Include auth routes at /auth
api_router.include_router(
    auth.router,
    prefix="/auth"
)

# Reset-code flow at /password-reset
api_router.include_router(
    password_reset.router,
    prefix="/password-reset"
)

# Project / opportunity scoring at /matching
api_router.include_router(
    matching.router,
    prefix="/matching"
)
