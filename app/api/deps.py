from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.database import get_db
from app.models import User
from app.services.auth_service import AuthService

# Shows the "Authorize" button in Swagger UI
security = HTTPBearer()


# =====================================================
# Signed-in user
# =====================================================
async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """
    Resolve the bearer token to an active user.

    AuthenticationError from the service becomes a 401 in the app handler.
    """
    return await AuthService(db).get_current_user(credentials.credentials)
