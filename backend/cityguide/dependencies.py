"""
CityGuide Backend — Route Dependencies
========================================

What:  FastAPI dependencies that turn the Authorization header into a User.
How:   HTTPBearer(auto_error=False) extracts the token so a missing header
       becomes our own AuthenticationError instead of FastAPI's default 403.

Checks, in order:
    1. header present                 else AuthenticationError  (401)
    2. signature / expiry valid       else InvalidTokenError    (403)
    3. user still exists              else AuthenticationError  (401)
    4. user not banned                else AccountBannedError   (403)
    5. (require_admin) role == admin  else AdminRequiredError   (403)

The session is the request's shared get_db_session instance; FastAPI caches
dependencies per request, so routes and these checks use one transaction.
"""

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.database import get_db_session
from cityguide.exceptions import AuthenticationError
from cityguide.models.user import User
from cityguide.services.auth_service import auth_service
from cityguide.services.authorization import ensure_admin

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()
    return await auth_service.resolve_token(db, credentials.credentials)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    ensure_admin(user)
    return user
