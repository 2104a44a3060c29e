# app/api/deps.py

from typing import AsyncGenerator, Optional
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_session
from app.core.rbac import Action, require
from app.schemas.user import CurrentUser
from app.services.identity_service import current_user_from_token


# ------------------------------------------------------------
# HTTP Bearer Authentication (cookie fallback)
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=False)


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


# ------------------------------------------------------------
# Get current logged-in user from the session token
# ------------------------------------------------------------
async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> CurrentUser:

    token = _extract_token(request, credentials)
    user = await current_user_from_token(session, token)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


# ------------------------------------------------------------
# Permission-based access control
# ------------------------------------------------------------
def permission_required(action: Action):
    """Route-level gate; services still run their own permission checks."""

    async def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        require(current_user, action)
        return current_user

    return checker


# ------------------------------------------------------------
# Exposed dependencies for routers
# ------------------------------------------------------------
require_admin = permission_required(Action.ManageUsers)
