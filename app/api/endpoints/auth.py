# app/api/endpoints/auth.py

from fastapi import APIRouter, Depends, Request, Response, status
from sqlmodel.ext.asyncio.session import AsyncSession

# Schemas
from app.schemas.auth import LoginRequest, RegisterRequest, TokenWithUser
from app.schemas.user import CurrentUser

# Services
from app.services.auth_service import (
    authenticate_user,
    create_login_response,
    register_user,
)

# Core
from app.core.config import settings
from app.core.rate_limiter import limiter

# Deps
from app.api.deps import get_db_session, get_current_user

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _set_session_cookie(response: Response, login: TokenWithUser) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=login.access_token,
        httponly=True,
        secure=settings.ENV == "prod",
        samesite="lax",
        path="/",
        max_age=login.expires_in,
    )


# -------------------------------------------------------------------
# LOGIN
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
):
    user = await authenticate_user(session, payload.email, payload.password)
    login_response = await create_login_response(user, session)

    _set_session_cookie(response, login_response)
    return login_response


# -------------------------------------------------------------------
# REGISTER (self sign-up, signs the new user in)
# -------------------------------------------------------------------
@router.post("/register", response_model=TokenWithUser, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def register(
    request: Request,
    response: Response,
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_db_session),
):
    user = await register_user(session, payload.email, payload.password, payload.name)
    login_response = await create_login_response(user, session)

    _set_session_cookie(response, login_response)
    return login_response


# -------------------------------------------------------------------
# LOGOUT
# -------------------------------------------------------------------
@router.post("/logout")
async def logout(response: Response):
    # Tokens are stateless; dropping the cookie ends the browser session
    response.delete_cookie(key=settings.SESSION_COOKIE_NAME, path="/")
    return {"message": "Logged out"}


# -------------------------------------------------------------------
# CURRENT USER
# -------------------------------------------------------------------
@router.get("/me", response_model=CurrentUser)
async def me(current_user: CurrentUser = Depends(get_current_user)):
    return current_user
