# app/services/auth_service.py

from functools import lru_cache
from uuid import UUID

from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from app.core.config import settings
from app.core.constants import utcnow
from app.core.exceptions import EmailInUse, InvalidCredentials, NotFound, ValidationFailed
from app.core.security import (
    hash_password,
    verify_password,
    create_access_token,
)
from app.models.enums import UserRole
from app.models.user import User, RoleAssignment
from app.schemas.auth import TokenWithUser
from app.schemas.user import UserRead
from app.services.identity_service import get_user_role


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password("not-a-real-password")


# ============================================================================
# FETCH USER BY EMAIL
# ============================================================================
async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


# ============================================================================
# FETCH USER BY ID
# ============================================================================
async def get_user_by_id(session: AsyncSession, user_id) -> User | None:
    if not isinstance(user_id, UUID):
        try:
            user_id = UUID(str(user_id))
        except ValueError:
            return None
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


# ============================================================================
# CREATE USER
# ============================================================================
async def create_user(
    session: AsyncSession,
    name: str,
    email: str,
    password: str,
    role: UserRole = UserRole.Requestor,
) -> User:
    """Create the profile and its single role row in one transaction."""

    if not name or not name.strip():
        raise ValidationFailed("name", "must not be empty")
    if not password:
        raise ValidationFailed("password", "must not be empty")

    email = normalize_email(email)
    if await get_user_by_email(session, email):
        raise EmailInUse()

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
    )
    session.add(user)

    try:
        await session.flush()
        session.add(RoleAssignment(user_id=user.id, role=UserRole(role).value))
        await session.commit()
        await session.refresh(user)
    except IntegrityError:
        await session.rollback()
        raise EmailInUse()

    logger.info(f"User created: {user.email} ({UserRole(role).value})")
    return user


# ============================================================================
# AUTHENTICATE
# ============================================================================
async def authenticate_user(session: AsyncSession, email: str, password: str) -> User:
    user = await get_user_by_email(session, email)
    if not user:
        # Burn the same bcrypt work so a missing account is not observable by timing
        verify_password(password, _dummy_hash())
        logger.warning("Login failed: unknown email")
        raise InvalidCredentials()

    if not verify_password(password, user.password_hash):
        logger.warning(f"Login failed: bad password for {user.email}")
        raise InvalidCredentials()

    return user


# ============================================================================
# REGISTER (self sign-up)
# ============================================================================
async def register_user(session: AsyncSession, email: str, password: str, name: str) -> User:
    return await create_user(session, name, email, password, role=UserRole.Requestor)


# ============================================================================
# CREATE LOGIN RESPONSE
# ============================================================================
async def create_login_response(user: User, session: AsyncSession) -> TokenWithUser:
    token, expires = create_access_token(user.id, user.email)
    role = await get_user_role(session, user.id)

    user_read = UserRead.model_validate(user)
    user_read.role = role

    return TokenWithUser(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        expires_at=expires,
        user=user_read,
    )


# ============================================================================
# LIST USERS (with roles)
# ============================================================================
async def list_users(session: AsyncSession) -> list[UserRead]:
    result = await session.execute(
        select(User, RoleAssignment.role)
        .join(RoleAssignment, RoleAssignment.user_id == User.id, isouter=True)
        .order_by(User.name.asc())
    )

    users = []
    for user, role in result.all():
        item = UserRead.model_validate(user)
        item.role = UserRole.parse(role)
        users.append(item)
    return users


# ============================================================================
# CHANGE PASSWORD
# ============================================================================
async def change_password(
    session: AsyncSession,
    user_id: UUID,
    old_password: str,
    new_password: str,
) -> None:
    user = await get_user_by_id(session, user_id)
    if not user:
        raise NotFound("User")

    if not verify_password(old_password, user.password_hash):
        raise ValidationFailed("old_password", "is incorrect")

    if not new_password:
        raise ValidationFailed("new_password", "must not be empty")

    # Prevent reusing old password
    if old_password == new_password:
        raise ValidationFailed("new_password", "must be different from the old password")

    user.password_hash = hash_password(new_password)
    user.updated_at = utcnow()
    session.add(user)
    await session.commit()
    logger.info(f"Password changed for {user.email}")
