# app/services/identity_service.py

from typing import Optional
from uuid import UUID

from loguru import logger
from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound
from app.core.security import SessionPayload, validate_session
from app.models.enums import UserRole
from app.models.user import RoleAssignment, User
from app.schemas.user import CurrentUser


async def get_user_role(session: AsyncSession, user_id: UUID) -> UserRole:
    """Single role of a user; no role row (or an unknown value) means requestor."""
    result = await session.execute(
        select(RoleAssignment.role).where(RoleAssignment.user_id == user_id).limit(1)
    )
    return UserRole.parse(result.scalar_one_or_none())


async def set_user_role(session: AsyncSession, user_id: UUID, role: UserRole) -> UserRole:
    user = await session.get(User, user_id)
    if not user:
        raise NotFound("User")

    result = await session.execute(
        select(RoleAssignment).where(RoleAssignment.user_id == user_id)
    )
    assignment = result.scalars().first()

    if assignment:
        assignment.role = role.value
    else:
        assignment = RoleAssignment(user_id=user_id, role=role.value)
    session.add(assignment)
    await session.commit()

    logger.info(f"Role of {user.email} set to {role.value}")
    return role


async def resolve_current_user(
    session: AsyncSession,
    payload: Optional[SessionPayload],
) -> Optional[CurrentUser]:
    """Validated session → profile + role. None means anonymous."""
    if payload is None:
        return None

    user = await session.get(User, payload.user_id)
    if not user:
        return None

    role = await get_user_role(session, user.id)
    return CurrentUser(id=user.id, email=user.email, name=user.name, role=role)


async def current_user_from_token(session: AsyncSession, token: Optional[str]) -> Optional[CurrentUser]:
    return await resolve_current_user(session, validate_session(token))
