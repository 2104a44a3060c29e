# app/api/endpoints/users.py

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List
from uuid import UUID

from app.api.deps import get_db_session, require_admin
from app.schemas.user import CurrentUser, RoleUpdate, UserCreate, UserRead
from app.services.auth_service import create_user, list_users as list_all_users
from app.services.identity_service import set_user_role

router = APIRouter(prefix="/api/users", tags=["Users"])


# -------------------------------------------------------------------
# Create ANY user (Admin only)
# -------------------------------------------------------------------
@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_new_user(
    data: UserCreate,
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(require_admin),
):
    user = await create_user(session, data.name, data.email, data.password, role=data.role)
    result = UserRead.model_validate(user)
    result.role = data.role
    return result


# -------------------------------------------------------------------
# List all users (Admin only)
# -------------------------------------------------------------------
@router.get("", response_model=List[UserRead])
async def list_users(
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(require_admin),
):
    return await list_all_users(session)


# -------------------------------------------------------------------
# Set the role of a user (Admin only)
# -------------------------------------------------------------------
@router.put("/{user_id}/role", response_model=RoleUpdate)
async def update_user_role(
    user_id: UUID,
    payload: RoleUpdate,
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(require_admin),
):
    role = await set_user_role(session, user_id, payload.role)
    return RoleUpdate(role=role)
