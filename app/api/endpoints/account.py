# app/api/endpoints/account.py
from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from app.api.deps import get_current_user, get_db_session
from app.schemas.auth import ChangePasswordRequest
from app.schemas.user import CurrentUser
from app.services.auth_service import change_password as change_user_password

router = APIRouter(prefix="/api/account", tags=["Account"])


@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session)
):
    await change_user_password(session, current_user.id, payload.old_password, payload.new_password)
    return {"detail": "Password changed successfully"}
