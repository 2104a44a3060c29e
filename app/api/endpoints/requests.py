# app/api/endpoints/requests.py

from fastapi import APIRouter, Depends, status
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List
from uuid import UUID

# Schemas
from app.schemas.service_request import (
    AssignTechnicianRequest,
    ReplyCreate,
    ReplyRead,
    ServiceRequestCreate,
    ServiceRequestDetail,
    ServiceRequestListItem,
    ServiceRequestRead,
    StatusChangeRequest,
)
from app.schemas.user import CurrentUser

# Services
from app.services import request_service

# Deps
from app.api.deps import get_db_session, get_current_user

router = APIRouter(prefix="/api/requests", tags=["Service Requests"])


# -------------------------------------------------------------------
# CREATE REQUEST
# -------------------------------------------------------------------
@router.post("", response_model=ServiceRequestRead, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: ServiceRequestCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await request_service.create_request(
        session,
        current_user,
        title=payload.title,
        description=payload.description,
        priority=payload.priority,
        request_type_id=payload.request_type_id,
    )


# -------------------------------------------------------------------
# LIST REQUESTS (scoped by role)
# -------------------------------------------------------------------
@router.get("", response_model=List[ServiceRequestListItem])
async def list_requests(
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await request_service.list_requests(session, current_user)


# -------------------------------------------------------------------
# REQUEST DETAIL
# -------------------------------------------------------------------
@router.get("/{request_id}", response_model=ServiceRequestDetail)
async def get_request(
    request_id: UUID,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await request_service.get_request_detail(session, current_user, request_id)


# -------------------------------------------------------------------
# REPLIES
# -------------------------------------------------------------------
@router.post("/{request_id}/replies", response_model=ReplyRead, status_code=status.HTTP_201_CREATED)
async def add_reply(
    request_id: UUID,
    payload: ReplyCreate,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    reply = await request_service.add_reply(session, current_user, request_id, payload.body)
    result = ReplyRead.model_validate(reply)
    result.user_name = current_user.name
    return result


# -------------------------------------------------------------------
# ASSIGN TECHNICIAN (Admin / HOD)
# -------------------------------------------------------------------
@router.post("/{request_id}/assign", response_model=ServiceRequestRead)
async def assign_technician(
    request_id: UUID,
    payload: AssignTechnicianRequest,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await request_service.assign_technician(
        session,
        current_user,
        request_id,
        payload.technician_id,
        description=payload.description,
    )


# -------------------------------------------------------------------
# CHANGE STATUS
# -------------------------------------------------------------------
@router.post("/{request_id}/status", response_model=ServiceRequestRead)
async def change_status(
    request_id: UUID,
    payload: StatusChangeRequest,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await request_service.change_status(
        session,
        current_user,
        request_id,
        payload.status_id,
        note=payload.note,
    )
