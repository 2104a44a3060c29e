# app/services/request_service.py

from typing import Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.config import settings
from app.core.constants import (
    DESCRIPTION_MAX_LENGTH,
    REPLY_MAX_LENGTH,
    SCOPE_ALL,
    SCOPE_ASSIGNED,
    SCOPE_OWN,
    TITLE_MAX_LENGTH,
    utcnow,
)
from app.core.exceptions import DefaultStatusMissing, NotFound, ValidationFailed
from app.core.rbac import Action, require, visibility_scope
from app.models.department import Department, DepartmentPerson
from app.models.enums import RequestPriority
from app.models.request_type import RequestType
from app.models.service_request import RequestReply, ServiceRequest
from app.models.status import RequestStatus
from app.models.user import User
from app.schemas.master_data import StatusRef
from app.schemas.service_request import (
    DepartmentRef,
    ReplyRead,
    RequestTypeRef,
    ServiceRequestDetail,
    ServiceRequestListItem,
)
from app.schemas.user import UserSummary
from app.services.status_rules import check_transition, pick_default_status

REQUEST_NO_ATTEMPTS = 3


# ============================================================================
# VALIDATION
# ============================================================================
def _validate_text(value: Optional[str], field: str, max_length: int) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationFailed(field, "must not be empty")
    if len(value) > max_length:
        raise ValidationFailed(field, f"must be at most {max_length} characters")
    return value


def _validate_priority(priority: Optional[str]) -> str:
    try:
        return RequestPriority(priority).value
    except ValueError:
        raise ValidationFailed("priority", f"must be one of {[p.value for p in RequestPriority]}")


# ============================================================================
# LOOKUPS
# ============================================================================
async def get_default_status(session: AsyncSession) -> RequestStatus:
    result = await session.execute(select(RequestStatus))
    status = pick_default_status(result.scalars().all())
    if status is None:
        raise DefaultStatusMissing()
    return status


async def _get_request(session: AsyncSession, request_id) -> ServiceRequest:
    if not isinstance(request_id, UUID):
        try:
            request_id = UUID(str(request_id))
        except ValueError:
            raise NotFound("Service request")

    request = await session.get(ServiceRequest, request_id)
    if not request:
        raise NotFound("Service request")
    return request


def _scope_filter(query, actor):
    scope = visibility_scope(actor)
    if scope == SCOPE_OWN:
        return query.where(ServiceRequest.requester_id == actor.id)
    if scope == SCOPE_ASSIGNED:
        return query.where(ServiceRequest.assigned_to_user_id == actor.id)
    if scope == SCOPE_ALL:
        return query
    raise ValueError(f"Unknown visibility scope: {scope}")


def is_visible_to(actor, request: ServiceRequest) -> bool:
    scope = visibility_scope(actor)
    if scope == SCOPE_OWN:
        return request.requester_id == actor.id
    if scope == SCOPE_ASSIGNED:
        return request.assigned_to_user_id == actor.id
    return True


async def _get_readable_request(session: AsyncSession, actor, request_id) -> ServiceRequest:
    request = await _get_request(session, request_id)
    # Out-of-scope requests look exactly like missing ones
    if settings.RESTRICT_REQUEST_DETAIL and not is_visible_to(actor, request):
        raise NotFound("Service request")
    return request


async def _next_request_no(session: AsyncSession) -> str:
    """{PREFIX}-{YYYY}-{NNN}, sequential within the calendar year."""
    prefix = f"{settings.REQUEST_NO_PREFIX}-{utcnow().year}-"
    result = await session.execute(
        select(ServiceRequest.request_no)
        .where(ServiceRequest.request_no.like(f"{prefix}%"))
        .order_by(func.length(ServiceRequest.request_no).desc(), ServiceRequest.request_no.desc())
        .limit(1)
    )
    last = result.scalar_one_or_none()

    sequence = 1
    if last:
        try:
            sequence = int(last[len(prefix):]) + 1
        except ValueError:
            sequence = 1
    return f"{prefix}{sequence:03d}"


# ============================================================================
# CREATE REQUEST
# ============================================================================
async def create_request(
    session: AsyncSession,
    actor,
    title: str,
    description: str,
    priority: str,
    request_type_id: int,
) -> ServiceRequest:
    require(actor, Action.CreateRequest)

    title = _validate_text(title, "title", TITLE_MAX_LENGTH)
    description = _validate_text(description, "description", DESCRIPTION_MAX_LENGTH)
    priority = _validate_priority(priority)

    if request_type_id is None or not await session.get(RequestType, request_type_id):
        raise ValidationFailed("request_type_id", "references a request type that does not exist")

    status_id = (await get_default_status(session)).id

    for attempt in range(1, REQUEST_NO_ATTEMPTS + 1):
        request = ServiceRequest(
            request_no=await _next_request_no(session),
            title=title,
            description=description,
            priority=priority,
            request_type_id=request_type_id,
            status_id=status_id,
            requester_id=actor.id,
        )
        session.add(request)
        try:
            await session.commit()
        except IntegrityError:
            # Another request took the same number
            await session.rollback()
            logger.warning(f"Request number collision on attempt {attempt}")
            continue

        await session.refresh(request)
        logger.info(f"Service request {request.request_no} created by {actor.email}")
        return request

    raise ValidationFailed("request_no", "could not generate a unique request number")


# ============================================================================
# LIST REQUESTS (role scoped)
# ============================================================================
async def list_requests(session: AsyncSession, actor) -> list[ServiceRequestListItem]:
    require(actor, Action.ListRequests)

    query = (
        select(ServiceRequest, RequestStatus, RequestType, Department)
        .join(RequestStatus, RequestStatus.id == ServiceRequest.status_id)
        .join(RequestType, RequestType.id == ServiceRequest.request_type_id)
        .join(Department, Department.id == RequestType.department_id, isouter=True)
        .order_by(ServiceRequest.request_datetime.desc())
    )
    query = _scope_filter(query, actor)

    result = await session.execute(query)

    items = []
    for request, status, request_type, department in result.all():
        items.append(
            ServiceRequestListItem(
                id=request.id,
                request_no=request.request_no,
                request_datetime=request.request_datetime,
                title=request.title,
                description=request.description,
                priority=request.priority,
                status=StatusRef.model_validate(status),
                request_type=RequestTypeRef(
                    id=request_type.id,
                    name=request_type.name,
                    department=DepartmentRef.model_validate(department) if department else None,
                ),
                requester_id=request.requester_id,
                assigned_to_user_id=request.assigned_to_user_id,
            )
        )
    return items


# ============================================================================
# REQUEST DETAIL
# ============================================================================
async def get_request_detail(session: AsyncSession, actor, request_id) -> ServiceRequestDetail:
    require(actor, Action.ViewRequest)
    request = await _get_readable_request(session, actor, request_id)

    status = await session.get(RequestStatus, request.status_id)
    requester = await session.get(User, request.requester_id)
    assignee = (
        await session.get(User, request.assigned_to_user_id)
        if request.assigned_to_user_id else None
    )
    request_type = await session.get(RequestType, request.request_type_id)
    department = (
        await session.get(Department, request_type.department_id)
        if request_type and request_type.department_id else None
    )

    replies_res = await session.execute(
        select(RequestReply, User.name, RequestStatus.name)
        .join(User, User.id == RequestReply.user_id, isouter=True)
        .join(RequestStatus, RequestStatus.id == RequestReply.status_id, isouter=True)
        .where(RequestReply.request_id == request.id)
        .order_by(RequestReply.reply_datetime.asc(), RequestReply.created_at.asc())
    )
    replies = []
    for reply, user_name, status_name in replies_res.all():
        item = ReplyRead.model_validate(reply)
        item.user_name = user_name
        item.status_name = status_name
        replies.append(item)

    return ServiceRequestDetail(
        id=request.id,
        request_no=request.request_no,
        request_datetime=request.request_datetime,
        title=request.title,
        description=request.description,
        priority=request.priority,
        status=StatusRef.model_validate(status),
        requester=UserSummary.model_validate(requester),
        assignee=UserSummary.model_validate(assignee) if assignee else None,
        request_type=RequestTypeRef(
            id=request_type.id,
            name=request_type.name,
            department=DepartmentRef.model_validate(department) if department else None,
        ),
        assigned_at=request.assigned_at,
        assigned_by_user_id=request.assigned_by_user_id,
        assigned_description=request.assigned_description,
        status_at=request.status_at,
        status_by_user_id=request.status_by_user_id,
        status_description=request.status_description,
        approval_status=request.approval_status,
        approval_at=request.approval_at,
        approval_by_user_id=request.approval_by_user_id,
        approval_description=request.approval_description,
        replies=replies,
    )


# ============================================================================
# ADD REPLY
# ============================================================================
async def add_reply(session: AsyncSession, actor, request_id, body: str) -> RequestReply:
    require(actor, Action.AddReply)
    body = _validate_text(body, "body", REPLY_MAX_LENGTH)
    request = await _get_readable_request(session, actor, request_id)

    # Snapshot of the status in effect right now; the request itself is untouched
    reply = RequestReply(
        request_id=request.id,
        user_id=actor.id,
        body=body,
        status_id=request.status_id,
        status_by_user_id=actor.id,
    )
    session.add(reply)
    await session.commit()
    await session.refresh(reply)
    return reply


# ============================================================================
# ASSIGN TECHNICIAN
# ============================================================================
async def assign_technician(
    session: AsyncSession,
    actor,
    request_id,
    technician_id: UUID,
    description: Optional[str] = None,
) -> ServiceRequest:
    require(actor, Action.AssignTechnician)
    request = await _get_readable_request(session, actor, request_id)

    technician = await session.get(User, technician_id)
    if not technician:
        raise NotFound("Technician")

    now = utcnow()
    request.assigned_to_user_id = technician.id
    request.assigned_at = now
    request.assigned_by_user_id = actor.id
    request.assigned_description = description
    request.updated_at = now
    session.add(request)

    body = f"Assigned request to {technician.name}"
    if description:
        body = f"{body}: {description}"

    # Assignment and its activity entry commit together
    session.add(
        RequestReply(
            request_id=request.id,
            user_id=actor.id,
            body=body,
            status_id=request.status_id,
            is_system=True,
            reply_datetime=now,
        )
    )
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(request)
    logger.info(f"{request.request_no} assigned to {technician.email} by {actor.email}")
    return request


# ============================================================================
# CHANGE STATUS
# ============================================================================
async def change_status(
    session: AsyncSession,
    actor,
    request_id,
    status_id: int,
    note: Optional[str] = None,
) -> ServiceRequest:
    require(actor, Action.ChangeStatus)
    request = await _get_readable_request(session, actor, request_id)

    target = await session.get(RequestStatus, status_id)
    if not target:
        raise NotFound("Status")
    current = await session.get(RequestStatus, request.status_id)

    check_transition(actor, request, current, target)

    if note is not None:
        note = _validate_text(note, "note", REPLY_MAX_LENGTH)

    now = utcnow()
    request.status_id = target.id
    request.status_at = now
    request.status_by_user_id = actor.id
    request.status_description = note
    request.updated_at = now
    session.add(request)

    session.add(
        RequestReply(
            request_id=request.id,
            user_id=actor.id,
            body=note or f"Status changed to {target.name}",
            status_id=target.id,
            status_by_user_id=actor.id,
            is_system=note is None,
            reply_datetime=now,
        )
    )
    try:
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(request)
    logger.info(f"{request.request_no}: {current.system_name} -> {target.system_name} by {actor.email}")
    return request


# ============================================================================
# DEPARTMENT TECHNICIANS (assignment picker)
# ============================================================================
async def list_department_technicians(session: AsyncSession, department_id: int) -> list[User]:
    if not await session.get(Department, department_id):
        raise NotFound("Department")

    result = await session.execute(
        select(User)
        .join(DepartmentPerson, DepartmentPerson.user_id == User.id)
        .where(DepartmentPerson.department_id == department_id)
        .distinct()
        .order_by(User.name.asc())
    )
    return result.scalars().all()
