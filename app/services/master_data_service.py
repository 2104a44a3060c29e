# app/services/master_data_service.py

from typing import Optional, Type

from loguru import logger
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from app.core.constants import utcnow
from app.core.exceptions import NotFound, ValidationFailed
from app.core.rbac import Action, require
from app.models.department import Department, DepartmentPerson
from app.models.enums import RequestPriority
from app.models.request_type import RequestType, TypePerson
from app.models.service_request import RequestReply, ServiceRequest
from app.models.service_type import ServiceType
from app.models.status import RequestStatus
from app.models.user import User
from app.services.status_rules import sort_statuses
from app.schemas.master_data import (
    DepartmentPersonRead,
    DepartmentPersonWrite,
    DepartmentWrite,
    RequestTypeRead,
    RequestTypeWrite,
    ServiceTypeWrite,
    StatusWrite,
    TypePersonRead,
    TypePersonWrite,
)


# ============================================================================
# HELPERS
# ============================================================================
async def _get_or_404(session: AsyncSession, model: Type[SQLModel], obj_id, entity: str):
    obj = await session.get(model, obj_id)
    if not obj:
        raise NotFound(entity)
    return obj


async def _ensure_exists(session: AsyncSession, model: Type[SQLModel], obj_id, field: str):
    if obj_id is None:
        return
    if not await session.get(model, obj_id):
        raise ValidationFailed(field, "references a record that does not exist")


async def _count(session: AsyncSession, column, value) -> int:
    result = await session.execute(select(func.count()).where(column == value))
    return result.scalar_one()


async def _ensure_unreferenced(session: AsyncSession, entity: str, *refs) -> None:
    for column, value, label in refs:
        if await _count(session, column, value):
            raise ValidationFailed("id", f"{entity} is still referenced by {label}")


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationFailed(field, "must not be empty")
    return value.strip()


def _apply(obj: SQLModel, data: dict) -> SQLModel:
    for field, value in data.items():
        setattr(obj, field, value)
    if hasattr(obj, "updated_at"):
        obj.updated_at = utcnow()
    return obj


async def _save(session: AsyncSession, obj: SQLModel, field: str) -> SQLModel:
    session.add(obj)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValidationFailed(field, "conflicts with an existing record")
    await session.refresh(obj)
    return obj


async def _delete(session: AsyncSession, obj: SQLModel) -> None:
    await session.delete(obj)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValidationFailed("id", "record is still referenced")


# ============================================================================
# DEPARTMENTS
# ============================================================================
async def list_departments(session: AsyncSession) -> list[Department]:
    result = await session.execute(select(Department).order_by(Department.name.asc()))
    return result.scalars().all()


async def get_department(session: AsyncSession, department_id: int) -> Department:
    return await _get_or_404(session, Department, department_id, "Department")


async def _check_department_name(session: AsyncSession, name: str, exclude_id: Optional[int] = None):
    query = select(Department.id).where(func.lower(Department.name) == name.lower())
    if exclude_id is not None:
        query = query.where(Department.id != exclude_id)
    if (await session.execute(query)).first():
        raise ValidationFailed("name", "already exists")


async def create_department(session: AsyncSession, actor, data: DepartmentWrite) -> Department:
    require(actor, Action.ManageMasterData)
    values = data.model_dump()
    values["name"] = _require_text(data.name, "name")
    await _check_department_name(session, values["name"])

    dept = await _save(session, Department(**values), "name")
    logger.info(f"Department created: {dept.name}")
    return dept


async def update_department(session: AsyncSession, actor, department_id: int, data: DepartmentWrite) -> Department:
    require(actor, Action.ManageMasterData)
    dept = await get_department(session, department_id)
    values = data.model_dump()
    values["name"] = _require_text(data.name, "name")
    await _check_department_name(session, values["name"], exclude_id=department_id)

    return await _save(session, _apply(dept, values), "name")


async def delete_department(session: AsyncSession, actor, department_id: int) -> None:
    require(actor, Action.ManageMasterData)
    dept = await get_department(session, department_id)
    await _ensure_unreferenced(
        session, "Department",
        (RequestType.department_id, department_id, "request types"),
        (DepartmentPerson.department_id, department_id, "department personnel"),
    )
    await _delete(session, dept)
    logger.info(f"Department deleted: {dept.name}")


# ============================================================================
# SERVICE TYPES
# ============================================================================
async def list_service_types(session: AsyncSession) -> list[ServiceType]:
    result = await session.execute(
        select(ServiceType).order_by(ServiceType.sequence.asc(), ServiceType.name.asc())
    )
    return result.scalars().all()


async def create_service_type(session: AsyncSession, actor, data: ServiceTypeWrite) -> ServiceType:
    require(actor, Action.ManageMasterData)
    values = data.model_dump()
    values["name"] = _require_text(data.name, "name")
    return await _save(session, ServiceType(**values), "name")


async def update_service_type(session: AsyncSession, actor, type_id: int, data: ServiceTypeWrite) -> ServiceType:
    require(actor, Action.ManageMasterData)
    service_type = await _get_or_404(session, ServiceType, type_id, "Service type")
    values = data.model_dump()
    values["name"] = _require_text(data.name, "name")
    return await _save(session, _apply(service_type, values), "name")


async def delete_service_type(session: AsyncSession, actor, type_id: int) -> None:
    require(actor, Action.ManageMasterData)
    service_type = await _get_or_404(session, ServiceType, type_id, "Service type")
    await _ensure_unreferenced(
        session, "Service type",
        (RequestType.service_type_id, type_id, "request types"),
    )
    await _delete(session, service_type)


# ============================================================================
# REQUEST TYPES
# ============================================================================
async def list_request_types(
    session: AsyncSession,
    service_type_id: Optional[int] = None,
) -> list[RequestTypeRead]:
    query = (
        select(RequestType, Department.name, ServiceType.name)
        .join(Department, Department.id == RequestType.department_id, isouter=True)
        .join(ServiceType, ServiceType.id == RequestType.service_type_id, isouter=True)
        .order_by(RequestType.sequence.asc(), RequestType.name.asc())
    )
    if service_type_id is not None:
        query = query.where(RequestType.service_type_id == service_type_id)

    result = await session.execute(query)

    items = []
    for request_type, dept_name, type_name in result.all():
        item = RequestTypeRead.model_validate(request_type)
        item.department_name = dept_name
        item.service_type_name = type_name
        items.append(item)
    return items


async def get_request_type(session: AsyncSession, request_type_id: int) -> RequestType:
    return await _get_or_404(session, RequestType, request_type_id, "Request type")


async def _validated_request_type_values(session: AsyncSession, data: RequestTypeWrite) -> dict:
    values = data.model_dump()
    values["name"] = _require_text(data.name, "name")

    if data.default_priority is not None:
        try:
            values["default_priority"] = RequestPriority(data.default_priority).value
        except ValueError:
            raise ValidationFailed(
                "default_priority",
                f"must be one of {[p.value for p in RequestPriority]}",
            )

    await _ensure_exists(session, Department, data.department_id, "department_id")
    await _ensure_exists(session, ServiceType, data.service_type_id, "service_type_id")
    return values


async def create_request_type(session: AsyncSession, actor, data: RequestTypeWrite) -> RequestType:
    require(actor, Action.ManageMasterData)
    values = await _validated_request_type_values(session, data)
    request_type = await _save(session, RequestType(**values), "name")
    logger.info(f"Request type created: {request_type.name}")
    return request_type


async def update_request_type(session: AsyncSession, actor, request_type_id: int, data: RequestTypeWrite) -> RequestType:
    require(actor, Action.ManageMasterData)
    request_type = await get_request_type(session, request_type_id)
    values = await _validated_request_type_values(session, data)
    return await _save(session, _apply(request_type, values), "name")


async def delete_request_type(session: AsyncSession, actor, request_type_id: int) -> None:
    require(actor, Action.ManageMasterData)
    request_type = await get_request_type(session, request_type_id)
    await _ensure_unreferenced(
        session, "Request type",
        (ServiceRequest.request_type_id, request_type_id, "service requests"),
        (TypePerson.request_type_id, request_type_id, "technician mappings"),
    )
    await _delete(session, request_type)


# ============================================================================
# STATUSES
# ============================================================================
async def list_statuses(session: AsyncSession) -> list[RequestStatus]:
    result = await session.execute(select(RequestStatus))
    return sort_statuses(result.scalars().all())


async def get_status(session: AsyncSession, status_id: int) -> RequestStatus:
    return await _get_or_404(session, RequestStatus, status_id, "Status")


async def _validated_status_values(
    session: AsyncSession,
    data: StatusWrite,
    exclude_id: Optional[int] = None,
) -> dict:
    values = data.model_dump()
    values["name"] = _require_text(data.name, "name")
    values["system_name"] = _require_text(data.system_name, "system_name").upper()

    query = select(RequestStatus.id).where(RequestStatus.system_name == values["system_name"])
    if exclude_id is not None:
        query = query.where(RequestStatus.id != exclude_id)
    if (await session.execute(query)).first():
        raise ValidationFailed("system_name", "already exists")
    return values


async def create_status(session: AsyncSession, actor, data: StatusWrite) -> RequestStatus:
    require(actor, Action.ManageMasterData)
    values = await _validated_status_values(session, data)
    status = await _save(session, RequestStatus(**values), "system_name")
    logger.info(f"Status created: {status.system_name}")
    return status


async def update_status(session: AsyncSession, actor, status_id: int, data: StatusWrite) -> RequestStatus:
    require(actor, Action.ManageMasterData)
    status = await get_status(session, status_id)
    values = await _validated_status_values(session, data, exclude_id=status_id)
    return await _save(session, _apply(status, values), "system_name")


async def delete_status(session: AsyncSession, actor, status_id: int) -> None:
    require(actor, Action.ManageMasterData)
    status = await get_status(session, status_id)
    await _ensure_unreferenced(
        session, "Status",
        (ServiceRequest.status_id, status_id, "service requests"),
        (RequestReply.status_id, status_id, "replies"),
    )
    await _delete(session, status)
    logger.info(f"Status deleted: {status.system_name}")


# ============================================================================
# DEPARTMENT PERSONS
# ============================================================================
async def list_department_persons(
    session: AsyncSession,
    department_id: Optional[int] = None,
) -> list[DepartmentPersonRead]:
    query = (
        select(DepartmentPerson, Department.name, User.name)
        .join(Department, Department.id == DepartmentPerson.department_id)
        .join(User, User.id == DepartmentPerson.user_id)
        .order_by(DepartmentPerson.from_date.desc())
    )
    if department_id is not None:
        query = query.where(DepartmentPerson.department_id == department_id)

    result = await session.execute(query)

    items = []
    for person, dept_name, user_name in result.all():
        item = DepartmentPersonRead.model_validate(person)
        item.department_name = dept_name
        item.user_name = user_name
        items.append(item)
    return items


async def _validated_person_values(session: AsyncSession, data: DepartmentPersonWrite) -> dict:
    await _ensure_exists(session, Department, data.department_id, "department_id")
    await _ensure_exists(session, User, data.user_id, "user_id")
    if data.to_date is not None and data.to_date < data.from_date:
        raise ValidationFailed("to_date", "must not be before from_date")
    return data.model_dump()


async def create_department_person(session: AsyncSession, actor, data: DepartmentPersonWrite) -> DepartmentPerson:
    require(actor, Action.ManageMasterData)
    values = await _validated_person_values(session, data)
    person = await _save(session, DepartmentPerson(**values), "user_id")
    logger.info(f"User {person.user_id} added to department {person.department_id} (hod={person.is_hod})")
    return person


async def update_department_person(
    session: AsyncSession,
    actor,
    person_id: int,
    data: DepartmentPersonWrite,
) -> DepartmentPerson:
    require(actor, Action.ManageMasterData)
    person = await _get_or_404(session, DepartmentPerson, person_id, "Department person")
    values = await _validated_person_values(session, data)
    return await _save(session, _apply(person, values), "user_id")


async def delete_department_person(session: AsyncSession, actor, person_id: int) -> None:
    require(actor, Action.ManageMasterData)
    person = await _get_or_404(session, DepartmentPerson, person_id, "Department person")
    await _delete(session, person)


# ============================================================================
# REQUEST TYPE PERSONS (technician roster)
# ============================================================================
async def list_type_persons(
    session: AsyncSession,
    request_type_id: Optional[int] = None,
) -> list[TypePersonRead]:
    query = (
        select(TypePerson, RequestType.name, User.name)
        .join(RequestType, RequestType.id == TypePerson.request_type_id)
        .join(User, User.id == TypePerson.user_id)
        .order_by(TypePerson.created_at.desc())
    )
    if request_type_id is not None:
        query = query.where(TypePerson.request_type_id == request_type_id)

    result = await session.execute(query)

    items = []
    for mapping, type_name, user_name in result.all():
        item = TypePersonRead.model_validate(mapping)
        item.request_type_name = type_name
        item.user_name = user_name
        items.append(item)
    return items


async def _validated_type_person_values(session: AsyncSession, data: TypePersonWrite) -> dict:
    await _ensure_exists(session, RequestType, data.request_type_id, "request_type_id")
    await _ensure_exists(session, User, data.user_id, "user_id")
    if data.from_date and data.to_date and data.to_date < data.from_date:
        raise ValidationFailed("to_date", "must not be before from_date")
    return data.model_dump()


async def create_type_person(session: AsyncSession, actor, data: TypePersonWrite) -> TypePerson:
    require(actor, Action.ManageMasterData)
    values = await _validated_type_person_values(session, data)
    return await _save(session, TypePerson(**values), "user_id")


async def update_type_person(session: AsyncSession, actor, mapping_id: int, data: TypePersonWrite) -> TypePerson:
    require(actor, Action.ManageMasterData)
    mapping = await _get_or_404(session, TypePerson, mapping_id, "Technician mapping")
    values = await _validated_type_person_values(session, data)
    return await _save(session, _apply(mapping, values), "user_id")


async def delete_type_person(session: AsyncSession, actor, mapping_id: int) -> None:
    require(actor, Action.ManageMasterData)
    mapping = await _get_or_404(session, TypePerson, mapping_id, "Technician mapping")
    await _delete(session, mapping)
