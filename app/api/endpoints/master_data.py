# app/api/endpoints/master_data.py

from fastapi import APIRouter, Depends, Query, status
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List, Optional

# Schemas
from app.schemas.master_data import (
    DepartmentPersonRead,
    DepartmentPersonWrite,
    DepartmentRead,
    DepartmentWrite,
    RequestTypeRead,
    RequestTypeWrite,
    ServiceTypeRead,
    ServiceTypeWrite,
    StatusRead,
    StatusWrite,
    TypePersonRead,
    TypePersonWrite,
)
from app.schemas.user import CurrentUser, UserSummary

# Services
from app.services import master_data_service as md
from app.services.request_service import list_department_technicians

# Deps
from app.api.deps import get_db_session, get_current_user

# Reads: any signed-in user. Writes: admin, enforced in the service layer.
router = APIRouter(prefix="/api", tags=["Master Data"])


# ===================================================================
# DEPARTMENTS
# ===================================================================
@router.get("/departments", response_model=List[DepartmentRead])
async def list_departments(
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(get_current_user),
):
    return await md.list_departments(session)


@router.get("/departments/{department_id}", response_model=DepartmentRead)
async def get_department(
    department_id: int,
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(get_current_user),
):
    return await md.get_department(session, department_id)


@router.get("/departments/{department_id}/technicians", response_model=List[UserSummary])
async def get_department_technicians(
    department_id: int,
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(get_current_user),
):
    return await list_department_technicians(session, department_id)


@router.post("/departments", response_model=DepartmentRead, status_code=status.HTTP_201_CREATED)
async def create_department(
    payload: DepartmentWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.create_department(session, current_user, payload)


@router.put("/departments/{department_id}", response_model=DepartmentRead)
async def update_department(
    department_id: int,
    payload: DepartmentWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.update_department(session, current_user, department_id, payload)


@router.delete("/departments/{department_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_department(
    department_id: int,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    await md.delete_department(session, current_user, department_id)


# ===================================================================
# SERVICE TYPES
# ===================================================================
@router.get("/service-types", response_model=List[ServiceTypeRead])
async def list_service_types(
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(get_current_user),
):
    return await md.list_service_types(session)


@router.post("/service-types", response_model=ServiceTypeRead, status_code=status.HTTP_201_CREATED)
async def create_service_type(
    payload: ServiceTypeWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.create_service_type(session, current_user, payload)


@router.put("/service-types/{type_id}", response_model=ServiceTypeRead)
async def update_service_type(
    type_id: int,
    payload: ServiceTypeWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.update_service_type(session, current_user, type_id, payload)


@router.delete("/service-types/{type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service_type(
    type_id: int,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    await md.delete_service_type(session, current_user, type_id)


# ===================================================================
# REQUEST TYPES
# ===================================================================
@router.get("/request-types", response_model=List[RequestTypeRead])
async def list_request_types(
    service_type_id: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(get_current_user),
):
    return await md.list_request_types(session, service_type_id=service_type_id)


@router.post("/request-types", response_model=RequestTypeRead, status_code=status.HTTP_201_CREATED)
async def create_request_type(
    payload: RequestTypeWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.create_request_type(session, current_user, payload)


@router.put("/request-types/{request_type_id}", response_model=RequestTypeRead)
async def update_request_type(
    request_type_id: int,
    payload: RequestTypeWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.update_request_type(session, current_user, request_type_id, payload)


@router.delete("/request-types/{request_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_request_type(
    request_type_id: int,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    await md.delete_request_type(session, current_user, request_type_id)


# ===================================================================
# STATUSES
# ===================================================================
@router.get("/statuses", response_model=List[StatusRead])
async def list_statuses(
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(get_current_user),
):
    return await md.list_statuses(session)


@router.post("/statuses", response_model=StatusRead, status_code=status.HTTP_201_CREATED)
async def create_status(
    payload: StatusWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.create_status(session, current_user, payload)


@router.put("/statuses/{status_id}", response_model=StatusRead)
async def update_status(
    status_id: int,
    payload: StatusWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.update_status(session, current_user, status_id, payload)


@router.delete("/statuses/{status_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_status(
    status_id: int,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    await md.delete_status(session, current_user, status_id)


# ===================================================================
# DEPARTMENT PERSONS
# ===================================================================
@router.get("/department-persons", response_model=List[DepartmentPersonRead])
async def list_department_persons(
    department_id: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(get_current_user),
):
    return await md.list_department_persons(session, department_id=department_id)


@router.post("/department-persons", response_model=DepartmentPersonRead, status_code=status.HTTP_201_CREATED)
async def create_department_person(
    payload: DepartmentPersonWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.create_department_person(session, current_user, payload)


@router.put("/department-persons/{person_id}", response_model=DepartmentPersonRead)
async def update_department_person(
    person_id: int,
    payload: DepartmentPersonWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.update_department_person(session, current_user, person_id, payload)


@router.delete("/department-persons/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_department_person(
    person_id: int,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    await md.delete_department_person(session, current_user, person_id)


# ===================================================================
# REQUEST TYPE PERSONS
# ===================================================================
@router.get("/type-persons", response_model=List[TypePersonRead])
async def list_type_persons(
    request_type_id: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_db_session),
    _: CurrentUser = Depends(get_current_user),
):
    return await md.list_type_persons(session, request_type_id=request_type_id)


@router.post("/type-persons", response_model=TypePersonRead, status_code=status.HTTP_201_CREATED)
async def create_type_person(
    payload: TypePersonWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.create_type_person(session, current_user, payload)


@router.put("/type-persons/{mapping_id}", response_model=TypePersonRead)
async def update_type_person(
    mapping_id: int,
    payload: TypePersonWrite,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await md.update_type_person(session, current_user, mapping_id, payload)


@router.delete("/type-persons/{mapping_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_type_person(
    mapping_id: int,
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    await md.delete_type_person(session, current_user, mapping_id)
