# app/schemas/service_request.py

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.schemas.master_data import StatusRef
from app.schemas.user import UserSummary


# ============================================================
# CREATE (Requestor submits)
# ============================================================
class ServiceRequestCreate(BaseModel):
    title: str
    description: str
    priority: str
    request_type_id: int


class ReplyCreate(BaseModel):
    body: str


class AssignTechnicianRequest(BaseModel):
    technician_id: UUID
    description: Optional[str] = None


class StatusChangeRequest(BaseModel):
    status_id: int
    note: Optional[str] = None


# ============================================================
# READ
# ============================================================
class DepartmentRef(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class RequestTypeRef(BaseModel):
    id: int
    name: str
    department: Optional[DepartmentRef] = None


class ServiceRequestRead(BaseModel):
    id: UUID
    request_no: str
    request_datetime: datetime
    title: str
    description: str
    priority: str
    request_type_id: int
    status_id: int
    requester_id: UUID
    assigned_to_user_id: Optional[UUID] = None
    assigned_at: Optional[datetime] = None
    assigned_by_user_id: Optional[UUID] = None
    status_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ServiceRequestListItem(BaseModel):
    id: UUID
    request_no: str
    request_datetime: datetime
    title: str
    description: str
    priority: str
    status: StatusRef
    request_type: RequestTypeRef
    requester_id: UUID
    assigned_to_user_id: Optional[UUID] = None


class ReplyRead(BaseModel):
    id: UUID
    request_id: UUID
    user_id: UUID
    user_name: Optional[str] = None
    reply_datetime: datetime
    body: str
    status_id: int
    status_name: Optional[str] = None
    is_system: bool = False

    model_config = ConfigDict(from_attributes=True)


class ServiceRequestDetail(BaseModel):
    id: UUID
    request_no: str
    request_datetime: datetime
    title: str
    description: str
    priority: str
    status: StatusRef
    requester: UserSummary
    assignee: Optional[UserSummary] = None
    request_type: RequestTypeRef
    assigned_at: Optional[datetime] = None
    assigned_by_user_id: Optional[UUID] = None
    assigned_description: Optional[str] = None
    status_at: Optional[datetime] = None
    status_by_user_id: Optional[UUID] = None
    status_description: Optional[str] = None
    approval_status: Optional[str] = None
    approval_at: Optional[datetime] = None
    approval_by_user_id: Optional[UUID] = None
    approval_description: Optional[str] = None
    replies: List[ReplyRead] = []
