from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


# --- DEPARTMENT ---
class DepartmentWrite(BaseModel):
    name: str
    description: Optional[str] = None
    cc_email: Optional[str] = None
    is_request_title_disabled: bool = False


class DepartmentRead(DepartmentWrite):
    id: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


# --- SERVICE TYPE ---
class ServiceTypeWrite(BaseModel):
    name: str
    description: Optional[str] = None
    sequence: int = 0
    is_for_staff: bool = True
    is_for_student: bool = True


class ServiceTypeRead(ServiceTypeWrite):
    id: int

    model_config = ConfigDict(from_attributes=True)


# --- REQUEST TYPE ---
class RequestTypeWrite(BaseModel):
    name: str
    description: Optional[str] = None
    sequence: Optional[int] = None
    service_type_id: Optional[int] = None
    department_id: Optional[int] = None
    default_priority: Optional[str] = None
    reminder_days_after_assignment: Optional[int] = None
    is_visible_resource: bool = False
    is_mandatory_resource: bool = False


class RequestTypeRead(RequestTypeWrite):
    id: int
    # Descriptive fields for the UI
    department_name: Optional[str] = None
    service_type_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# --- STATUS ---
class StatusWrite(BaseModel):
    name: str
    system_name: str
    sequence: Optional[int] = None
    description: Optional[str] = None
    css_class: Optional[str] = None
    is_open: bool = True
    is_terminal: bool = False
    is_allowed_for_technician: bool = False


class StatusRead(StatusWrite):
    id: int

    model_config = ConfigDict(from_attributes=True)


class StatusRef(BaseModel):
    id: int
    name: str
    system_name: Optional[str] = None
    is_terminal: bool = False

    model_config = ConfigDict(from_attributes=True)


# --- DEPARTMENT PERSON ---
class DepartmentPersonWrite(BaseModel):
    department_id: int
    user_id: UUID
    from_date: datetime
    to_date: Optional[datetime] = None
    is_hod: bool = False
    description: Optional[str] = None


class DepartmentPersonRead(DepartmentPersonWrite):
    id: int
    department_name: Optional[str] = None
    user_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# --- REQUEST TYPE PERSON ---
class TypePersonWrite(BaseModel):
    request_type_id: int
    user_id: UUID
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    description: Optional[str] = None


class TypePersonRead(TypePersonWrite):
    id: int
    request_type_name: Optional[str] = None
    user_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
