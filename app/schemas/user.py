from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, EmailStr
from app.models.enums import UserRole


# ---------------------------------------------------------
# AUTHENTICATED IDENTITY (passed explicitly into services)
# ---------------------------------------------------------
class CurrentUser(BaseModel):
    id: UUID
    email: str
    name: str
    role: UserRole


# ---------------------------------------------------------
# READ USER (response)
# ---------------------------------------------------------
class UserRead(BaseModel):
    id: UUID
    name: str
    email: str
    role: UserRole = UserRole.Requestor
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserSummary(BaseModel):
    id: UUID
    name: str
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------
# ROLE UPDATE (Admin)
# ---------------------------------------------------------
class RoleUpdate(BaseModel):
    role: UserRole


# ---------------------------------------------------------
# CREATE USER (Admin, any role)
# ---------------------------------------------------------
class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: UserRole = UserRole.Requestor
