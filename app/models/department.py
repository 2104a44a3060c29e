from sqlmodel import SQLModel, Field
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from datetime import datetime
from typing import Optional
import uuid

from app.core.constants import utcnow


class Department(SQLModel, table=True):
    __tablename__ = "departments"

    # Primary Key must be ONLY inside sa_column
    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    name: str = Field(
        sa_column=Column(String(128), nullable=False, unique=True)
    )

    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    cc_email: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))

    is_request_title_disabled: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False)
    )

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))


class DepartmentPerson(SQLModel, table=True):
    """Marks a user as staff (or head) of a department for a date range."""
    __tablename__ = "department_persons"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    department_id: int = Field(
        sa_column=Column(Integer, ForeignKey("departments.id"), nullable=False, index=True)
    )
    user_id: uuid.UUID = Field(
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    )

    from_date: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    to_date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))

    is_hod: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
