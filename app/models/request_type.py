from sqlmodel import SQLModel, Field
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, Uuid
from datetime import datetime
from typing import Optional
import uuid

from app.core.constants import utcnow


class RequestType(SQLModel, table=True):
    """A concrete request template owned by one department and one service type."""
    __tablename__ = "request_types"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    name: str = Field(sa_column=Column(String(128), nullable=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    sequence: Optional[int] = Field(default=None, sa_column=Column(Integer, nullable=True))

    service_type_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("service_types.id"), nullable=True, index=True)
    )
    department_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("departments.id"), nullable=True, index=True)
    )

    default_priority: Optional[str] = Field(default=None, sa_column=Column(String(16), nullable=True))
    reminder_days_after_assignment: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, nullable=True)
    )

    is_visible_resource: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    is_mandatory_resource: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))


class TypePerson(SQLModel, table=True):
    """Technician roster entry for a request type."""
    __tablename__ = "request_type_persons"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    request_type_id: int = Field(
        sa_column=Column(Integer, ForeignKey("request_types.id"), nullable=False, index=True)
    )
    user_id: uuid.UUID = Field(
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    )

    from_date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))
    to_date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
