# app/models/service_request.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from datetime import datetime
import uuid
from typing import Optional

from app.core.constants import utcnow


class ServiceRequest(SQLModel, table=True):
    __tablename__ = "service_requests"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    request_no: str = Field(sa_column=Column(String(32), nullable=False, unique=True))
    request_datetime: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False, index=True)
    )

    title: str = Field(sa_column=Column(String(250), nullable=False))
    description: str = Field(sa_column=Column(Text, nullable=False))
    priority: str = Field(sa_column=Column(String(16), nullable=False))

    request_type_id: int = Field(
        sa_column=Column(Integer, ForeignKey("request_types.id"), nullable=False)
    )
    status_id: int = Field(
        sa_column=Column(Integer, ForeignKey("request_statuses.id"), nullable=False, index=True)
    )

    # Immutable after creation
    requester_id: uuid.UUID = Field(
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    )

    # --- Assignment ---
    assigned_to_user_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True)
    )
    assigned_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))
    assigned_by_user_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    )
    assigned_description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    # --- Last status change ---
    status_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))
    status_by_user_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    )
    status_description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    # --- Approval ---
    approval_status: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    approval_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime, nullable=True))
    approval_by_user_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    )
    approval_description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))


class RequestReply(SQLModel, table=True):
    """Append-only activity entry. status_id is a snapshot taken when the reply was written."""
    __tablename__ = "request_replies"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    request_id: uuid.UUID = Field(
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("service_requests.id"), nullable=False, index=True)
    )
    user_id: uuid.UUID = Field(
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    )

    reply_datetime: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    body: str = Field(sa_column=Column(Text, nullable=False))

    status_id: int = Field(
        sa_column=Column(Integer, ForeignKey("request_statuses.id"), nullable=False)
    )
    status_by_user_id: Optional[uuid.UUID] = Field(
        default=None,
        sa_column=Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True)
    )

    is_system: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
