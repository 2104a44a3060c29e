# app/models/user.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import DateTime, ForeignKey, Integer, String, Uuid
from datetime import datetime
import uuid
from typing import Optional

from app.core.constants import utcnow
from app.models.enums import UserRole


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid(as_uuid=True), primary_key=True)
    )

    name: str = Field(sa_column=Column(String(255), nullable=False))
    email: str = Field(
        sa_column=Column(String(255), nullable=False, index=True, unique=True)
    )
    password_hash: str = Field(sa_column=Column(String(255), nullable=False))

    avatar_url: Optional[str] = Field(
        default=None,
        sa_column=Column(String, nullable=True)
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False)
    )


class RoleAssignment(SQLModel, table=True):
    """
    One role per user. The value is stored as plain text and mapped onto
    UserRole when read, so stray values degrade to 'requestor'.
    """
    __tablename__ = "user_roles"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    user_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid(as_uuid=True),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        )
    )

    role: str = Field(
        default=UserRole.Requestor.value,
        sa_column=Column(String(32), nullable=False)
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime, nullable=False)
    )
