from sqlmodel import SQLModel, Field
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from datetime import datetime
from typing import Optional

from app.core.constants import utcnow


class ServiceType(SQLModel, table=True):
    __tablename__ = "service_types"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    name: str = Field(sa_column=Column(String(128), nullable=False))
    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    sequence: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))

    is_for_staff: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))
    is_for_student: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
