from sqlmodel import SQLModel, Field
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from datetime import datetime
from typing import Optional

from app.core.constants import utcnow


class RequestStatus(SQLModel, table=True):
    __tablename__ = "request_statuses"

    id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True)
    )

    name: str = Field(sa_column=Column(String(64), nullable=False))
    system_name: str = Field(sa_column=Column(String(64), nullable=False, unique=True))

    # Total order of the lifecycle; lowest non-null sequence is the default status
    sequence: Optional[int] = Field(default=None, sa_column=Column(Integer, nullable=True))

    description: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    css_class: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))

    is_open: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))
    # "No further action required"
    is_terminal: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    is_allowed_for_technician: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False)
    )

    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime, nullable=False))

    def order_key(self) -> tuple:
        return (self.sequence is None, self.sequence or 0, self.id or 0)
