from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class DateRange(BaseModel):
    """Filter on request creation time. Either bound may be omitted."""
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.date_from is None and self.date_to is None


class StatsRead(BaseModel):
    total_requests: int = 0
    pending_count: int = 0
    resolved_count: int = 0
    avg_resolution_hours: float = 0.0


class TrendBucket(BaseModel):
    bucket: str
    start: datetime
    total_count: int
    resolved_count: int


class StatusCount(BaseModel):
    status_name: str
    count: int


class DepartmentCount(BaseModel):
    department_name: str
    count: int
