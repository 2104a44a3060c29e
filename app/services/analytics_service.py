# app/services/analytics_service.py

import csv
import io
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.constants import (
    CSV_HEADER,
    DAILY_BUCKET_MAX_DAYS,
    DEFAULT_TREND_MONTHS,
    UNASSIGNED_DEPARTMENT,
    utcnow,
)
from app.core.rbac import Action, require
from app.models.department import Department
from app.models.request_type import RequestType
from app.models.service_request import ServiceRequest
from app.models.status import RequestStatus
from app.models.user import User
from app.schemas.analytics import (
    DateRange,
    DepartmentCount,
    StatsRead,
    StatusCount,
    TrendBucket,
)

CSV_DATE_FORMAT = "%Y-%m-%d %H:%M"
CSV_NO_DEPARTMENT = "N/A"


# ============================================================================
# DATE RANGE HELPERS
# ============================================================================
def build_date_range(date_from: Optional[date] = None, date_to: Optional[date] = None) -> DateRange:
    """Whole days: `date_from` from midnight, `date_to` through the last microsecond."""
    return DateRange(
        date_from=datetime.combine(date_from, time.min) if date_from else None,
        date_to=datetime.combine(date_to, time.max) if date_to else None,
    )


def _filter_range(query, date_range: Optional[DateRange]):
    if date_range is None:
        return query
    if date_range.date_from is not None:
        query = query.where(ServiceRequest.request_datetime >= date_range.date_from)
    if date_range.date_to is not None:
        query = query.where(ServiceRequest.request_datetime <= date_range.date_to)
    return query


def _month_start(value: datetime) -> datetime:
    return datetime(value.year, value.month, 1)


def _add_months(value: datetime, months: int) -> datetime:
    index = value.year * 12 + (value.month - 1) + months
    return datetime(index // 12, index % 12 + 1, 1)


def trend_window(date_range: Optional[DateRange], now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """Resolve the (start, end) window for trends; defaults to the trailing months."""
    now = now or utcnow()
    date_from = date_range.date_from if date_range else None
    date_to = date_range.date_to if date_range else None

    end = date_to or datetime.combine(
        (_add_months(now, 1) - timedelta(days=1)).date(), time.max
    )
    start = date_from or _add_months(_month_start(end), -(DEFAULT_TREND_MONTHS - 1))
    return start, end


def build_buckets(start: datetime, end: datetime) -> list[tuple[str, datetime, object]]:
    """(label, bucket start, key) triples; daily when the window is short, else monthly."""
    first_day, last_day = start.date(), end.date()
    span_days = (last_day - first_day).days + 1

    buckets = []
    if span_days <= DAILY_BUCKET_MAX_DAYS:
        for offset in range(span_days):
            day = first_day + timedelta(days=offset)
            buckets.append((f"{day:%b} {day.day}", datetime.combine(day, time.min), day))
        return buckets

    cursor = _month_start(start)
    while cursor <= end:
        buckets.append((f"{cursor:%b %Y}", cursor, (cursor.year, cursor.month)))
        cursor = _add_months(cursor, 1)
    return buckets


# ============================================================================
# STATS
# ============================================================================
async def stats(session: AsyncSession, actor, date_range: Optional[DateRange] = None) -> StatsRead:
    require(actor, Action.ViewAnalytics)

    query = _filter_range(
        select(
            ServiceRequest.request_datetime,
            ServiceRequest.status_at,
            RequestStatus.is_open,
            RequestStatus.is_terminal,
        ).join(RequestStatus, RequestStatus.id == ServiceRequest.status_id),
        date_range,
    )
    rows = (await session.execute(query)).all()

    pending = 0
    resolved = 0
    durations = []
    for created_at, status_at, is_open, is_terminal in rows:
        if is_terminal:
            resolved += 1
            if status_at is not None:
                durations.append((status_at - created_at).total_seconds() / 3600)
        elif is_open:
            pending += 1

    avg_hours = round(sum(durations) / len(durations), 1) if durations else 0.0

    return StatsRead(
        total_requests=len(rows),
        pending_count=pending,
        resolved_count=resolved,
        avg_resolution_hours=avg_hours,
    )


# ============================================================================
# TRENDS
# ============================================================================
async def monthly_trends(
    session: AsyncSession,
    actor,
    date_range: Optional[DateRange] = None,
) -> list[TrendBucket]:
    require(actor, Action.ViewAnalytics)

    start, end = trend_window(date_range)
    buckets = build_buckets(start, end)
    daily = bool(buckets) and isinstance(buckets[0][2], date)

    query = (
        select(ServiceRequest.request_datetime, RequestStatus.is_terminal)
        .join(RequestStatus, RequestStatus.id == ServiceRequest.status_id)
        .where(ServiceRequest.request_datetime >= start)
        .where(ServiceRequest.request_datetime <= end)
    )
    rows = (await session.execute(query)).all()

    totals: dict = {}
    resolved: dict = {}
    for created_at, is_terminal in rows:
        key = created_at.date() if daily else (created_at.year, created_at.month)
        totals[key] = totals.get(key, 0) + 1
        if is_terminal:
            resolved[key] = resolved.get(key, 0) + 1

    return [
        TrendBucket(
            bucket=label,
            start=bucket_start,
            total_count=totals.get(key, 0),
            resolved_count=resolved.get(key, 0),
        )
        for label, bucket_start, key in buckets
    ]


# ============================================================================
# DISTRIBUTIONS
# ============================================================================
async def status_distribution(
    session: AsyncSession,
    actor,
    date_range: Optional[DateRange] = None,
) -> list[StatusCount]:
    require(actor, Action.ViewAnalytics)

    query = _filter_range(
        select(RequestStatus.name, func.count(ServiceRequest.id))
        .join(RequestStatus, RequestStatus.id == ServiceRequest.status_id)
        .group_by(RequestStatus.id, RequestStatus.name)
        .order_by(func.count(ServiceRequest.id).desc(), RequestStatus.name.asc()),
        date_range,
    )
    result = await session.execute(query)
    return [StatusCount(status_name=name, count=count) for name, count in result.all()]


async def department_load(
    session: AsyncSession,
    actor,
    date_range: Optional[DateRange] = None,
) -> list[DepartmentCount]:
    require(actor, Action.ViewAnalytics)

    query = _filter_range(
        select(Department.name, func.count(ServiceRequest.id))
        .select_from(ServiceRequest)
        .join(RequestType, RequestType.id == ServiceRequest.request_type_id)
        .join(Department, Department.id == RequestType.department_id, isouter=True)
        .group_by(Department.name),
        date_range,
    )
    result = await session.execute(query)

    counts: dict[str, int] = {}
    for name, count in result.all():
        label = name or UNASSIGNED_DEPARTMENT
        counts[label] = counts.get(label, 0) + count

    return [
        DepartmentCount(department_name=name, count=count)
        for name, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    ]


# ============================================================================
# CSV EXPORT
# ============================================================================
async def export_csv(session: AsyncSession, actor, date_range: Optional[DateRange] = None) -> str:
    require(actor, Action.ViewAnalytics)

    query = _filter_range(
        select(
            ServiceRequest.request_no,
            ServiceRequest.title,
            ServiceRequest.request_datetime,
            RequestStatus.name,
            ServiceRequest.priority,
            Department.name,
            User.name,
        )
        .select_from(ServiceRequest)
        .join(RequestStatus, RequestStatus.id == ServiceRequest.status_id)
        .join(RequestType, RequestType.id == ServiceRequest.request_type_id)
        .join(Department, Department.id == RequestType.department_id, isouter=True)
        .join(User, User.id == ServiceRequest.requester_id)
        .order_by(ServiceRequest.request_datetime.desc()),
        date_range,
    )
    result = await session.execute(query)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for request_no, title, created_at, status_name, priority, department, requester in result.all():
        writer.writerow([
            request_no,
            title,
            created_at.strftime(CSV_DATE_FORMAT),
            status_name,
            priority,
            department or CSV_NO_DEPARTMENT,
            requester,
        ])
    return buffer.getvalue()
