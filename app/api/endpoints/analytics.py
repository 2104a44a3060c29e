# app/api/endpoints/analytics.py

from datetime import date
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlmodel.ext.asyncio.session import AsyncSession
from typing import List, Optional

from app.schemas.analytics import (
    DateRange,
    DepartmentCount,
    StatsRead,
    StatusCount,
    TrendBucket,
)
from app.schemas.user import CurrentUser
from app.services import analytics_service
from app.api.deps import get_db_session, get_current_user

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


def date_range_params(
    date_from: Optional[date] = Query(None, description="Inclusive, YYYY-MM-DD"),
    date_to: Optional[date] = Query(None, description="Inclusive, YYYY-MM-DD"),
) -> DateRange:
    return analytics_service.build_date_range(date_from, date_to)


# ===================================================================
# SUMMARY
# ===================================================================
@router.get("/stats", response_model=StatsRead)
async def get_stats(
    date_range: DateRange = Depends(date_range_params),
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await analytics_service.stats(session, current_user, date_range)


@router.get("/trends", response_model=List[TrendBucket])
async def get_trends(
    date_range: DateRange = Depends(date_range_params),
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await analytics_service.monthly_trends(session, current_user, date_range)


# ===================================================================
# DISTRIBUTIONS
# ===================================================================
@router.get("/status-distribution", response_model=List[StatusCount])
async def get_status_distribution(
    date_range: DateRange = Depends(date_range_params),
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await analytics_service.status_distribution(session, current_user, date_range)


@router.get("/department-load", response_model=List[DepartmentCount])
async def get_department_load(
    date_range: DateRange = Depends(date_range_params),
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    return await analytics_service.department_load(session, current_user, date_range)


# ===================================================================
# EXPORT
# ===================================================================
@router.get("/export")
async def export_requests(
    date_range: DateRange = Depends(date_range_params),
    session: AsyncSession = Depends(get_db_session),
    current_user: CurrentUser = Depends(get_current_user),
):
    content = await analytics_service.export_csv(session, current_user, date_range)
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="service-requests.csv"'},
    )
