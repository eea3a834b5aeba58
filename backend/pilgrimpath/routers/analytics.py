from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from pilgrimpath.core.database import get_db
from pilgrimpath.models.user import User
from pilgrimpath.routers.auth import require_admin
from pilgrimpath.schemas.analytics import (
    AIComparisonRow,
    AnalyticsOverview,
    Granularity,
    TimeSeriesBucket,
)
from pilgrimpath.services import analytics

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

@router.get("/overview", response_model=AnalyticsOverview)
async def get_overview(
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return await analytics.dashboard(db, start_date, end_date)

@router.get("/timeseries", response_model=List[TimeSeriesBucket])
async def get_time_series(
    days: int = Query(7, ge=1, le=365),
    group_by: Granularity = Granularity.day,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return await analytics.time_series(db, days=days, granularity=group_by)

@router.get("/ai-comparison", response_model=List[AIComparisonRow])
async def get_ai_comparison(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return await analytics.ai_comparison(db)
