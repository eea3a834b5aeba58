from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from pilgrimpath.core.database import get_db
from pilgrimpath.models.user import User
from pilgrimpath.routers.auth import get_current_user, require_admin
from pilgrimpath.schemas.health import (
    ActiveHealthAlert,
    HealthDashboard,
    HealthDataCreate,
    HealthDataResponse,
    HealthTrendPoint,
)
from pilgrimpath.services import health as health_service

router = APIRouter(prefix="/api/health", tags=["health"])

@router.post("", response_model=HealthDataResponse, status_code=status.HTTP_201_CREATED)
async def create_health_data(
    data: HealthDataCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return await health_service.create_health_data(db, data)

@router.get("/dashboard", response_model=HealthDashboard)
async def get_health_dashboard(
    sector: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return await health_service.dashboard(db, sector)

@router.get("/trends", response_model=List[HealthTrendPoint])
async def get_health_trends(
    days: int = Query(7, ge=1, le=365),
    sector: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    return await health_service.trends(db, days=days, sector=sector)

@router.get("/alerts", response_model=List[ActiveHealthAlert])
async def get_health_alerts(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await health_service.active_alerts(db)
