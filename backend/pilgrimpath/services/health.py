"""
Public-health time series per sector.

Each HealthData row is one reading for a sector; alerts hang off the reading
they were raised with.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from pilgrimpath.models.common import to_naive_utc, utcnow
from pilgrimpath.models.health import HealthAlert, HealthData
from pilgrimpath.schemas.health import (
    ActiveHealthAlert,
    HealthAlertResponse,
    HealthDashboard,
    HealthDataCreate,
    HealthDataResponse,
    HealthTrendPoint,
    SectorHealth,
)
from pilgrimpath.services.analytics import count_where

logger = logging.getLogger(__name__)


async def create_health_data(db: AsyncSession, data: HealthDataCreate) -> HealthData:
    metrics = data.metrics
    now = utcnow()
    record = HealthData(
        sector=data.sector,
        date=to_naive_utc(data.date) if data.date else now,
        total_people=metrics.total_people,
        health_complaints=metrics.health_complaints,
        disease_outbreaks=[o.model_dump(mode="json") for o in metrics.disease_outbreaks],
        infection_rate=metrics.infection_rate,
        sanitation_score=metrics.sanitation_score,
        water_quality=metrics.water_quality.value,
        medical_facilities=(
            metrics.medical_facilities.model_dump(mode="json") if metrics.medical_facilities else None
        ),
        hygiene_alerts=[a.model_dump(mode="json") for a in metrics.hygiene_alerts],
        public_health_score=metrics.public_health_score,
        ai_predictions=data.ai_predictions.model_dump(mode="json") if data.ai_predictions else None,
        alerts=[
            HealthAlert(
                type=alert.type.value if alert.type else None,
                severity=alert.severity.value if alert.severity else None,
                message=alert.message,
                timestamp=to_naive_utc(alert.timestamp) if alert.timestamp else now,
                is_resolved=alert.is_resolved,
            )
            for alert in data.alerts
        ],
    )
    db.add(record)
    await db.commit()
    logger.info("Health data %s recorded for sector %s", record.id, record.sector)

    result = await db.execute(
        select(HealthData).where(HealthData.id == record.id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def dashboard(db: AsyncSession, sector: Optional[str] = None) -> HealthDashboard:
    conditions = [HealthData.sector == sector] if sector else []

    latest = (
        await db.execute(
            select(HealthData)
            .where(*conditions)
            .order_by(HealthData.created_at.desc(), HealthData.id.desc())
            .limit(1)
        )
    ).scalar_one_or_none()

    averages = (
        await db.execute(
            select(HealthData.sector, func.avg(HealthData.public_health_score))
            .where(*conditions)
            .group_by(HealthData.sector)
            .order_by(HealthData.sector)
        )
    ).all()

    newest = (
        select(HealthData.sector, func.max(HealthData.date).label("newest"))
        .where(*conditions)
        .group_by(HealthData.sector)
        .subquery()
    )
    latest_scores = dict(
        (
            await db.execute(
                select(HealthData.sector, HealthData.public_health_score)
                .join(newest, and_(HealthData.sector == newest.c.sector, HealthData.date == newest.c.newest))
                .order_by(HealthData.id)
            )
        ).all()
    )

    alert_counts = {
        row_sector: (total, active)
        for row_sector, total, active in (
            await db.execute(
                select(
                    HealthData.sector,
                    func.count(HealthAlert.id),
                    count_where(HealthAlert.is_resolved.is_(False)),
                )
                .join(HealthAlert, HealthAlert.health_data_id == HealthData.id)
                .where(*conditions)
                .group_by(HealthData.sector)
            )
        ).all()
    }

    sector_data = []
    for row_sector, avg_score in averages:
        total_alerts, active_alerts = alert_counts.get(row_sector, (0, 0))
        sector_data.append(
            SectorHealth(
                sector=row_sector,
                latest_score=latest_scores.get(row_sector),
                avg_score=float(avg_score) if avg_score is not None else None,
                total_alerts=total_alerts,
                active_alerts=active_alerts,
            )
        )

    return HealthDashboard(
        latest=HealthDataResponse.model_validate(latest) if latest else None,
        sector_data=sector_data,
    )


async def trends(
    db: AsyncSession,
    days: int = 7,
    sector: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[HealthTrendPoint]:
    start = (now or utcnow()) - timedelta(days=days)
    conditions = [HealthData.created_at >= start]
    if sector:
        conditions.append(HealthData.sector == sector)
    rows = (
        await db.execute(
            select(
                HealthData.id,
                HealthData.sector,
                HealthData.created_at,
                HealthData.public_health_score,
                HealthData.infection_rate,
                HealthData.sanitation_score,
            )
            .where(*conditions)
            .order_by(HealthData.created_at, HealthData.id)
        )
    ).all()
    return [HealthTrendPoint(**row._mapping) for row in rows]


async def active_alerts(db: AsyncSession) -> List[ActiveHealthAlert]:
    rows = (
        await db.execute(
            select(HealthAlert, HealthData.sector, HealthData.created_at)
            .join(HealthData, HealthAlert.health_data_id == HealthData.id)
            .where(HealthAlert.is_resolved.is_(False))
            .order_by(HealthAlert.timestamp.desc(), HealthAlert.id.desc())
        )
    ).all()
    return [
        ActiveHealthAlert(
            health_data_id=alert.health_data_id,
            sector=sector,
            created_at=created_at,
            alert=HealthAlertResponse.model_validate(alert),
        )
        for alert, sector, created_at in rows
    ]
