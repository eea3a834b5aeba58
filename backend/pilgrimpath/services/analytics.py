"""
Read-only rollups over incidents for dashboards.

Each function builds one GROUP BY query and maps its rows onto typed result
models. Nothing is cached. Averages ignore rows where an input timestamp is
missing instead of counting them as zero; an empty set gives ``None`` for
averages, ``0`` for counts and ``0.0`` for rates.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import and_, case, extract, func, literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession

from pilgrimpath.models.common import to_naive_utc, utcnow
from pilgrimpath.models.incident import Incident
from pilgrimpath.schemas.analytics import (
    AIComparisonRow,
    AnalyticsOverview,
    CategoryStat,
    Granularity,
    OverviewStats,
    SectorStat,
    StatusCount,
    TimeSeriesBucket,
)
from pilgrimpath.schemas.incident import IncidentStats

# Formats are rendered inline so SELECT and GROUP BY carry the same expression
SQLITE_BUCKETS = {
    Granularity.hour: "'%Y-%m-%d %H:00'",
    Granularity.day: "'%Y-%m-%d'",
    Granularity.week: "'%Y-W%W'",
}

POSTGRES_BUCKETS = {
    Granularity.hour: "'YYYY-MM-DD HH24:00'",
    Granularity.day: "'YYYY-MM-DD'",
    Granularity.week: "'IYYY-\"W\"IW'",
}


def _dialect(db: AsyncSession) -> str:
    return db.bind.dialect.name


def seconds_between(start, end, dialect: str):
    if dialect == "postgresql":
        return extract("epoch", end - start)
    return (func.julianday(end) - func.julianday(start)) * literal_column("86400.0")


def response_seconds(dialect: str):
    """Report-to-first-response duration, NULL unless both timestamps are set."""
    return case(
        (
            and_(Incident.first_response_at.isnot(None), Incident.reported_at.isnot(None)),
            seconds_between(Incident.reported_at, Incident.first_response_at, dialect),
        ),
        else_=None,
    )


def count_where(condition):
    return func.coalesce(func.sum(case((condition, literal_column("1")), else_=literal_column("0"))), 0)


def _seconds(value) -> Optional[float]:
    # Millisecond precision absorbs floating point noise from date arithmetic
    return None if value is None else round(float(value), 3)


def _created_between(start_date: Optional[datetime], end_date: Optional[datetime]):
    conditions = []
    if start_date is not None:
        conditions.append(Incident.created_at >= to_naive_utc(start_date))
    if end_date is not None:
        conditions.append(Incident.created_at <= to_naive_utc(end_date))
    return conditions


async def overview(
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> OverviewStats:
    stmt = select(
        func.count(Incident.id),
        count_where(Incident.status == "resolved"),
        count_where(Incident.priority == "critical"),
        count_where(Incident.is_emergency.is_(True)),
        count_where(Incident.ai_detected.is_(True)),
        func.avg(response_seconds(_dialect(db))),
    ).where(*_created_between(start_date, end_date))
    total, resolved, critical, emergency, ai_detected, avg_response = (
        await db.execute(stmt)
    ).one()
    return OverviewStats(
        total_incidents=total,
        resolved_incidents=resolved,
        critical_incidents=critical,
        emergency_incidents=emergency,
        ai_detected_incidents=ai_detected,
        avg_response_time=_seconds(avg_response),
    )


async def by_category(
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[CategoryStat]:
    count = func.count(Incident.id).label("count")
    stmt = (
        select(Incident.category, count, func.avg(response_seconds(_dialect(db))))
        .where(*_created_between(start_date, end_date))
        .group_by(Incident.category)
        .order_by(count.desc(), Incident.category)
    )
    rows = (await db.execute(stmt)).all()
    return [
        CategoryStat(category=category, count=n, avg_response_time=_seconds(avg))
        for category, n, avg in rows
    ]


async def by_sector(
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> List[SectorStat]:
    count = func.count(Incident.id).label("count")
    stmt = (
        select(Incident.sector, count, count_where(Incident.priority == "critical"))
        .where(Incident.sector.isnot(None), *_created_between(start_date, end_date))
        .group_by(Incident.sector)
        .order_by(count.desc(), Incident.sector)
    )
    rows = (await db.execute(stmt)).all()
    return [
        SectorStat(sector=sector, count=n, critical_count=critical)
        for sector, n, critical in rows
    ]


async def dashboard(
    db: AsyncSession,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> AnalyticsOverview:
    return AnalyticsOverview(
        overview=await overview(db, start_date, end_date),
        category_stats=await by_category(db, start_date, end_date),
        sector_stats=await by_sector(db, start_date, end_date),
    )


def _bucket(granularity: Granularity, dialect: str):
    granularity = Granularity(granularity)
    if dialect == "postgresql":
        return func.to_char(Incident.created_at, literal_column(POSTGRES_BUCKETS[granularity]))
    return func.strftime(literal_column(SQLITE_BUCKETS[granularity]), Incident.created_at)


async def time_series(
    db: AsyncSession,
    days: int = 7,
    granularity: Granularity = Granularity.day,
    now: Optional[datetime] = None,
) -> List[TimeSeriesBucket]:
    start = (now or utcnow()) - timedelta(days=days)
    bucket = _bucket(granularity, _dialect(db)).label("bucket")
    stmt = (
        select(bucket, Incident.status, func.count(Incident.id))
        .where(Incident.created_at >= start)
        .group_by(bucket, Incident.status)
        .order_by(bucket, Incident.status)
    )
    series: List[TimeSeriesBucket] = []
    for label, incident_status, n in (await db.execute(stmt)).all():
        if not series or series[-1].bucket != label:
            series.append(TimeSeriesBucket(bucket=label, data=[]))
        series[-1].data.append(StatusCount(status=incident_status, count=n))
    return series


async def ai_comparison(db: AsyncSession) -> List[AIComparisonRow]:
    stmt = select(
        Incident.ai_detected,
        func.count(Incident.id),
        func.avg(response_seconds(_dialect(db))),
        func.avg(case((Incident.status == "resolved", literal_column("1.0")), else_=literal_column("0.0"))),
    ).group_by(Incident.ai_detected)
    groups = {
        bool(flag): (n, avg_response, rate)
        for flag, n, avg_response, rate in (await db.execute(stmt)).all()
    }

    rows = []
    for flag in (False, True):
        n, avg_response, rate = groups.get(flag, (0, None, None))
        rows.append(
            AIComparisonRow(
                ai_detected=flag,
                count=n,
                avg_response_time=_seconds(avg_response),
                resolution_rate=float(rate) if rate is not None else 0.0,
            )
        )
    return rows


async def incident_stats(db: AsyncSession) -> IncidentStats:
    resolution = case(
        (
            Incident.resolved_at.isnot(None),
            seconds_between(Incident.reported_at, Incident.resolved_at, _dialect(db)),
        ),
        else_=None,
    )
    stmt = select(
        func.count(Incident.id),
        count_where(Incident.status == "open"),
        count_where(Incident.status == "in_progress"),
        count_where(Incident.status == "resolved"),
        count_where(Incident.status == "closed"),
        count_where(Incident.priority == "critical"),
        count_where(Incident.is_emergency.is_(True)),
        func.avg(resolution),
    )
    total, open_, in_progress, resolved, closed, critical, emergency, avg_resolution = (
        await db.execute(stmt)
    ).one()
    return IncidentStats(
        total=total,
        open=open_,
        in_progress=in_progress,
        resolved=resolved,
        closed=closed,
        critical=critical,
        emergency=emergency,
        avg_resolution_time=_seconds(avg_resolution),
    )
