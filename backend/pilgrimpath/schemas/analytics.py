from pydantic import BaseModel
from typing import List, Optional
from enum import Enum

class Granularity(str, Enum):
    hour = "hour"
    day = "day"
    week = "week"

class OverviewStats(BaseModel):
    total_incidents: int
    resolved_incidents: int
    critical_incidents: int
    emergency_incidents: int
    ai_detected_incidents: int
    # Seconds between report and first response; None when nothing qualifies
    avg_response_time: Optional[float]

class CategoryStat(BaseModel):
    category: str
    count: int
    avg_response_time: Optional[float]

class SectorStat(BaseModel):
    sector: str
    count: int
    critical_count: int

class AnalyticsOverview(BaseModel):
    overview: OverviewStats
    category_stats: List[CategoryStat]
    sector_stats: List[SectorStat]

class StatusCount(BaseModel):
    status: str
    count: int

class TimeSeriesBucket(BaseModel):
    bucket: str
    data: List[StatusCount]

class AIComparisonRow(BaseModel):
    ai_detected: bool
    count: int
    avg_response_time: Optional[float]
    resolution_rate: float
