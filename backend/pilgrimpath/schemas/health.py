from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

class Severity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

class WaterQuality(str, Enum):
    excellent = "excellent"
    good = "good"
    fair = "fair"
    poor = "poor"

class AlertType(str, Enum):
    outbreak = "outbreak"
    sanitation = "sanitation"
    water = "water"
    medical = "medical"
    hygiene = "hygiene"

class HygieneAlertType(str, Enum):
    water = "water"
    sanitation = "sanitation"
    food = "food"
    waste = "waste"
    other = "other"

class HygieneAlertStatus(str, Enum):
    open = "open"
    in_progress = "in_progress"
    resolved = "resolved"

class DiseaseOutbreak(BaseModel):
    disease: str
    cases: int = Field(0, ge=0)
    severity: Optional[Severity] = None

class MedicalFacilities(BaseModel):
    available: Optional[int] = Field(None, ge=0)
    occupied: Optional[int] = Field(None, ge=0)
    utilization_rate: Optional[float] = None

class HygieneAlert(BaseModel):
    type: Optional[HygieneAlertType] = None
    severity: Optional[Severity] = None
    description: Optional[str] = None
    coordinates: Optional[List[float]] = Field(None, min_length=2, max_length=2)
    reported_at: Optional[datetime] = None
    status: HygieneAlertStatus = HygieneAlertStatus.open

class HealthMetrics(BaseModel):
    total_people: int = Field(0, ge=0)
    health_complaints: int = Field(0, ge=0)
    disease_outbreaks: List[DiseaseOutbreak] = []
    infection_rate: float = Field(0, ge=0, le=100)
    sanitation_score: float = Field(0, ge=0, le=100)
    water_quality: WaterQuality = WaterQuality.good
    medical_facilities: Optional[MedicalFacilities] = None
    hygiene_alerts: List[HygieneAlert] = []
    public_health_score: float = Field(0, ge=0, le=100)

class HealthAlertIn(BaseModel):
    type: Optional[AlertType] = None
    severity: Optional[Severity] = None
    message: Optional[str] = None
    timestamp: Optional[datetime] = None
    is_resolved: bool = False

class AIPredictions(BaseModel):
    next_outbreak_risk: Optional[float] = Field(None, ge=0, le=100)
    recommended_actions: List[str] = []
    confidence: Optional[float] = None

class HealthDataCreate(BaseModel):
    sector: str = Field(..., min_length=1)
    date: Optional[datetime] = None
    metrics: HealthMetrics
    alerts: List[HealthAlertIn] = []
    ai_predictions: Optional[AIPredictions] = None

    class Config:
        str_strip_whitespace = True

class HealthAlertResponse(BaseModel):
    id: int
    type: Optional[AlertType] = None
    severity: Optional[Severity] = None
    message: Optional[str] = None
    timestamp: datetime
    is_resolved: bool

    class Config:
        from_attributes = True

class HealthDataResponse(BaseModel):
    id: int
    sector: str
    date: datetime
    metrics: HealthMetrics
    alerts: List[HealthAlertResponse] = []
    ai_predictions: Optional[AIPredictions] = None
    created_at: datetime

    class Config:
        from_attributes = True

class SectorHealth(BaseModel):
    sector: str
    latest_score: Optional[float]
    avg_score: Optional[float]
    total_alerts: int
    active_alerts: int

class HealthDashboard(BaseModel):
    latest: Optional[HealthDataResponse]
    sector_data: List[SectorHealth]

class HealthTrendPoint(BaseModel):
    id: int
    sector: str
    created_at: datetime
    public_health_score: float
    infection_rate: float
    sanitation_score: float

class ActiveHealthAlert(BaseModel):
    health_data_id: int
    sector: str
    created_at: datetime
    alert: HealthAlertResponse
