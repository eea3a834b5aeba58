from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Float, JSON, Index
from sqlalchemy.orm import relationship
from pilgrimpath.core.database import Base
from pilgrimpath.models.common import utcnow

SEVERITIES = ("low", "medium", "high", "critical")
WATER_QUALITY = ("excellent", "good", "fair", "poor")
ALERT_TYPES = ("outbreak", "sanitation", "water", "medical", "hygiene")

class HealthData(Base):
    __tablename__ = "health_data"
    __table_args__ = (
        Index("ix_health_data_sector_date", "sector", "date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    sector = Column(String, nullable=False)
    date = Column(DateTime, default=utcnow, nullable=False)

    total_people = Column(Integer, default=0, nullable=False)
    health_complaints = Column(Integer, default=0, nullable=False)
    disease_outbreaks = Column(JSON, default=list)  # [{disease, cases, severity}]
    infection_rate = Column(Float, default=0, nullable=False)
    sanitation_score = Column(Float, default=0, nullable=False)
    water_quality = Column(String, default="good", nullable=False)
    medical_facilities = Column(JSON, nullable=True)  # {available, occupied, utilization_rate}
    hygiene_alerts = Column(JSON, default=list)
    public_health_score = Column(Float, default=0, nullable=False, index=True)

    ai_predictions = Column(JSON, nullable=True)  # {next_outbreak_risk, recommended_actions, confidence}
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    alerts = relationship(
        "HealthAlert",
        back_populates="health_data",
        order_by="HealthAlert.timestamp",
        lazy="selectin",
    )

    @property
    def metrics(self):
        return {
            "total_people": self.total_people,
            "health_complaints": self.health_complaints,
            "disease_outbreaks": self.disease_outbreaks or [],
            "infection_rate": self.infection_rate,
            "sanitation_score": self.sanitation_score,
            "water_quality": self.water_quality,
            "medical_facilities": self.medical_facilities,
            "hygiene_alerts": self.hygiene_alerts or [],
            "public_health_score": self.public_health_score,
        }

class HealthAlert(Base):
    __tablename__ = "health_alerts"

    id = Column(Integer, primary_key=True, index=True)
    health_data_id = Column(Integer, ForeignKey("health_data.id"), nullable=False, index=True)
    type = Column(String, nullable=True)
    severity = Column(String, nullable=True)
    message = Column(Text, nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False)
    is_resolved = Column(Boolean, default=False, nullable=False)

    health_data = relationship("HealthData", back_populates="alerts")
