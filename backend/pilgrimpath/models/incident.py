from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Float, JSON, Index
from sqlalchemy.orm import relationship
from pilgrimpath.core.database import Base
from pilgrimpath.models.common import utcnow

INCIDENT_CATEGORIES = ("crowding", "health", "lost_item", "safety", "sanitation", "transport", "other")
INCIDENT_PRIORITIES = ("low", "medium", "high", "critical")
INCIDENT_STATUSES = ("open", "in_progress", "resolved", "closed")

class Incident(Base):
    __tablename__ = "incidents"
    __table_args__ = (
        Index("ix_incidents_status_priority", "status", "priority"),
        Index("ix_incidents_lat_lng", "latitude", "longitude"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False)
    priority = Column(String, default="medium", nullable=False)
    status = Column(String, default="open", nullable=False)
    reporter_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    assigned_to_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Point stored as [longitude, latitude]
    longitude = Column(Float, nullable=False)
    latitude = Column(Float, nullable=False)
    address = Column(String, nullable=True)
    sector = Column(String, nullable=True, index=True)

    media = Column(JSON, default=list)  # [{type, url, filename}]
    tags = Column(JSON, default=list)
    estimated_crowd_size = Column(Integer, nullable=True)

    reported_at = Column(DateTime, default=utcnow, nullable=False)
    first_response_at = Column(DateTime, nullable=True)
    resolved_at = Column(DateTime, nullable=True)

    is_emergency = Column(Boolean, default=False, nullable=False)
    ai_detected = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    reporter = relationship("User", foreign_keys=[reporter_id], lazy="selectin")
    assigned_to = relationship("User", foreign_keys=[assigned_to_id], lazy="selectin")
    notes = relationship(
        "IncidentNote",
        back_populates="incident",
        order_by="IncidentNote.id",
        lazy="selectin",
    )

    @property
    def location(self):
        return {
            "type": "Point",
            "coordinates": [self.longitude, self.latitude],
            "address": self.address,
            "sector": self.sector,
        }

    @property
    def response_time(self):
        return {
            "reported": self.reported_at,
            "first_response": self.first_response_at,
            "resolved": self.resolved_at,
        }

class IncidentNote(Base):
    __tablename__ = "incident_notes"

    id = Column(Integer, primary_key=True, index=True)
    incident_id = Column(Integer, ForeignKey("incidents.id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    timestamp = Column(DateTime, default=utcnow, nullable=False)

    incident = relationship("Incident", back_populates="notes")
    author = relationship("User", lazy="selectin")
