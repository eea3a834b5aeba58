from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean
from pilgrimpath.core.database import Base
from pilgrimpath.models.common import utcnow

NOTIFICATION_TYPES = ("alert", "emergency", "info", "update")
NOTIFICATION_PRIORITIES = ("low", "medium", "high", "critical")

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String, nullable=False)
    priority = Column(String, nullable=False)
    sector = Column(String, nullable=True)
    timestamp = Column(DateTime, default=utcnow, nullable=False, index=True)
    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
