from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, JSON, Index
from sqlalchemy.orm import relationship
from pilgrimpath.core.database import Base
from pilgrimpath.models.common import utcnow

BOOKING_TYPES = ("transport", "accommodation")
BOOKING_STATUSES = ("pending", "confirmed", "cancelled", "completed")

class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_user_created", "user_id", "created_at"),
        Index("ix_bookings_status_type", "status", "type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    type = Column(String, nullable=False)
    # Only the details object matching ``type`` is ever set
    transport_details = Column(JSON, nullable=True)
    accommodation_details = Column(JSON, nullable=True)
    status = Column(String, default="pending", nullable=False)
    payment = Column(JSON, nullable=True)  # {method, amount, status, transaction_id}
    special_requests = Column(Text, nullable=True)
    contact_info = Column(JSON, nullable=True)  # {name, phone, email}
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    user = relationship("User", lazy="selectin")
