from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, Float, JSON, Index
from sqlalchemy.orm import relationship
from pilgrimpath.core.database import Base
from pilgrimpath.models.common import utcnow

ROOM_TYPES = ("single", "double", "family", "dormitory", "tent")
ROOM_AMENITIES = ("wifi", "ac", "fan", "bathroom", "kitchen", "parking", "security", "laundry", "food", "water")
VERIFICATION_STATUSES = ("pending", "verified", "rejected")

class Room(Base):
    __tablename__ = "rooms"
    __table_args__ = (
        Index("ix_rooms_sector_active", "sector", "is_active"),
        Index("ix_rooms_price_type", "price_per_night", "type"),
    )

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    longitude = Column(Float, nullable=False)
    latitude = Column(Float, nullable=False)
    address = Column(JSON, nullable=True)  # {street, city, state, pincode, full_address}
    sector = Column(String, nullable=True)

    type = Column(String, nullable=False)
    capacity_adults = Column(Integer, nullable=False)
    capacity_children = Column(Integer, default=0, nullable=False)
    price_per_night = Column(Float, nullable=False)
    currency = Column(String, default="INR", nullable=False)
    amenities = Column(JSON, default=list)
    images = Column(JSON, default=list)  # [{url, filename, is_primary}]
    availability = Column(JSON, nullable=True)  # {start_date, end_date, is_available}
    rules = Column(JSON, default=list)
    contact_info = Column(JSON, nullable=True)  # {phone, email, whatsapp}

    rating_average = Column(Float, default=0, nullable=False)
    rating_count = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    verification_status = Column(String, default="pending", nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    owner = relationship("User", lazy="selectin")
    reviews = relationship(
        "RoomReview",
        back_populates="room",
        order_by="RoomReview.id",
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
    def capacity(self):
        return {"adults": self.capacity_adults, "children": self.capacity_children}

    @property
    def price(self):
        return {"per_night": self.price_per_night, "currency": self.currency}

    @property
    def rating(self):
        return {"average": self.rating_average, "count": self.rating_count}

class RoomReview(Base):
    __tablename__ = "room_reviews"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    room = relationship("Room", back_populates="reviews")
    user = relationship("User", lazy="selectin")
