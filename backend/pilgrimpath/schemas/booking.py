from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from enum import Enum

PHONE_PATTERN = r"^\+?[0-9][0-9 \-]{6,18}[0-9]$"

class BookingType(str, Enum):
    transport = "transport"
    accommodation = "accommodation"

class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"

class VehicleType(str, Enum):
    shuttle = "shuttle"
    e_rickshaw = "e_rickshaw"
    bus = "bus"

class PaymentMethod(str, Enum):
    cash = "cash"
    card = "card"
    upi = "upi"
    wallet = "wallet"

class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    refunded = "refunded"

class Place(BaseModel):
    name: str
    coordinates: Optional[List[float]] = Field(None, min_length=2, max_length=2)

class TransportRoute(BaseModel):
    from_: Optional[Place] = Field(None, alias="from")
    to: Optional[Place] = None

    class Config:
        populate_by_name = True

class TransportDetails(BaseModel):
    vehicle_type: Optional[VehicleType] = None
    route: Optional[TransportRoute] = None
    scheduled_time: Optional[datetime] = None
    estimated_duration: Optional[int] = Field(None, ge=0)  # minutes
    capacity: Optional[int] = Field(None, ge=1)
    passengers: Optional[int] = Field(None, ge=1)
    price: Optional[float] = Field(None, ge=0)

class AccommodationDetails(BaseModel):
    room_id: Optional[int] = None
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    guests: Optional[int] = Field(None, ge=1)
    price: Optional[float] = Field(None, ge=0)
    amenities: List[str] = []

class Payment(BaseModel):
    method: Optional[PaymentMethod] = None
    amount: Optional[float] = Field(None, ge=0)
    status: PaymentStatus = PaymentStatus.pending
    transaction_id: Optional[str] = None

class ContactInfo(BaseModel):
    name: str = Field(..., min_length=2)
    phone: str = Field(..., pattern=PHONE_PATTERN)
    email: Optional[str] = None

    class Config:
        str_strip_whitespace = True

class BookingCreate(BaseModel):
    type: BookingType
    transport_details: Optional[TransportDetails] = None
    accommodation_details: Optional[AccommodationDetails] = None
    payment: Optional[Payment] = None
    special_requests: Optional[str] = None
    contact_info: ContactInfo

class BookingStatusUpdate(BaseModel):
    status: BookingStatus

class BookingResponse(BaseModel):
    id: int
    user_id: int
    type: BookingType
    transport_details: Optional[TransportDetails] = None
    accommodation_details: Optional[AccommodationDetails] = None
    status: BookingStatus
    payment: Optional[Payment] = None
    special_requests: Optional[str] = None
    contact_info: Optional[ContactInfo] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        populate_by_name = True

class BookingPage(BaseModel):
    bookings: List[BookingResponse]
    total_pages: int
    current_page: int
    total: int
