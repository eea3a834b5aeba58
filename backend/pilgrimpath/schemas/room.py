from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from enum import Enum
from pilgrimpath.schemas.common import check_point
from pilgrimpath.schemas.user import UserSummary

class RoomType(str, Enum):
    single = "single"
    double = "double"
    family = "family"
    dormitory = "dormitory"
    tent = "tent"

class Amenity(str, Enum):
    wifi = "wifi"
    ac = "ac"
    fan = "fan"
    bathroom = "bathroom"
    kitchen = "kitchen"
    parking = "parking"
    security = "security"
    laundry = "laundry"
    food = "food"
    water = "water"

class VerificationStatus(str, Enum):
    pending = "pending"
    verified = "verified"
    rejected = "rejected"

class Address(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    full_address: Optional[str] = None

class RoomLocationIn(BaseModel):
    coordinates: List[float] = Field(..., min_length=2, max_length=2)
    address: Optional[Address] = None
    sector: Optional[str] = None

    @field_validator("coordinates")
    @classmethod
    def check_coordinates(cls, value):
        return check_point(value)

class RoomLocationOut(BaseModel):
    type: str = "Point"
    coordinates: List[float]
    address: Optional[Address] = None
    sector: Optional[str] = None

class Capacity(BaseModel):
    adults: int = Field(..., ge=1)
    children: int = Field(0, ge=0)

class Price(BaseModel):
    per_night: float = Field(..., ge=0)
    currency: str = "INR"

class RoomImage(BaseModel):
    url: str
    filename: Optional[str] = None
    is_primary: bool = False

class Availability(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_available: bool = True

class RoomContact(BaseModel):
    phone: Optional[str] = None
    email: Optional[str] = None
    whatsapp: Optional[str] = None

class Rating(BaseModel):
    average: float
    count: int

class RoomCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=20)
    location: RoomLocationIn
    type: RoomType
    capacity: Capacity
    price: Price
    amenities: List[Amenity] = []
    images: List[RoomImage] = []
    availability: Optional[Availability] = None
    rules: List[str] = []
    contact_info: Optional[RoomContact] = None

    class Config:
        str_strip_whitespace = True

class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=5)

    class Config:
        str_strip_whitespace = True

class VerificationUpdate(BaseModel):
    verification_status: VerificationStatus

class ReviewAuthor(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class ReviewResponse(BaseModel):
    id: int
    user: ReviewAuthor
    rating: int
    comment: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True

class RoomResponse(BaseModel):
    id: int
    title: str
    description: str
    owner: UserSummary
    location: RoomLocationOut
    type: RoomType
    capacity: Capacity
    price: Price
    amenities: List[Amenity] = []
    images: List[RoomImage] = []
    availability: Optional[Availability] = None
    rules: List[str] = []
    contact_info: Optional[RoomContact] = None
    rating: Rating
    reviews: List[ReviewResponse] = []
    is_active: bool
    verification_status: VerificationStatus
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class RoomPage(BaseModel):
    rooms: List[RoomResponse]
    total_pages: int
    current_page: int
    total: int
