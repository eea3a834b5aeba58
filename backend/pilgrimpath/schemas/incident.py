from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime
from enum import Enum
from pilgrimpath.schemas.common import check_point
from pilgrimpath.schemas.user import UserSummary

class IncidentCategory(str, Enum):
    crowding = "crowding"
    health = "health"
    lost_item = "lost_item"
    safety = "safety"
    sanitation = "sanitation"
    transport = "transport"
    other = "other"

class IncidentPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

class IncidentStatus(str, Enum):
    open = "open"
    in_progress = "in_progress"
    resolved = "resolved"
    closed = "closed"

class MediaType(str, Enum):
    image = "image"
    video = "video"

class IncidentSortField(str, Enum):
    created_at = "created_at"
    updated_at = "updated_at"
    priority = "priority"
    status = "status"
    title = "title"

class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"

class Media(BaseModel):
    type: MediaType
    url: str
    filename: Optional[str] = None

class LocationIn(BaseModel):
    # [longitude, latitude]
    coordinates: List[float] = Field(..., min_length=2, max_length=2)
    address: Optional[str] = None
    sector: Optional[str] = None

    @field_validator("coordinates")
    @classmethod
    def check_coordinates(cls, value):
        return check_point(value)

class IncidentCreate(BaseModel):
    title: str = Field(..., min_length=5, max_length=200)
    description: str = Field(..., min_length=10)
    category: IncidentCategory
    priority: IncidentPriority = IncidentPriority.medium
    location: LocationIn
    media: List[Media] = []
    tags: List[str] = []
    estimated_crowd_size: Optional[int] = Field(None, ge=0)
    is_emergency: bool = False
    ai_detected: bool = False

    class Config:
        str_strip_whitespace = True

class IncidentStatusUpdate(BaseModel):
    status: IncidentStatus
    assigned_to: Optional[int] = None

class NoteCreate(BaseModel):
    text: str = Field(..., min_length=1)

    class Config:
        str_strip_whitespace = True

class LocationOut(BaseModel):
    type: str = "Point"
    coordinates: List[float]
    address: Optional[str] = None
    sector: Optional[str] = None

class ResponseTime(BaseModel):
    reported: datetime
    first_response: Optional[datetime] = None
    resolved: Optional[datetime] = None

class NoteAuthor(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True

class NoteResponse(BaseModel):
    id: int
    text: str
    author: NoteAuthor
    timestamp: datetime

    class Config:
        from_attributes = True

class IncidentResponse(BaseModel):
    id: int
    title: str
    description: str
    category: IncidentCategory
    priority: IncidentPriority
    status: IncidentStatus
    reporter: UserSummary
    assigned_to: Optional[UserSummary] = None
    location: LocationOut
    media: List[Media] = []
    tags: List[str] = []
    estimated_crowd_size: Optional[int] = None
    response_time: ResponseTime
    notes: List[NoteResponse] = []
    is_emergency: bool
    ai_detected: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class NearbyIncident(IncidentResponse):
    distance: float

class IncidentPage(BaseModel):
    incidents: List[IncidentResponse]
    total_pages: int
    current_page: int
    total: int

class IncidentStats(BaseModel):
    total: int
    open: int
    in_progress: int
    resolved: int
    closed: int
    critical: int
    emergency: int
    avg_resolution_time: Optional[float]
