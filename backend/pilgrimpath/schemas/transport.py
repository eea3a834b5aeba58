from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from pilgrimpath.schemas.booking import ContactInfo

class Stop(BaseModel):
    name: str
    coordinates: List[float]

class TransportRouteInfo(BaseModel):
    id: int
    name: str
    type: str
    from_: Stop = Field(..., alias="from")
    to: Stop
    duration: int  # minutes
    price: float
    capacity: int
    frequency: str
    status: str

    class Config:
        populate_by_name = True

class TransportBookingCreate(BaseModel):
    route_id: int = Field(..., ge=1)
    scheduled_time: datetime
    passengers: int = Field(..., ge=1)
    contact_info: ContactInfo
    special_requests: Optional[str] = None
