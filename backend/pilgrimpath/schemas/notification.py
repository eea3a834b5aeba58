from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime
from enum import Enum

class NotificationType(str, Enum):
    alert = "alert"
    emergency = "emergency"
    info = "info"
    update = "update"

class NotificationPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

class NotificationCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    type: NotificationType
    priority: NotificationPriority
    sector: Optional[str] = None

    class Config:
        str_strip_whitespace = True

class NotificationResponse(BaseModel):
    id: int
    title: str
    message: str
    type: NotificationType
    priority: NotificationPriority
    sector: Optional[str]
    timestamp: datetime
    is_read: bool
    read_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class NotificationPage(BaseModel):
    notifications: List[NotificationResponse]
    total: int
    unread_count: int

class NotificationStats(BaseModel):
    total: int
    unread: int
    by_type: Dict[str, int]
    by_priority: Dict[str, int]
