from pydantic import BaseModel, Field, EmailStr
from typing import Optional
from datetime import datetime

class UserRegister(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)
    phone: Optional[str] = None
    language: str = "en"

class Token(BaseModel):
    access_token: str
    token_type: str

class UserSummary(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None

    class Config:
        from_attributes = True

class UserProfile(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str]
    role: str
    language: Optional[str]
    is_active: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
