"""
Connect Vida - Event Schemas
"""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class EventCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=255)
    starts_at: datetime
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    type: str = Field("evento", max_length=50)
    cover_image: Optional[str] = Field(None, max_length=500)
    external_link: Optional[str] = Field(None, max_length=500)
    fee: float = Field(0, ge=0)
    capacity: Optional[int] = Field(None, ge=1)
    registration_open: bool = True


class EventUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    starts_at: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    type: Optional[str] = Field(None, max_length=50)
    cover_image: Optional[str] = Field(None, max_length=500)
    external_link: Optional[str] = Field(None, max_length=500)
    fee: Optional[float] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=1)


class RegistrationToggle(BaseModel):
    registration_open: bool


class AttendanceUpdate(BaseModel):
    attended: bool
