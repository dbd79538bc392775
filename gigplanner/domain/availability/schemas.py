"""Availability domain schemas"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field


class AvailabilityUpdate(BaseModel):
    dates: list[dt.date] = Field(..., min_length=1)
    isAvailable: bool


class AvailabilityEntry(BaseModel):
    date: dt.date
    isAvailable: bool


class AvailabilityCalendarResponse(BaseModel):
    musicianId: int
    month: int
    year: int
    availability: list[AvailabilityEntry]


class AvailabilityUpdateResult(BaseModel):
    success: bool = True
    updatedDates: int
    musicianId: int


class ShareLinkCreate(BaseModel):
    expiryDays: Optional[int] = Field(None, ge=1, le=365)  # Default AVAILABILITY_LINK_TTL_DAYS


class ShareLinkResponse(BaseModel):
    id: int
    token: str
    shareLink: str
    expiryDate: Optional[dt.datetime] = None
    createdAt: Optional[dt.datetime] = None
    lastAccessedAt: Optional[dt.datetime] = None
    isExpired: bool = False


class PublicMusicianSummary(BaseModel):
    id: int
    name: str


class PublicBooking(BaseModel):
    date: dt.date
    venueName: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None


class PublicCalendar(BaseModel):
    month: int
    year: int
    availability: list[AvailabilityEntry]
    bookings: list[PublicBooking]


class PublicAvailabilityResponse(BaseModel):
    musician: PublicMusicianSummary
    calendar: PublicCalendar
