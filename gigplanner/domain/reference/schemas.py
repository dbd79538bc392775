"""Reference data schemas - venues, categories, musicians and pay rates"""

from typing import Optional

from pydantic import BaseModel, Field


class VenueCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    location: Optional[str] = None
    address: Optional[str] = None
    paxCount: Optional[int] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=0)
    openingHours: Optional[str] = None
    description: Optional[str] = Field(None, max_length=5000)


class VenueUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = None
    address: Optional[str] = None
    paxCount: Optional[int] = Field(None, ge=0)
    capacity: Optional[int] = Field(None, ge=0)
    openingHours: Optional[str] = None
    description: Optional[str] = Field(None, max_length=5000)


class VenueResponse(BaseModel):
    id: int
    name: str
    location: Optional[str] = None
    address: Optional[str] = None
    paxCount: Optional[int] = None
    capacity: Optional[int] = None
    openingHours: Optional[str] = None
    description: Optional[str] = None


class CategoryCreate(BaseModel):
    """Used for both musician categories and event categories"""

    title: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)


class CategoryUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=5000)


class CategoryResponse(BaseModel):
    id: int
    title: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class MusicianCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = None
    phone: Optional[str] = None
    categoryId: Optional[int] = None
    payRate: Optional[float] = Field(None, ge=0)
    instruments: list[str] = []
    bio: Optional[str] = Field(None, max_length=5000)


class MusicianUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = None
    phone: Optional[str] = None
    categoryId: Optional[int] = None
    payRate: Optional[float] = Field(None, ge=0)
    instruments: Optional[list[str]] = None
    bio: Optional[str] = Field(None, max_length=5000)


class MusicianResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    categoryId: Optional[int] = None
    categoryTitle: Optional[str] = None
    payRate: Optional[float] = None
    instruments: list[str] = []
    bio: Optional[str] = None


class PayRateCreate(BaseModel):
    musicianId: int
    eventCategoryId: int
    hourlyRate: Optional[float] = Field(None, ge=0)
    dayRate: Optional[float] = Field(None, ge=0)
    eventRate: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=5000)


class PayRateUpdate(BaseModel):
    hourlyRate: Optional[float] = Field(None, ge=0)
    dayRate: Optional[float] = Field(None, ge=0)
    eventRate: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=5000)


class PayRateResponse(BaseModel):
    id: int
    musicianId: int
    eventCategoryId: int
    hourlyRate: Optional[float] = None
    dayRate: Optional[float] = None
    eventRate: Optional[float] = None
    notes: Optional[str] = None
