"""Planner domain schemas - planners, slots and assignments"""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field


# ============================================================================
# PLANNERS
# ============================================================================


class PlannerCreate(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=2000, le=2100)
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)


class PlannerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)


class PlannerResponse(BaseModel):
    id: int
    month: int
    year: int
    name: str
    description: Optional[str] = None
    status: str
    slotCount: int = 0
    assignmentCount: int = 0
    createdAt: Optional[dt.datetime] = None
    updatedAt: Optional[dt.datetime] = None


class FinalizeResponse(BaseModel):
    planner: PlannerResponse
    notified: int = 0
    emailEnabled: bool = False


# ============================================================================
# ASSIGNMENTS
# ============================================================================


class AssignmentCreate(BaseModel):
    """
    Assign a musician to a slot.

    Either slotId, or plannerId + venueId + date; in the second form the slot
    is created on first assignment.
    """

    musicianId: int
    slotId: Optional[int] = None
    plannerId: Optional[int] = None
    venueId: Optional[int] = None
    date: Optional[dt.date] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    duration: Optional[float] = Field(None, gt=0, le=24)
    eventCategoryId: Optional[int] = None
    actualFee: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=5000)


class AssignmentUpdate(BaseModel):
    musicianId: Optional[int] = None
    status: Optional[str] = None
    # > 0 sets a manual override, 0 clears it and restores the computed fee
    actualFee: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=5000)


class AttendanceRequest(BaseModel):
    status: Literal["attended", "absent"]
    notes: Optional[str] = Field(None, max_length=5000)


class AssignmentResponse(BaseModel):
    id: int
    slotId: int
    plannerId: int
    musicianId: int
    musicianName: Optional[str] = None
    venueId: int
    venueName: Optional[str] = None
    date: dt.date
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    status: str
    actualFee: Optional[float] = None
    feeOverridden: bool = False
    notes: Optional[str] = None
    assignedAt: Optional[dt.datetime] = None
    attendanceMarkedAt: Optional[dt.datetime] = None


class FeeBreakdownResponse(BaseModel):
    assignmentId: int
    amount: float
    rule: str
    hours: Optional[float] = None
    hourlyRate: Optional[float] = None
    feeOverridden: bool = False


class MusicianScheduleResponse(BaseModel):
    musicianId: int
    musicianName: str
    slotCount: int
    totalFee: float
    assignments: list[AssignmentResponse]


# ============================================================================
# SLOTS
# ============================================================================


class SlotCreate(BaseModel):
    plannerId: int
    venueId: int
    date: dt.date
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    duration: Optional[float] = Field(None, gt=0, le=24)
    eventCategoryId: Optional[int] = None
    description: Optional[str] = Field(None, max_length=5000)


class SlotUpdate(BaseModel):
    venueId: Optional[int] = None
    date: Optional[dt.date] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    duration: Optional[float] = Field(None, ge=0, le=24)
    eventCategoryId: Optional[int] = None
    status: Optional[str] = None
    description: Optional[str] = Field(None, max_length=5000)


class SlotResponse(BaseModel):
    id: int
    plannerId: int
    venueId: int
    venueName: Optional[str] = None
    eventCategoryId: Optional[int] = None
    date: dt.date
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    duration: Optional[float] = None
    status: str
    description: Optional[str] = None
    assignments: list[AssignmentResponse] = []
    feesRecalculated: int = 0


class PlannerDetailResponse(PlannerResponse):
    slots: list[SlotResponse] = []
