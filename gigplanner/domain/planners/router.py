"""Planner router - FastAPI endpoints for planners, slots and assignments"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...email_service import is_email_configured
from ...models import User
from ...schemas import MessageResponse
from ...services.status_history import admin_actor
from .schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    AttendanceRequest,
    FeeBreakdownResponse,
    FinalizeResponse,
    MusicianScheduleResponse,
    PlannerCreate,
    PlannerDetailResponse,
    PlannerResponse,
    PlannerUpdate,
    SlotCreate,
    SlotResponse,
    SlotUpdate,
)
from .service import (
    AssignmentService,
    PlannerService,
    serialize_assignment,
    serialize_planner,
    serialize_planner_detail,
    serialize_slot,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/planners", tags=["Planners"])
slots_router = APIRouter(prefix="/planner-slots", tags=["Planner Slots"])
assignments_router = APIRouter(prefix="/planner-assignments", tags=["Planner Assignments"])


def get_planner_service(db: Session = Depends(get_db)) -> PlannerService:
    """Dependency injection for PlannerService"""
    return PlannerService(db)


def get_assignment_service(db: Session = Depends(get_db)) -> AssignmentService:
    """Dependency injection for AssignmentService"""
    return AssignmentService(db)


# ============================================================================
# PLANNERS
# ============================================================================


@router.get("", response_model=list[PlannerResponse])
async def list_planners(
    year: Optional[int] = Query(None, description="Only planners for this year"),
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return [serialize_planner(p) for p in service.list_planners(year)]


@router.post("", response_model=PlannerResponse, status_code=201)
async def create_planner(
    data: PlannerCreate,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return serialize_planner(service.create_planner(data))


@router.get("/month/{month}/year/{year}", response_model=PlannerDetailResponse)
async def get_planner_for_month(
    month: int,
    year: int,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    """Planner for a calendar month, with its slots and assignments"""
    return serialize_planner_detail(service.get_planner_for_month(month, year))


@router.get("/{planner_id}", response_model=PlannerDetailResponse)
async def get_planner(
    planner_id: int,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return serialize_planner_detail(service.get_planner(planner_id))


@router.put("/{planner_id}", response_model=PlannerResponse)
async def update_planner(
    planner_id: int,
    data: PlannerUpdate,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return serialize_planner(service.update_planner(planner_id, data))


@router.delete("/{planner_id}", response_model=MessageResponse)
async def delete_planner(
    planner_id: int,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return service.delete_planner(planner_id)


@router.post("/{planner_id}/finalize", response_model=FinalizeResponse)
async def finalize_planner(
    planner_id: int,
    notify: bool = Query(False, description="Email each assigned musician their schedule"),
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    """Lock the planner so contracts can be generated"""
    planner = service.finalize_planner(planner_id, admin_actor(current_user))
    notified = await service.notify_finalized(planner) if notify else 0
    return FinalizeResponse(
        planner=serialize_planner(planner),
        notified=notified,
        emailEnabled=is_email_configured(),
    )


@router.post("/{planner_id}/reopen", response_model=PlannerResponse)
async def reopen_planner(
    planner_id: int,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return serialize_planner(service.reopen_planner(planner_id, admin_actor(current_user)))


# ============================================================================
# SLOTS
# ============================================================================


@slots_router.get("", response_model=list[SlotResponse])
async def list_slots(
    plannerId: Optional[int] = Query(None, description="Filter slots by planner"),
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return [serialize_slot(s) for s in service.list_slots(plannerId)]


@slots_router.get("/{slot_id}", response_model=SlotResponse)
async def get_slot(
    slot_id: int,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return serialize_slot(service.get_slot(slot_id))


@slots_router.post("", response_model=SlotResponse, status_code=201)
async def create_slot(
    data: SlotCreate,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    """Create a slot, or update the existing one for the same date and venue"""
    slot, recalculated = service.create_slot(data)
    return serialize_slot(slot, recalculated)


@slots_router.put("/{slot_id}", response_model=SlotResponse)
async def update_slot(
    slot_id: int,
    data: SlotUpdate,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    slot, recalculated = service.update_slot(slot_id, data)
    return serialize_slot(slot, recalculated)


@slots_router.delete("/{slot_id}", response_model=MessageResponse)
async def delete_slot(
    slot_id: int,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return service.delete_slot(slot_id)


# ============================================================================
# ASSIGNMENTS
# ============================================================================


@assignments_router.get("", response_model=list[AssignmentResponse])
async def list_assignments(
    plannerId: Optional[int] = Query(None),
    slotId: Optional[int] = Query(None),
    musicianId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    assignments = service.list_assignments(plannerId, slotId, musicianId)
    return [serialize_assignment(a) for a in assignments]


@assignments_router.get("/by-musician/{planner_id}", response_model=list[MusicianScheduleResponse])
async def assignments_by_musician(
    planner_id: int,
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Planner assignments grouped per musician with fee totals"""
    return service.assignments_by_musician(planner_id)


@assignments_router.get("/{assignment_id}", response_model=AssignmentResponse)
async def get_assignment(
    assignment_id: int,
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    return serialize_assignment(service.get_assignment(assignment_id))


@assignments_router.get("/{assignment_id}/fee", response_model=FeeBreakdownResponse)
async def get_assignment_fee(
    assignment_id: int,
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    """Resolved fee and the rule that produced it"""
    return service.get_fee(assignment_id)


@assignments_router.post("", response_model=AssignmentResponse, status_code=201)
async def create_assignment(
    data: AssignmentCreate,
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    return serialize_assignment(service.create_assignment(data))


@assignments_router.put("/{assignment_id}", response_model=AssignmentResponse)
async def update_assignment(
    assignment_id: int,
    data: AssignmentUpdate,
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    return serialize_assignment(
        service.update_assignment(assignment_id, data, admin_actor(current_user))
    )


@assignments_router.delete("/{assignment_id}", response_model=MessageResponse)
async def delete_assignment(
    assignment_id: int,
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    return service.delete_assignment(assignment_id)


@assignments_router.post("/{assignment_id}/mark-attendance", response_model=AssignmentResponse)
async def mark_attendance(
    assignment_id: int,
    data: AttendanceRequest,
    current_user: User = Depends(get_current_user),
    service: AssignmentService = Depends(get_assignment_service),
):
    return serialize_assignment(service.mark_attendance(assignment_id, data, current_user))
