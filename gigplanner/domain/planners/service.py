"""Planner service - Business logic for planners, slots and assignments"""

import logging
from collections import defaultdict
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...email_service import (
    EmailDeliveryError,
    EmailNotConfiguredError,
    is_email_configured,
    send_planner_finalized_email,
)
from ...models import (
    EventCategory,
    MonthlyPlanner,
    Musician,
    PlannerAssignment,
    PlannerSlot,
    User,
    Venue,
)
from ...services.status_history import admin_actor, record_status_change
from ...shared.dates import in_month, period_label
from ...shared.validators import sanitize_text, validate_month, validate_time_string
from ...status import (
    ATTENDANCE_STATUSES,
    SLOT_STATUSES,
    validate_assignment_transition,
    validate_planner_transition,
)
from ..fees import FeeService
from .repository import PlannerRepository
from .schemas import (
    AssignmentCreate,
    AssignmentResponse,
    AssignmentUpdate,
    AttendanceRequest,
    FeeBreakdownResponse,
    MusicianScheduleResponse,
    PlannerCreate,
    PlannerDetailResponse,
    PlannerResponse,
    PlannerUpdate,
    SlotCreate,
    SlotResponse,
    SlotUpdate,
)

logger = logging.getLogger(__name__)


# ============================================================================
# SERIALIZATION
# ============================================================================


def serialize_assignment(assignment: PlannerAssignment) -> AssignmentResponse:
    slot = assignment.slot
    return AssignmentResponse(
        id=assignment.id,
        slotId=assignment.slot_id,
        plannerId=slot.planner_id,
        musicianId=assignment.musician_id,
        musicianName=assignment.musician.name if assignment.musician else None,
        venueId=slot.venue_id,
        venueName=slot.venue.name if slot.venue else None,
        date=slot.date,
        startTime=slot.start_time,
        endTime=slot.end_time,
        status=assignment.status,
        actualFee=assignment.actual_fee,
        feeOverridden=bool(assignment.fee_overridden),
        notes=assignment.notes,
        assignedAt=assignment.assigned_at,
        attendanceMarkedAt=assignment.attendance_marked_at,
    )


def serialize_slot(slot: PlannerSlot, fees_recalculated: int = 0) -> SlotResponse:
    return SlotResponse(
        id=slot.id,
        plannerId=slot.planner_id,
        venueId=slot.venue_id,
        venueName=slot.venue.name if slot.venue else None,
        eventCategoryId=slot.event_category_id,
        date=slot.date,
        startTime=slot.start_time,
        endTime=slot.end_time,
        duration=slot.duration,
        status=slot.status,
        description=slot.description,
        assignments=[serialize_assignment(a) for a in sorted(slot.assignments, key=lambda a: a.id)],
        feesRecalculated=fees_recalculated,
    )


def serialize_planner(planner: MonthlyPlanner) -> PlannerResponse:
    return PlannerResponse(
        id=planner.id,
        month=planner.month,
        year=planner.year,
        name=planner.name,
        description=planner.description,
        status=planner.status,
        slotCount=len(planner.slots),
        assignmentCount=sum(len(slot.assignments) for slot in planner.slots),
        createdAt=planner.created_at,
        updatedAt=planner.updated_at,
    )


def serialize_planner_detail(planner: MonthlyPlanner) -> PlannerDetailResponse:
    slots = sorted(planner.slots, key=lambda s: (s.date, s.start_time or "", s.venue_id))
    return PlannerDetailResponse(
        **serialize_planner(planner).model_dump(),
        slots=[serialize_slot(slot) for slot in slots],
    )


def commit_or_conflict(db: Session, conflict_detail: str) -> None:
    """Commit, mapping unique constraint violations to 409"""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning(f"⚠️ Integrity conflict: {e.orig}")
        raise HTTPException(status_code=409, detail=conflict_detail) from e


def _normalize_time(value: Optional[str]) -> Optional[str]:
    try:
        return validate_time_string(value)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid time '{value}': {e}") from e


# ============================================================================
# PLANNERS AND SLOTS
# ============================================================================


class PlannerService:
    """Service layer for monthly planners and their slots"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PlannerRepository()
        self.fees = FeeService(db)

    # ------------------------------------------------------------------
    # Planners
    # ------------------------------------------------------------------

    def list_planners(self, year: Optional[int] = None) -> list[MonthlyPlanner]:
        return self.repo.get_planners(self.db, year)

    def get_planner(self, planner_id: int) -> MonthlyPlanner:
        planner = self.repo.get_planner_by_id(self.db, planner_id)
        if not planner:
            raise HTTPException(status_code=404, detail="Planner not found")
        return planner

    def get_planner_for_month(self, month: int, year: int) -> MonthlyPlanner:
        try:
            validate_month(month)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        planner = self.repo.get_planner_by_month(self.db, month, year)
        if not planner:
            raise HTTPException(status_code=404, detail="No planner for this month")
        return planner

    def create_planner(self, data: PlannerCreate) -> MonthlyPlanner:
        if self.repo.get_planner_by_month(self.db, data.month, data.year):
            raise HTTPException(
                status_code=409, detail="A planner already exists for this month and year"
            )

        planner = MonthlyPlanner(
            month=data.month,
            year=data.year,
            name=(data.name or "").strip() or period_label(data.month, data.year),
            description=sanitize_text(data.description),
            status="draft",
        )
        self.db.add(planner)
        commit_or_conflict(self.db, "A planner already exists for this month and year")
        self.db.refresh(planner)
        logger.info(f"📅 Planner created: {planner.id} ({planner.name})")
        return planner

    def update_planner(self, planner_id: int, data: PlannerUpdate) -> MonthlyPlanner:
        planner = self.get_planner(planner_id)
        if data.name is not None:
            planner.name = data.name.strip()
        if data.description is not None:
            planner.description = sanitize_text(data.description)
        self.db.commit()
        self.db.refresh(planner)
        return planner

    def delete_planner(self, planner_id: int) -> dict:
        planner = self.get_planner(planner_id)
        if self.repo.planner_has_documents(self.db, planner_id):
            raise HTTPException(
                status_code=409,
                detail="Planner has contracts or invoices and cannot be deleted",
            )
        for slot in planner.slots:
            for assignment in slot.assignments:
                self.repo.detach_contract_lines(self.db, assignment.id)
        self.db.delete(planner)
        self.db.commit()
        logger.info(f"🗑️ Planner deleted: {planner_id}")
        return {"message": "Planner deleted successfully"}

    def _set_planner_status(
        self, planner_id: int, new_status: str, changed_by: Optional[str] = None
    ) -> MonthlyPlanner:
        planner = self.get_planner(planner_id)
        if planner.status == new_status:
            raise HTTPException(status_code=400, detail=f"Planner is already {new_status}")
        if not validate_planner_transition(planner.status, new_status):
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status transition from {planner.status} to {new_status}",
            )
        record_status_change(
            self.db, "planner", planner.id, planner.status, new_status, changed_by
        )
        planner.status = new_status
        self.db.commit()
        self.db.refresh(planner)
        logger.info(f"📅 Planner {planner.id} is now {new_status}")
        return planner

    def finalize_planner(self, planner_id: int, changed_by: Optional[str] = None) -> MonthlyPlanner:
        return self._set_planner_status(planner_id, "finalized", changed_by)

    def reopen_planner(self, planner_id: int, changed_by: Optional[str] = None) -> MonthlyPlanner:
        return self._set_planner_status(planner_id, "draft", changed_by)

    async def notify_finalized(self, planner: MonthlyPlanner) -> int:
        """Email each assigned musician their schedule; returns the number of emails sent"""
        if not is_email_configured():
            logger.info("📧 Email not configured - skipping planner finalized notifications")
            return 0

        by_musician: dict[int, list[PlannerAssignment]] = defaultdict(list)
        for slot in planner.slots:
            for assignment in slot.assignments:
                by_musician[assignment.musician_id].append(assignment)

        label = period_label(planner.month, planner.year)
        sent = 0
        for assignments in by_musician.values():
            musician = assignments[0].musician
            if not musician or not musician.email:
                continue
            lines = [
                {
                    "date": a.slot.date.isoformat(),
                    "venueName": a.slot.venue.name if a.slot.venue else None,
                    "startTime": a.slot.start_time,
                    "endTime": a.slot.end_time,
                    "fee": self.fees.fee_for_assignment(a, refresh=False).amount,
                }
                for a in sorted(assignments, key=lambda a: a.slot.date)
            ]
            try:
                await send_planner_finalized_email(
                    musician.email, musician.name, label, lines, sum(line["fee"] for line in lines)
                )
                sent += 1
            except (EmailNotConfiguredError, EmailDeliveryError) as e:
                logger.error(f"❌ Failed to notify musician {musician.id}: {e}")
        return sent

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def list_slots(self, planner_id: Optional[int] = None) -> list[PlannerSlot]:
        return self.repo.get_slots(self.db, planner_id)

    def get_slot(self, slot_id: int) -> PlannerSlot:
        slot = self.repo.get_slot_by_id(self.db, slot_id)
        if not slot:
            raise HTTPException(status_code=404, detail="Slot not found")
        return slot

    def _check_slot_refs(
        self,
        planner: MonthlyPlanner,
        day: Optional[date],
        venue_id: Optional[int],
        event_category_id: Optional[int],
    ) -> None:
        if day is not None and not in_month(day, planner.month, planner.year):
            raise HTTPException(
                status_code=400,
                detail=f"Date {day.isoformat()} is outside planner month "
                f"{period_label(planner.month, planner.year)}",
            )
        if venue_id is not None and not self.db.get(Venue, venue_id):
            raise HTTPException(status_code=404, detail="Venue not found")
        if event_category_id and not self.db.get(EventCategory, event_category_id):
            raise HTTPException(status_code=404, detail="Event category not found")

    def upsert_slot(
        self,
        planner: MonthlyPlanner,
        venue_id: int,
        day: date,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        duration: Optional[float] = None,
        event_category_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> tuple[PlannerSlot, int]:
        """
        Create the slot for (planner, date, venue) or update the existing one.

        Flushes but does not commit. Returns the slot and how many assignment
        fees were recalculated because its timing changed.
        """
        self._check_slot_refs(planner, day, venue_id, event_category_id)
        start_time = _normalize_time(start_time)
        end_time = _normalize_time(end_time)

        slot = self.repo.find_slot(self.db, planner.id, day, venue_id)
        if slot is None:
            slot = PlannerSlot(
                planner_id=planner.id,
                venue_id=venue_id,
                date=day,
                start_time=start_time,
                end_time=end_time,
                duration=duration,
                event_category_id=event_category_id,
                description=sanitize_text(description),
                status="open",
            )
            self.db.add(slot)
            self.db.flush()
            logger.info(f"📍 Slot created: planner {planner.id}, venue {venue_id}, {day}")
            return slot, 0

        timing_changed = False
        for attr, value in (
            ("start_time", start_time),
            ("end_time", end_time),
            ("duration", duration),
            ("event_category_id", event_category_id),
        ):
            if value is not None and getattr(slot, attr) != value:
                setattr(slot, attr, value)
                timing_changed = True
        if description is not None:
            slot.description = sanitize_text(description)

        recalculated = self.fees.recalculate_for_slot(slot) if timing_changed else 0
        self.db.flush()
        return slot, recalculated

    def create_slot(self, data: SlotCreate) -> tuple[PlannerSlot, int]:
        planner = self.get_planner(data.plannerId)
        slot, recalculated = self.upsert_slot(
            planner,
            data.venueId,
            data.date,
            data.startTime,
            data.endTime,
            data.duration,
            data.eventCategoryId,
            data.description,
        )
        commit_or_conflict(self.db, "A slot already exists for this date and venue")
        self.db.refresh(slot)
        return slot, recalculated

    def update_slot(self, slot_id: int, data: SlotUpdate) -> tuple[PlannerSlot, int]:
        slot = self.get_slot(slot_id)
        planner = slot.planner
        self._check_slot_refs(planner, data.date, data.venueId, data.eventCategoryId)

        new_date = data.date or slot.date
        new_venue = data.venueId or slot.venue_id
        if (new_date, new_venue) != (slot.date, slot.venue_id):
            clash = self.repo.find_slot(self.db, planner.id, new_date, new_venue)
            if clash and clash.id != slot.id:
                raise HTTPException(
                    status_code=409, detail="A slot already exists for this date and venue"
                )
            slot.date = new_date
            slot.venue_id = new_venue

        timing_changed = False
        if "startTime" in data.model_fields_set:
            start_time = _normalize_time(data.startTime)
            timing_changed |= start_time != slot.start_time
            slot.start_time = start_time
        if "endTime" in data.model_fields_set:
            end_time = _normalize_time(data.endTime)
            timing_changed |= end_time != slot.end_time
            slot.end_time = end_time
        if data.duration is not None:
            # 0 clears the explicit duration so start/end times apply again
            duration = data.duration or None
            timing_changed |= duration != slot.duration
            slot.duration = duration
        if data.eventCategoryId is not None and data.eventCategoryId != slot.event_category_id:
            slot.event_category_id = data.eventCategoryId
            timing_changed = True

        if data.status is not None:
            if data.status not in SLOT_STATUSES:
                raise HTTPException(status_code=400, detail=f"Invalid slot status: {data.status}")
            slot.status = data.status
        if data.description is not None:
            slot.description = sanitize_text(data.description)

        self.db.flush()
        recalculated = self.fees.recalculate_for_slot(slot) if timing_changed else 0
        commit_or_conflict(self.db, "A slot already exists for this date and venue")
        self.db.refresh(slot)
        return slot, recalculated

    def delete_slot(self, slot_id: int) -> dict:
        slot = self.get_slot(slot_id)
        for assignment in slot.assignments:
            self.repo.detach_contract_lines(self.db, assignment.id)
        removed = len(slot.assignments)
        self.db.delete(slot)
        self.db.commit()
        logger.info(f"🗑️ Slot {slot_id} deleted with {removed} assignment(s)")
        return {"message": "Slot deleted successfully"}


# ============================================================================
# ASSIGNMENTS
# ============================================================================


class AssignmentService:
    """Service layer for musician-to-slot assignments"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PlannerRepository()
        self.planners = PlannerService(db)
        self.fees = FeeService(db)

    def list_assignments(
        self,
        planner_id: Optional[int] = None,
        slot_id: Optional[int] = None,
        musician_id: Optional[int] = None,
    ) -> list[PlannerAssignment]:
        return self.repo.get_assignments(self.db, planner_id, slot_id, musician_id)

    def get_assignment(self, assignment_id: int) -> PlannerAssignment:
        assignment = self.repo.get_assignment_by_id(self.db, assignment_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="Assignment not found")
        return assignment

    def _get_musician(self, musician_id: int) -> Musician:
        musician = self.db.get(Musician, musician_id)
        if not musician:
            raise HTTPException(status_code=404, detail="Musician not found")
        return musician

    def _resolve_slot(self, data: AssignmentCreate) -> PlannerSlot:
        if data.slotId:
            return self.planners.get_slot(data.slotId)

        if not (data.plannerId and data.venueId and data.date):
            raise HTTPException(
                status_code=400,
                detail="Provide slotId, or plannerId, venueId and date",
            )
        planner = self.planners.get_planner(data.plannerId)
        slot, _ = self.planners.upsert_slot(
            planner,
            data.venueId,
            data.date,
            data.startTime,
            data.endTime,
            data.duration,
            data.eventCategoryId,
        )
        return slot

    def create_assignment(self, data: AssignmentCreate) -> PlannerAssignment:
        musician = self._get_musician(data.musicianId)
        slot = self._resolve_slot(data)

        if self.repo.find_assignment(self.db, slot.id, musician.id):
            self.db.rollback()
            raise HTTPException(
                status_code=409, detail="Musician is already assigned to this slot"
            )

        if data.actualFee and data.actualFee > 0:
            fee, overridden = round(data.actualFee, 2), True
        else:
            fee, overridden = self.fees.preview_fee(musician, slot).amount, False

        assignment = PlannerAssignment(
            slot_id=slot.id,
            musician_id=musician.id,
            status="scheduled",
            actual_fee=fee,
            fee_overridden=overridden,
            notes=sanitize_text(data.notes),
        )
        self.db.add(assignment)
        if slot.status == "open":
            slot.status = "assigned"
        commit_or_conflict(self.db, "Musician is already assigned to this slot")
        self.db.refresh(assignment)
        logger.info(
            f"🎵 Musician {musician.id} assigned to slot {slot.id} ({slot.date}), "
            f"fee {fee}{' (override)' if overridden else ''}"
        )
        return assignment

    def update_assignment(
        self, assignment_id: int, data: AssignmentUpdate, changed_by: Optional[str] = None
    ) -> PlannerAssignment:
        assignment = self.get_assignment(assignment_id)
        refresh_fee = False

        if data.musicianId is not None and data.musicianId != assignment.musician_id:
            musician = self._get_musician(data.musicianId)
            if self.repo.find_assignment(self.db, assignment.slot_id, musician.id):
                raise HTTPException(
                    status_code=409, detail="Musician is already assigned to this slot"
                )
            assignment.musician_id = musician.id
            assignment.musician = musician
            refresh_fee = True

        if data.status is not None and data.status != assignment.status:
            if not validate_assignment_transition(assignment.status, data.status):
                raise HTTPException(
                    status_code=400,
                    detail=f"Invalid status transition from {assignment.status} to {data.status}",
                )
            record_status_change(
                self.db, "assignment", assignment.id, assignment.status, data.status, changed_by
            )
            assignment.status = data.status

        if data.actualFee is not None:
            if data.actualFee > 0:
                assignment.actual_fee = round(data.actualFee, 2)
                assignment.fee_overridden = True
                refresh_fee = False
            else:
                assignment.fee_overridden = False
                refresh_fee = True

        if refresh_fee and not assignment.fee_overridden:
            assignment.actual_fee = self.fees.computed_fee(assignment).amount

        if data.notes is not None:
            assignment.notes = sanitize_text(data.notes)

        commit_or_conflict(self.db, "Musician is already assigned to this slot")
        self.db.refresh(assignment)
        return assignment

    def delete_assignment(self, assignment_id: int) -> dict:
        assignment = self.get_assignment(assignment_id)
        slot = assignment.slot
        self.repo.detach_contract_lines(self.db, assignment.id)
        self.db.delete(assignment)
        self.db.flush()

        remaining = [a for a in slot.assignments if a.id != assignment_id]
        if not remaining and slot.status == "assigned":
            slot.status = "open"
        self.db.commit()
        logger.info(f"🗑️ Assignment {assignment_id} removed from slot {slot.id}")
        return {"message": "Assignment deleted successfully"}

    def mark_attendance(
        self, assignment_id: int, data: AttendanceRequest, user: User
    ) -> PlannerAssignment:
        assignment = self.get_assignment(assignment_id)
        if data.status not in ATTENDANCE_STATUSES:
            raise HTTPException(status_code=400, detail="Status must be attended or absent")
        if assignment.slot.date > date.today():
            raise HTTPException(
                status_code=400, detail="Attendance can only be marked after the performance date"
            )
        if not validate_assignment_transition(assignment.status, data.status):
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status transition from {assignment.status} to {data.status}",
            )

        record_status_change(
            self.db,
            "assignment",
            assignment.id,
            assignment.status,
            data.status,
            admin_actor(user),
            sanitize_text(data.notes),
        )
        assignment.status = data.status
        assignment.attendance_marked_at = datetime.utcnow()
        assignment.attendance_marked_by = user.id
        if data.notes is not None:
            assignment.notes = sanitize_text(data.notes)

        slot = assignment.slot
        if all(a.status in ATTENDANCE_STATUSES for a in slot.assignments):
            slot.status = "completed"

        self.db.commit()
        self.db.refresh(assignment)
        logger.info(f"✅ Attendance for assignment {assignment.id}: {data.status}")
        return assignment

    def get_fee(self, assignment_id: int) -> FeeBreakdownResponse:
        assignment = self.get_assignment(assignment_id)
        result = self.fees.fee_for_assignment(assignment, refresh=False)
        return FeeBreakdownResponse(
            assignmentId=assignment.id,
            amount=result.amount,
            rule=result.rule,
            hours=result.hours,
            hourlyRate=result.hourly_rate,
            feeOverridden=bool(assignment.fee_overridden),
        )

    def assignments_by_musician(self, planner_id: int) -> list[MusicianScheduleResponse]:
        self.planners.get_planner(planner_id)
        grouped: dict[int, list[PlannerAssignment]] = defaultdict(list)
        for assignment in self.repo.get_assignments(self.db, planner_id=planner_id):
            grouped[assignment.musician_id].append(assignment)

        result = []
        for musician_id, assignments in grouped.items():
            musician = assignments[0].musician
            total = sum(self.fees.fee_for_assignment(a, refresh=False).amount for a in assignments)
            result.append(
                MusicianScheduleResponse(
                    musicianId=musician_id,
                    musicianName=musician.name if musician else "Unknown",
                    slotCount=len(assignments),
                    totalFee=round(total, 2),
                    assignments=[serialize_assignment(a) for a in assignments],
                )
            )
        return sorted(result, key=lambda r: r.musicianName.lower())
