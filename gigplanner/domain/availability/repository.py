"""Availability repository - Database operations for availability and share links"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import (
    Availability,
    AvailabilityShareLink,
    MonthlyPlanner,
    PlannerAssignment,
    PlannerSlot,
)
from ...shared.validators import month_key


class AvailabilityRepository:
    """Repository for musician availability"""

    @staticmethod
    def get_month(db: Session, musician_id: int, month: int, year: int) -> list[Availability]:
        key = f"{year}-{month:02d}"
        return (
            db.query(Availability)
            .filter(Availability.musician_id == musician_id, Availability.month == key)
            .order_by(Availability.date)
            .all()
        )

    @staticmethod
    def upsert_day(db: Session, musician_id: int, day: date, is_available: bool) -> Availability:
        """Create or update the availability row for one day (no commit)"""
        record = (
            db.query(Availability)
            .filter(Availability.musician_id == musician_id, Availability.date == day)
            .first()
        )
        if record is None:
            record = Availability(
                musician_id=musician_id,
                date=day,
                month=month_key(day),
                year=day.year,
            )
            db.add(record)
        record.is_available = is_available
        return record

    @staticmethod
    def get_bookings(
        db: Session, musician_id: int, month: int, year: int
    ) -> list[PlannerAssignment]:
        """Assignments of the musician in the planner for a month"""
        return (
            db.query(PlannerAssignment)
            .join(PlannerSlot)
            .join(MonthlyPlanner)
            .filter(
                PlannerAssignment.musician_id == musician_id,
                MonthlyPlanner.month == month,
                MonthlyPlanner.year == year,
            )
            .order_by(PlannerSlot.date)
            .all()
        )

    # ------------------------------------------------------------------
    # Share links
    # ------------------------------------------------------------------

    @staticmethod
    def get_links(db: Session, musician_id: int) -> list[AvailabilityShareLink]:
        return (
            db.query(AvailabilityShareLink)
            .filter(AvailabilityShareLink.musician_id == musician_id)
            .order_by(AvailabilityShareLink.created_at.desc(), AvailabilityShareLink.id.desc())
            .all()
        )

    @staticmethod
    def get_link_by_id(db: Session, link_id: int) -> Optional[AvailabilityShareLink]:
        return db.get(AvailabilityShareLink, link_id)

    @staticmethod
    def get_link_by_token(db: Session, token: str) -> Optional[AvailabilityShareLink]:
        return db.query(AvailabilityShareLink).filter(AvailabilityShareLink.token == token).first()
