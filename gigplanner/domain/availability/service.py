"""Availability service - musician calendars and public share links"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import AVAILABILITY_LINK_TTL_DAYS, FRONTEND_URL
from ...models import AvailabilityShareLink, Musician
from ...security_utils import generate_secure_token, is_expired
from ...shared.validators import validate_month, validate_year
from .repository import AvailabilityRepository
from .schemas import (
    AvailabilityCalendarResponse,
    AvailabilityEntry,
    PublicAvailabilityResponse,
    PublicBooking,
    PublicCalendar,
    PublicMusicianSummary,
    ShareLinkResponse,
)

logger = logging.getLogger(__name__)


def share_url(token: str) -> str:
    return f"{FRONTEND_URL.rstrip('/')}/availability/{token}"


def serialize_link(link: AvailabilityShareLink) -> ShareLinkResponse:
    return ShareLinkResponse(
        id=link.id,
        token=link.token,
        shareLink=share_url(link.token),
        expiryDate=link.expires_at,
        createdAt=link.created_at,
        lastAccessedAt=link.last_accessed_at,
        isExpired=is_expired(link.expires_at),
    )


def _resolve_month(month: Optional[int], year: Optional[int]) -> tuple[int, int]:
    """Requested month, defaulting to the current one"""
    today = date.today()
    month = today.month if month is None else month
    year = today.year if year is None else year
    try:
        return validate_month(month), validate_year(year)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


class AvailabilityService:
    """Service layer for musician availability"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def _get_musician(self, musician_id: int) -> Musician:
        musician = self.db.get(Musician, musician_id)
        if not musician:
            raise HTTPException(status_code=404, detail="Musician not found")
        return musician

    def _entries(self, musician_id: int, month: int, year: int) -> list[AvailabilityEntry]:
        return [
            AvailabilityEntry(date=row.date, isAvailable=row.is_available)
            for row in self.repo.get_month(self.db, musician_id, month, year)
        ]

    def _apply(self, musician_id: int, dates: list[date], is_available: bool, skip_past: bool) -> int:
        today = date.today()
        updated = 0
        for day in sorted(set(dates)):
            if skip_past and day < today:
                continue
            self.repo.upsert_day(self.db, musician_id, day, is_available)
            updated += 1
        self.db.commit()
        return updated

    # ------------------------------------------------------------------
    # Admin calendar
    # ------------------------------------------------------------------

    def get_calendar(
        self, musician_id: int, month: Optional[int], year: Optional[int]
    ) -> AvailabilityCalendarResponse:
        self._get_musician(musician_id)
        month, year = _resolve_month(month, year)
        return AvailabilityCalendarResponse(
            musicianId=musician_id,
            month=month,
            year=year,
            availability=self._entries(musician_id, month, year),
        )

    def update_availability(self, musician_id: int, dates: list[date], is_available: bool) -> int:
        self._get_musician(musician_id)
        updated = self._apply(musician_id, dates, is_available, skip_past=False)
        logger.info(f"🗓️ Availability updated for musician {musician_id}: {updated} date(s)")
        return updated

    # ------------------------------------------------------------------
    # Share links
    # ------------------------------------------------------------------

    def create_share_link(
        self, musician_id: int, expiry_days: Optional[int] = None
    ) -> AvailabilityShareLink:
        self._get_musician(musician_id)
        days = expiry_days or AVAILABILITY_LINK_TTL_DAYS
        link = AvailabilityShareLink(
            musician_id=musician_id,
            token=generate_secure_token(),
            expires_at=datetime.utcnow() + timedelta(days=days),
        )
        self.db.add(link)
        self.db.commit()
        self.db.refresh(link)
        logger.info(f"🔗 Availability share link {link.id} created for musician {musician_id}")
        return link

    def list_share_links(self, musician_id: int) -> list[AvailabilityShareLink]:
        self._get_musician(musician_id)
        return self.repo.get_links(self.db, musician_id)

    def delete_share_link(self, musician_id: int, link_id: int) -> dict:
        link = self.repo.get_link_by_id(self.db, link_id)
        if not link:
            raise HTTPException(status_code=404, detail="Share link not found")
        if link.musician_id != musician_id:
            raise HTTPException(
                status_code=403, detail="Share link does not belong to this musician"
            )
        self.db.delete(link)
        self.db.commit()
        logger.info(f"🗑️ Availability share link {link_id} deleted")
        return {"message": "Share link deleted successfully"}

    # ------------------------------------------------------------------
    # Public access
    # ------------------------------------------------------------------

    def _link_for_token(self, token: str) -> AvailabilityShareLink:
        link = self.repo.get_link_by_token(self.db, token)
        if not link:
            raise HTTPException(status_code=404, detail="Share link not found")
        if is_expired(link.expires_at):
            raise HTTPException(status_code=410, detail="Share link has expired")
        return link

    def get_public_calendar(
        self, token: str, month: Optional[int], year: Optional[int]
    ) -> PublicAvailabilityResponse:
        link = self._link_for_token(token)
        musician = self._get_musician(link.musician_id)
        month, year = _resolve_month(month, year)

        bookings = [
            PublicBooking(
                date=a.slot.date,
                venueName=a.slot.venue.name if a.slot.venue else None,
                startTime=a.slot.start_time,
                endTime=a.slot.end_time,
            )
            for a in self.repo.get_bookings(self.db, musician.id, month, year)
        ]

        link.last_accessed_at = datetime.utcnow()
        self.db.commit()

        return PublicAvailabilityResponse(
            musician=PublicMusicianSummary(id=musician.id, name=musician.name),
            calendar=PublicCalendar(
                month=month,
                year=year,
                availability=self._entries(musician.id, month, year),
                bookings=bookings,
            ),
        )

    def update_public_availability(
        self, token: str, dates: list[date], is_available: bool
    ) -> tuple[int, int]:
        """Update through a share link; past dates are ignored. Returns (musician_id, updated)"""
        link = self._link_for_token(token)
        link.last_accessed_at = datetime.utcnow()
        updated = self._apply(link.musician_id, dates, is_available, skip_past=True)
        logger.info(
            f"🗓️ Musician {link.musician_id} updated {updated} date(s) via share link {link.id}"
        )
        return link.musician_id, updated
