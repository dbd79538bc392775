"""Reference data service - CRUD with read-through Redis caching"""

import logging
from typing import Callable, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import cache, invalidate_reference, reference_key
from ...models import Category, EventCategory, Musician, MusicianPayRate, Venue
from ...shared.validators import sanitize_text, validate_email
from ..fees import FeeService
from .repository import ReferenceRepository
from .schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    MusicianCreate,
    MusicianResponse,
    MusicianUpdate,
    PayRateCreate,
    PayRateResponse,
    PayRateUpdate,
    VenueCreate,
    VenueResponse,
    VenueUpdate,
)

logger = logging.getLogger(__name__)


def serialize_venue(venue: Venue) -> dict:
    return VenueResponse(
        id=venue.id,
        name=venue.name,
        location=venue.location,
        address=venue.address,
        paxCount=venue.pax_count,
        capacity=venue.capacity,
        openingHours=venue.opening_hours,
        description=venue.description,
    ).model_dump()


def serialize_category(category) -> dict:
    return CategoryResponse.model_validate(category).model_dump()


def serialize_musician(musician: Musician) -> dict:
    return MusicianResponse(
        id=musician.id,
        name=musician.name,
        email=musician.email,
        phone=musician.phone,
        categoryId=musician.category_id,
        categoryTitle=musician.category.title if musician.category else None,
        payRate=musician.pay_rate,
        instruments=musician.instruments or [],
        bio=musician.bio,
    ).model_dump()


def serialize_pay_rate(rate: MusicianPayRate) -> dict:
    return PayRateResponse(
        id=rate.id,
        musicianId=rate.musician_id,
        eventCategoryId=rate.event_category_id,
        hourlyRate=rate.hourly_rate,
        dayRate=rate.day_rate,
        eventRate=rate.event_rate,
        notes=rate.notes,
    ).model_dump()


class ReferenceService:
    """Service layer for reference data used by the planner"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReferenceRepository()

    def _cached_list(self, key: str, loader: Callable[[], list], serializer) -> list[dict]:
        cached = cache.get(key)
        if cached is not None:
            return cached
        items = [serializer(record) for record in loader()]
        cache.set(key, items)
        return items

    def _refresh_fees(self, musician_id: int) -> None:
        """Bring computed assignment fees in line with the musician's current rates"""
        updated = FeeService(self.db).recalculate_for_musician(musician_id)
        if updated:
            self.db.commit()

    def _get_or_404(self, model, record_id: int, label: str):
        record = self.repo.get_by_id(self.db, model, record_id)
        if not record:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return record

    # ------------------------------------------------------------------
    # Venues
    # ------------------------------------------------------------------

    def list_venues(self) -> list[dict]:
        return self._cached_list(
            reference_key("venues"),
            lambda: self.repo.list_all(self.db, Venue, Venue.name),
            serialize_venue,
        )

    def get_venue(self, venue_id: int) -> dict:
        return serialize_venue(self._get_or_404(Venue, venue_id, "Venue"))

    def create_venue(self, data: VenueCreate) -> dict:
        venue = Venue(
            name=data.name.strip(),
            location=data.location,
            address=data.address,
            pax_count=data.paxCount,
            capacity=data.capacity,
            opening_hours=data.openingHours,
            description=sanitize_text(data.description),
        )
        venue = self.repo.create(self.db, venue)
        invalidate_reference("venues")
        logger.info(f"✅ Venue created: {venue.id} ({venue.name})")
        return serialize_venue(venue)

    def update_venue(self, venue_id: int, data: VenueUpdate) -> dict:
        venue = self._get_or_404(Venue, venue_id, "Venue")
        venue = self.repo.update(
            self.db,
            venue,
            name=data.name.strip() if data.name else None,
            location=data.location,
            address=data.address,
            pax_count=data.paxCount,
            capacity=data.capacity,
            opening_hours=data.openingHours,
            description=sanitize_text(data.description),
        )
        invalidate_reference("venues")
        return serialize_venue(venue)

    def delete_venue(self, venue_id: int) -> dict:
        venue = self._get_or_404(Venue, venue_id, "Venue")
        if self.repo.venue_in_use(self.db, venue_id):
            raise HTTPException(status_code=409, detail="Venue is used by planner slots")
        self.repo.delete(self.db, venue)
        invalidate_reference("venues")
        logger.info(f"🗑️ Venue deleted: {venue_id}")
        return {"message": "Venue deleted successfully"}

    # ------------------------------------------------------------------
    # Musician categories and event categories
    # ------------------------------------------------------------------

    def list_categories(self, event: bool = False) -> list[dict]:
        model, resource = (EventCategory, "event_categories") if event else (Category, "categories")
        return self._cached_list(
            reference_key(resource),
            lambda: self.repo.list_all(self.db, model),
            serialize_category,
        )

    def get_category(self, category_id: int, event: bool = False) -> dict:
        model = EventCategory if event else Category
        label = "Event category" if event else "Category"
        return serialize_category(self._get_or_404(model, category_id, label))

    def create_category(self, data: CategoryCreate, event: bool = False) -> dict:
        model, resource = (EventCategory, "event_categories") if event else (Category, "categories")
        record = self.repo.create(
            self.db, model(title=data.title.strip(), description=sanitize_text(data.description))
        )
        invalidate_reference(resource)
        return serialize_category(record)

    def update_category(self, category_id: int, data: CategoryUpdate, event: bool = False) -> dict:
        model, resource = (EventCategory, "event_categories") if event else (Category, "categories")
        label = "Event category" if event else "Category"
        record = self._get_or_404(model, category_id, label)
        record = self.repo.update(
            self.db,
            record,
            title=data.title.strip() if data.title else None,
            description=sanitize_text(data.description),
        )
        invalidate_reference(resource)
        if not event:
            # Musician payloads embed the category title
            invalidate_reference("musicians")
        return serialize_category(record)

    def delete_category(self, category_id: int, event: bool = False) -> dict:
        model, resource = (EventCategory, "event_categories") if event else (Category, "categories")
        label = "Event category" if event else "Category"
        record = self._get_or_404(model, category_id, label)
        in_use = (
            self.repo.event_category_in_use(self.db, category_id)
            if event
            else self.repo.category_in_use(self.db, category_id)
        )
        if in_use:
            raise HTTPException(status_code=409, detail=f"{label} is in use")
        self.repo.delete(self.db, record)
        invalidate_reference(resource)
        return {"message": f"{label} deleted successfully"}

    # ------------------------------------------------------------------
    # Musicians
    # ------------------------------------------------------------------

    def _check_category(self, category_id: Optional[int]) -> None:
        if category_id and not self.repo.category_exists(self.db, category_id):
            raise HTTPException(status_code=404, detail="Category not found")

    def _clean_email(self, email: Optional[str]) -> Optional[str]:
        try:
            return validate_email(email)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

    def list_musicians(self) -> list[dict]:
        return self._cached_list(
            reference_key("musicians"),
            lambda: self.repo.list_all(self.db, Musician, Musician.name),
            serialize_musician,
        )

    def get_musician(self, musician_id: int) -> dict:
        return serialize_musician(self._get_or_404(Musician, musician_id, "Musician"))

    def create_musician(self, data: MusicianCreate) -> dict:
        self._check_category(data.categoryId)
        musician = Musician(
            name=data.name.strip(),
            email=self._clean_email(data.email),
            phone=data.phone,
            category_id=data.categoryId,
            pay_rate=data.payRate,
            instruments=data.instruments,
            bio=sanitize_text(data.bio),
        )
        musician = self.repo.create(self.db, musician)
        invalidate_reference("musicians")
        logger.info(f"✅ Musician created: {musician.id} ({musician.name})")
        return serialize_musician(musician)

    def update_musician(self, musician_id: int, data: MusicianUpdate) -> dict:
        musician = self._get_or_404(Musician, musician_id, "Musician")
        self._check_category(data.categoryId)
        musician = self.repo.update(
            self.db,
            musician,
            name=data.name.strip() if data.name else None,
            email=self._clean_email(data.email),
            phone=data.phone,
            category_id=data.categoryId,
            pay_rate=data.payRate,
            instruments=data.instruments,
            bio=sanitize_text(data.bio),
        )
        if data.payRate is not None or data.categoryId is not None:
            self._refresh_fees(musician.id)
        invalidate_reference("musicians")
        return serialize_musician(musician)

    def delete_musician(self, musician_id: int) -> dict:
        musician = self._get_or_404(Musician, musician_id, "Musician")
        if self.repo.musician_has_assignments(self.db, musician_id):
            raise HTTPException(status_code=409, detail="Musician has planner assignments")
        self.repo.delete(self.db, musician)
        invalidate_reference("musicians")
        invalidate_reference("pay_rates")
        logger.info(f"🗑️ Musician deleted: {musician_id}")
        return {"message": "Musician deleted successfully"}

    # ------------------------------------------------------------------
    # Pay rates
    # ------------------------------------------------------------------

    def list_pay_rates(self, musician_id: Optional[int] = None) -> list[dict]:
        key = (
            reference_key("pay_rates", "musician", musician_id)
            if musician_id
            else reference_key("pay_rates")
        )
        return self._cached_list(
            key,
            lambda: self.repo.get_pay_rates(self.db, musician_id),
            serialize_pay_rate,
        )

    def create_pay_rate(self, data: PayRateCreate) -> dict:
        self._get_or_404(Musician, data.musicianId, "Musician")
        if not self.repo.event_category_exists(self.db, data.eventCategoryId):
            raise HTTPException(status_code=404, detail="Event category not found")
        if self.repo.get_pay_rate_for(self.db, data.musicianId, data.eventCategoryId):
            raise HTTPException(
                status_code=409,
                detail="Pay rate already exists for this musician and event category",
            )

        rate = MusicianPayRate(
            musician_id=data.musicianId,
            event_category_id=data.eventCategoryId,
            hourly_rate=data.hourlyRate,
            day_rate=data.dayRate,
            event_rate=data.eventRate,
            notes=sanitize_text(data.notes),
        )
        rate = self.repo.create(self.db, rate)
        self._refresh_fees(rate.musician_id)
        invalidate_reference("pay_rates")
        logger.info(
            f"💲 Pay rate set for musician {rate.musician_id} / event category "
            f"{rate.event_category_id}: {rate.hourly_rate}/h"
        )
        return serialize_pay_rate(rate)

    def update_pay_rate(self, rate_id: int, data: PayRateUpdate) -> dict:
        rate = self._get_or_404(MusicianPayRate, rate_id, "Pay rate")
        rate = self.repo.update(
            self.db,
            rate,
            hourly_rate=data.hourlyRate,
            day_rate=data.dayRate,
            event_rate=data.eventRate,
            notes=sanitize_text(data.notes),
        )
        self._refresh_fees(rate.musician_id)
        invalidate_reference("pay_rates")
        return serialize_pay_rate(rate)

    def delete_pay_rate(self, rate_id: int) -> dict:
        rate = self._get_or_404(MusicianPayRate, rate_id, "Pay rate")
        musician_id = rate.musician_id
        self.repo.delete(self.db, rate)
        self._refresh_fees(musician_id)
        invalidate_reference("pay_rates")
        return {"message": "Pay rate deleted successfully"}
