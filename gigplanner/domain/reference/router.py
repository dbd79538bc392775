"""Reference data router - venues, categories, event categories, musicians, pay rates"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...schemas import MessageResponse
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
from .service import ReferenceService

router = APIRouter(tags=["Reference Data"])


def get_reference_service(db: Session = Depends(get_db)) -> ReferenceService:
    """Dependency injection for ReferenceService"""
    return ReferenceService(db)


# ============================================================================
# VENUES
# ============================================================================


@router.get("/venues", response_model=list[VenueResponse])
async def list_venues(
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.list_venues()


@router.get("/venues/{venue_id}", response_model=VenueResponse)
async def get_venue(
    venue_id: int,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.get_venue(venue_id)


@router.post("/venues", response_model=VenueResponse, status_code=201)
async def create_venue(
    data: VenueCreate,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.create_venue(data)


@router.put("/venues/{venue_id}", response_model=VenueResponse)
async def update_venue(
    venue_id: int,
    data: VenueUpdate,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.update_venue(venue_id, data)


@router.delete("/venues/{venue_id}", response_model=MessageResponse)
async def delete_venue(
    venue_id: int,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.delete_venue(venue_id)


# ============================================================================
# MUSICIAN CATEGORIES
# ============================================================================


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.list_categories()


@router.get("/categories/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: int,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.get_category(category_id)


@router.post("/categories", response_model=CategoryResponse, status_code=201)
async def create_category(
    data: CategoryCreate,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.create_category(data)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    data: CategoryUpdate,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.update_category(category_id, data)


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: int,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.delete_category(category_id)


# ============================================================================
# EVENT CATEGORIES
# ============================================================================


@router.get("/event-categories", response_model=list[CategoryResponse])
async def list_event_categories(
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.list_categories(event=True)


@router.get("/event-categories/{category_id}", response_model=CategoryResponse)
async def get_event_category(
    category_id: int,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.get_category(category_id, event=True)


@router.post("/event-categories", response_model=CategoryResponse, status_code=201)
async def create_event_category(
    data: CategoryCreate,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.create_category(data, event=True)


@router.put("/event-categories/{category_id}", response_model=CategoryResponse)
async def update_event_category(
    category_id: int,
    data: CategoryUpdate,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.update_category(category_id, data, event=True)


@router.delete("/event-categories/{category_id}", response_model=MessageResponse)
async def delete_event_category(
    category_id: int,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.delete_category(category_id, event=True)


# ============================================================================
# MUSICIANS
# ============================================================================


@router.get("/musicians", response_model=list[MusicianResponse])
async def list_musicians(
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.list_musicians()


@router.get("/musicians/{musician_id}", response_model=MusicianResponse)
async def get_musician(
    musician_id: int,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.get_musician(musician_id)


@router.post("/musicians", response_model=MusicianResponse, status_code=201)
async def create_musician(
    data: MusicianCreate,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.create_musician(data)


@router.put("/musicians/{musician_id}", response_model=MusicianResponse)
async def update_musician(
    musician_id: int,
    data: MusicianUpdate,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.update_musician(musician_id, data)


@router.delete("/musicians/{musician_id}", response_model=MessageResponse)
async def delete_musician(
    musician_id: int,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.delete_musician(musician_id)


# ============================================================================
# PAY RATES
# ============================================================================


@router.get("/musician-pay-rates", response_model=list[PayRateResponse])
async def list_pay_rates(
    musicianId: Optional[int] = Query(None, description="Filter rates by musician"),
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.list_pay_rates(musicianId)


@router.post("/musician-pay-rates", response_model=PayRateResponse, status_code=201)
async def create_pay_rate(
    data: PayRateCreate,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.create_pay_rate(data)


@router.put("/musician-pay-rates/{rate_id}", response_model=PayRateResponse)
async def update_pay_rate(
    rate_id: int,
    data: PayRateUpdate,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.update_pay_rate(rate_id, data)


@router.delete("/musician-pay-rates/{rate_id}", response_model=MessageResponse)
async def delete_pay_rate(
    rate_id: int,
    current_user: User = Depends(get_current_user),
    service: ReferenceService = Depends(get_reference_service),
):
    return service.delete_pay_rate(rate_id)
