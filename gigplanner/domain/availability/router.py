"""Availability router - musician calendars, share links and the public availability page"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...schemas import MessageResponse
from .schemas import (
    AvailabilityCalendarResponse,
    AvailabilityUpdate,
    AvailabilityUpdateResult,
    PublicAvailabilityResponse,
    ShareLinkCreate,
    ShareLinkResponse,
)
from .service import AvailabilityService, serialize_link

router = APIRouter(prefix="/musicians", tags=["Availability"])
public_router = APIRouter(prefix="/public/availability", tags=["Public Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.get("/{musician_id}/availability", response_model=AvailabilityCalendarResponse)
async def get_availability(
    musician_id: int,
    month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.get_calendar(musician_id, month, year)


@router.post("/{musician_id}/availability", response_model=AvailabilityUpdateResult)
async def update_availability(
    musician_id: int,
    data: AvailabilityUpdate,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    updated = service.update_availability(musician_id, data.dates, data.isAvailable)
    return AvailabilityUpdateResult(updatedDates=updated, musicianId=musician_id)


@router.post(
    "/{musician_id}/availability-share", response_model=ShareLinkResponse, status_code=201
)
async def create_share_link(
    musician_id: int,
    data: Optional[ShareLinkCreate] = None,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Create a link the musician can use to fill in their own availability"""
    link = service.create_share_link(musician_id, data.expiryDays if data else None)
    return serialize_link(link)


@router.get("/{musician_id}/availability-share", response_model=list[ShareLinkResponse])
async def list_share_links(
    musician_id: int,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return [serialize_link(link) for link in service.list_share_links(musician_id)]


@router.delete("/{musician_id}/availability-share/{link_id}", response_model=MessageResponse)
async def delete_share_link(
    musician_id: int,
    link_id: int,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.delete_share_link(musician_id, link_id)


# ============================================================================
# PUBLIC (token is the credential)
# ============================================================================


@public_router.get("/{token}", response_model=PublicAvailabilityResponse)
async def get_public_availability(
    token: str,
    month: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.get_public_calendar(token, month, year)


@public_router.post("/{token}", response_model=AvailabilityUpdateResult)
async def update_public_availability(
    token: str,
    data: AvailabilityUpdate,
    service: AvailabilityService = Depends(get_availability_service),
):
    musician_id, updated = service.update_public_availability(token, data.dates, data.isAvailable)
    return AvailabilityUpdateResult(updatedDates=updated, musicianId=musician_id)
