"""Invoice router - monthly musician invoices"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...services.status_history import admin_actor
from .schemas import InvoiceGenerationResult, InvoiceResponse, InvoiceStatusUpdate
from .service import InvoiceService, serialize_invoice

router = APIRouter(prefix="/monthly-invoices", tags=["Invoices"])
planner_invoices_router = APIRouter(prefix="/planners", tags=["Invoices"])


def get_invoice_service(db: Session = Depends(get_db)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(db)


@planner_invoices_router.post("/{planner_id}/generate-invoices", response_model=InvoiceGenerationResult)
async def generate_invoices(
    planner_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    """Create or refresh draft invoices from attended assignments"""
    return service.generate_for_planner(planner_id)


@router.get("", response_model=list[InvoiceResponse])
async def list_invoices(
    plannerId: Optional[int] = Query(None),
    musicianId: Optional[int] = Query(None),
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return [serialize_invoice(i) for i in service.get_invoices(plannerId, musicianId)]


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return serialize_invoice(service.get_invoice(invoice_id))


@router.post("/{invoice_id}/finalize", response_model=InvoiceResponse)
async def finalize_invoice(
    invoice_id: int,
    data: Optional[InvoiceStatusUpdate] = None,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return serialize_invoice(
        service.finalize_invoice(
            invoice_id, data.notes if data else None, admin_actor(current_user)
        )
    )


@router.post("/{invoice_id}/mark-paid", response_model=InvoiceResponse)
async def mark_invoice_paid(
    invoice_id: int,
    data: Optional[InvoiceStatusUpdate] = None,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service),
):
    return serialize_invoice(
        service.mark_paid(invoice_id, data.notes if data else None, admin_actor(current_user))
    )
