"""Invoice service - monthly musician invoices built from attended assignments"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import MonthlyInvoice, MonthlyPlanner, PlannerAssignment
from ...services.status_history import record_status_change
from ...shared.validators import sanitize_text
from ...status import validate_invoice_transition
from ..fees import FeeService
from .repository import InvoiceRepository
from .schemas import InvoiceGenerationResult, InvoiceResponse

logger = logging.getLogger(__name__)


def serialize_invoice(invoice: MonthlyInvoice) -> InvoiceResponse:
    return InvoiceResponse(
        id=invoice.id,
        plannerId=invoice.planner_id,
        musicianId=invoice.musician_id,
        musicianName=invoice.musician.name if invoice.musician else None,
        month=invoice.month,
        year=invoice.year,
        totalSlots=invoice.total_slots,
        attendedSlots=invoice.attended_slots,
        totalAmount=invoice.total_amount,
        status=invoice.status,
        generatedAt=invoice.generated_at,
        paidAt=invoice.paid_at,
        notes=invoice.notes,
    )


class InvoiceService:
    """Service layer for monthly invoices"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = InvoiceRepository()
        self.fees = FeeService(db)

    def get_invoices(
        self, planner_id: Optional[int] = None, musician_id: Optional[int] = None
    ) -> list[MonthlyInvoice]:
        return self.repo.get_invoices(self.db, planner_id, musician_id)

    def get_invoice(self, invoice_id: int) -> MonthlyInvoice:
        invoice = self.repo.get_invoice_by_id(self.db, invoice_id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def generate_for_planner(self, planner_id: int) -> InvoiceGenerationResult:
        """
        Create or refresh one draft invoice per assigned musician.

        Only attended assignments are billed; finalized and paid invoices are
        left untouched.
        """
        planner = self.db.get(MonthlyPlanner, planner_id)
        if not planner:
            raise HTTPException(status_code=404, detail="Planner not found")

        grouped: dict[int, list[PlannerAssignment]] = defaultdict(list)
        for assignment in self.repo.get_planner_assignments(self.db, planner_id):
            grouped[assignment.musician_id].append(assignment)

        result = InvoiceGenerationResult(plannerId=planner_id)
        touched: list[MonthlyInvoice] = []

        for musician_id, assignments in grouped.items():
            invoice = self.repo.get_invoice_for(self.db, planner_id, musician_id)
            if invoice and invoice.status != "draft":
                result.skipped += 1
                continue

            attended = [a for a in assignments if a.status == "attended"]
            total = round(sum(self.fees.fee_for_assignment(a).amount for a in attended), 2)

            if invoice is None:
                invoice = MonthlyInvoice(
                    planner_id=planner_id,
                    musician_id=musician_id,
                    month=planner.month,
                    year=planner.year,
                    status="draft",
                )
                self.db.add(invoice)
                result.created += 1
            else:
                result.updated += 1

            invoice.total_slots = len(assignments)
            invoice.attended_slots = len(attended)
            invoice.total_amount = total
            invoice.generated_at = datetime.utcnow()
            touched.append(invoice)

        self.db.commit()
        for invoice in touched:
            self.db.refresh(invoice)
        result.invoices = [serialize_invoice(i) for i in touched]

        logger.info(
            f"🧾 Invoices for planner {planner_id}: created={result.created} "
            f"updated={result.updated} skipped={result.skipped}"
        )
        return result

    def _transition(
        self,
        invoice_id: int,
        new_status: str,
        notes: Optional[str],
        changed_by: Optional[str] = None,
    ) -> MonthlyInvoice:
        invoice = self.get_invoice(invoice_id)
        if invoice.status == new_status or not validate_invoice_transition(invoice.status, new_status):
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status transition from {invoice.status} to {new_status}",
            )
        record_status_change(
            self.db,
            "invoice",
            invoice.id,
            invoice.status,
            new_status,
            changed_by,
            sanitize_text(notes),
        )
        invoice.status = new_status
        if new_status == "paid":
            invoice.paid_at = datetime.utcnow()
        if notes is not None:
            invoice.notes = sanitize_text(notes)
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"🧾 Invoice {invoice.id} is now {new_status}")
        return invoice

    def finalize_invoice(
        self, invoice_id: int, notes: Optional[str] = None, changed_by: Optional[str] = None
    ) -> MonthlyInvoice:
        return self._transition(invoice_id, "finalized", notes, changed_by)

    def mark_paid(
        self, invoice_id: int, notes: Optional[str] = None, changed_by: Optional[str] = None
    ) -> MonthlyInvoice:
        return self._transition(invoice_id, "paid", notes, changed_by)
