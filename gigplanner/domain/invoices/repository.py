"""Invoice repository - Database operations for monthly invoices"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import MonthlyInvoice, PlannerAssignment, PlannerSlot


class InvoiceRepository:
    """Repository for monthly invoice database operations"""

    @staticmethod
    def get_invoices(
        db: Session, planner_id: Optional[int] = None, musician_id: Optional[int] = None
    ) -> list[MonthlyInvoice]:
        query = db.query(MonthlyInvoice)
        if planner_id:
            query = query.filter(MonthlyInvoice.planner_id == planner_id)
        if musician_id:
            query = query.filter(MonthlyInvoice.musician_id == musician_id)
        return query.order_by(MonthlyInvoice.generated_at.desc(), MonthlyInvoice.id.desc()).all()

    @staticmethod
    def get_invoice_by_id(db: Session, invoice_id: int) -> Optional[MonthlyInvoice]:
        return db.get(MonthlyInvoice, invoice_id)

    @staticmethod
    def get_invoice_for(db: Session, planner_id: int, musician_id: int) -> Optional[MonthlyInvoice]:
        return (
            db.query(MonthlyInvoice)
            .filter(
                MonthlyInvoice.planner_id == planner_id,
                MonthlyInvoice.musician_id == musician_id,
            )
            .first()
        )

    @staticmethod
    def get_planner_assignments(db: Session, planner_id: int) -> list[PlannerAssignment]:
        return (
            db.query(PlannerAssignment)
            .join(PlannerSlot)
            .filter(PlannerSlot.planner_id == planner_id)
            .order_by(PlannerAssignment.musician_id, PlannerSlot.date)
            .all()
        )
