"""Planner repository - Database operations for planners, slots and assignments"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import (
    Contract,
    ContractLine,
    MonthlyInvoice,
    MonthlyPlanner,
    PlannerAssignment,
    PlannerSlot,
)


class PlannerRepository:
    """Repository for planner database operations"""

    # ------------------------------------------------------------------
    # Planners
    # ------------------------------------------------------------------

    @staticmethod
    def get_planners(db: Session, year: Optional[int] = None) -> list[MonthlyPlanner]:
        query = db.query(MonthlyPlanner)
        if year:
            query = query.filter(MonthlyPlanner.year == year)
        return query.order_by(MonthlyPlanner.year.desc(), MonthlyPlanner.month.desc()).all()

    @staticmethod
    def get_planner_by_id(db: Session, planner_id: int) -> Optional[MonthlyPlanner]:
        return db.get(MonthlyPlanner, planner_id)

    @staticmethod
    def get_planner_by_month(db: Session, month: int, year: int) -> Optional[MonthlyPlanner]:
        return (
            db.query(MonthlyPlanner)
            .filter(MonthlyPlanner.month == month, MonthlyPlanner.year == year)
            .first()
        )

    @staticmethod
    def planner_has_documents(db: Session, planner_id: int) -> bool:
        """Contracts or invoices reference the planner"""
        contract = db.query(Contract.id).filter(Contract.planner_id == planner_id).first()
        invoice = (
            db.query(MonthlyInvoice.id).filter(MonthlyInvoice.planner_id == planner_id).first()
        )
        return contract is not None or invoice is not None

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    @staticmethod
    def get_slots(db: Session, planner_id: Optional[int] = None) -> list[PlannerSlot]:
        query = db.query(PlannerSlot).options(joinedload(PlannerSlot.venue))
        if planner_id:
            query = query.filter(PlannerSlot.planner_id == planner_id)
        return query.order_by(PlannerSlot.date, PlannerSlot.venue_id).all()

    @staticmethod
    def get_slot_by_id(db: Session, slot_id: int) -> Optional[PlannerSlot]:
        return db.get(PlannerSlot, slot_id)

    @staticmethod
    def find_slot(db: Session, planner_id: int, day: date, venue_id: int) -> Optional[PlannerSlot]:
        return (
            db.query(PlannerSlot)
            .filter(
                PlannerSlot.planner_id == planner_id,
                PlannerSlot.date == day,
                PlannerSlot.venue_id == venue_id,
            )
            .first()
        )

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    @staticmethod
    def get_assignments(
        db: Session,
        planner_id: Optional[int] = None,
        slot_id: Optional[int] = None,
        musician_id: Optional[int] = None,
    ) -> list[PlannerAssignment]:
        query = db.query(PlannerAssignment).join(PlannerSlot)
        if planner_id:
            query = query.filter(PlannerSlot.planner_id == planner_id)
        if slot_id:
            query = query.filter(PlannerAssignment.slot_id == slot_id)
        if musician_id:
            query = query.filter(PlannerAssignment.musician_id == musician_id)
        return query.order_by(PlannerSlot.date, PlannerSlot.start_time, PlannerAssignment.id).all()

    @staticmethod
    def get_assignment_by_id(db: Session, assignment_id: int) -> Optional[PlannerAssignment]:
        return db.get(PlannerAssignment, assignment_id)

    @staticmethod
    def find_assignment(
        db: Session, slot_id: int, musician_id: int
    ) -> Optional[PlannerAssignment]:
        return (
            db.query(PlannerAssignment)
            .filter(
                PlannerAssignment.slot_id == slot_id,
                PlannerAssignment.musician_id == musician_id,
            )
            .first()
        )

    @staticmethod
    def detach_contract_lines(db: Session, assignment_id: int) -> None:
        """Keep frozen contract lines but drop their link to a deleted assignment"""
        db.query(ContractLine).filter(ContractLine.assignment_id == assignment_id).update(
            {ContractLine.assignment_id: None}, synchronize_session=False
        )
