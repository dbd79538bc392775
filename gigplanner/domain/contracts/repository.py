"""Contract repository - Database operations for contracts"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Contract, PlannerAssignment, PlannerSlot
from ...status import OPEN_CONTRACT_STATUSES


class ContractRepository:
    """Repository for contract database operations"""

    @staticmethod
    def get_contracts(
        db: Session,
        planner_id: Optional[int] = None,
        musician_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[Contract]:
        """Get contracts with optional filters"""
        query = db.query(Contract)
        if planner_id:
            query = query.filter(Contract.planner_id == planner_id)
        if musician_id:
            query = query.filter(Contract.musician_id == musician_id)
        if status:
            query = query.filter(Contract.status == status)
        return query.order_by(Contract.created_at.desc(), Contract.id.desc()).all()

    @staticmethod
    def get_contract_by_id(db: Session, contract_id: int) -> Optional[Contract]:
        return db.get(Contract, contract_id)

    @staticmethod
    def get_contract_by_token(db: Session, token: str) -> Optional[Contract]:
        return db.query(Contract).filter(Contract.token == token).first()

    @staticmethod
    def get_open_contract(db: Session, planner_id: int, musician_id: int) -> Optional[Contract]:
        """Draft, sent or signed contract already binding the musician for this planner"""
        return (
            db.query(Contract)
            .filter(
                Contract.planner_id == planner_id,
                Contract.musician_id == musician_id,
                Contract.status.in_(OPEN_CONTRACT_STATUSES),
            )
            .first()
        )

    @staticmethod
    def get_planner_assignments(db: Session, planner_id: int) -> list[PlannerAssignment]:
        return (
            db.query(PlannerAssignment)
            .join(PlannerSlot)
            .filter(PlannerSlot.planner_id == planner_id)
            .order_by(PlannerSlot.date, PlannerSlot.start_time, PlannerAssignment.id)
            .all()
        )

    @staticmethod
    def get_contract_assignments(db: Session, contract: Contract) -> list[PlannerAssignment]:
        ids = [line.assignment_id for line in contract.lines if line.assignment_id]
        if not ids:
            return []
        return db.query(PlannerAssignment).filter(PlannerAssignment.id.in_(ids)).all()
