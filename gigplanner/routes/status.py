"""
API endpoints for status history, automation and analytics
"""

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_db
from ..models import Contract, MonthlyInvoice, PlannerAssignment, User
from ..services.status_automation import update_contract_statuses
from ..services.status_history import DEFAULT_HISTORY_LIMIT, get_status_history
from ..status import (
    ASSIGNMENT_STATUSES,
    CONTRACT_STATUSES,
    HISTORY_ENTITY_TYPES,
    INVOICE_STATUSES,
)

router = APIRouter(prefix="/status", tags=["status"])


class StatusSummary(BaseModel):
    contracts: dict[str, int]
    assignments: dict[str, int]
    invoices: dict[str, int]


class AutomationResult(BaseModel):
    signed_to_completed: int
    total_updated: int


class StatusHistoryEntry(BaseModel):
    id: int
    entityType: str
    entityId: int
    fromStatus: Optional[str] = None
    toStatus: str
    changedBy: Optional[str] = None
    notes: Optional[str] = None
    createdAt: datetime


def _count_by_status(db: Session, column, id_column, statuses) -> dict[str, int]:
    counts = {status: 0 for status in statuses}
    for status, count in db.query(column, func.count(id_column)).group_by(column).all():
        if status in counts:
            counts[status] = count
    return counts


@router.get("/analytics", response_model=StatusSummary)
async def get_status_analytics(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Get counts of contracts, assignments and invoices by status"""
    return StatusSummary(
        contracts=_count_by_status(db, Contract.status, Contract.id, CONTRACT_STATUSES),
        assignments=_count_by_status(
            db, PlannerAssignment.status, PlannerAssignment.id, ASSIGNMENT_STATUSES
        ),
        invoices=_count_by_status(db, MonthlyInvoice.status, MonthlyInvoice.id, INVOICE_STATUSES),
    )


@router.get("/history", response_model=list[StatusHistoryEntry])
async def get_history(
    entityType: str = Query(..., description="planner, assignment, contract or invoice"),
    entityId: int = Query(...),
    limit: int = Query(DEFAULT_HISTORY_LIMIT, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Status changes of one entity, newest first"""
    if entityType not in HISTORY_ENTITY_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown entity type: {entityType}")

    return [
        StatusHistoryEntry(
            id=entry.id,
            entityType=entry.entity_type,
            entityId=entry.entity_id,
            fromStatus=entry.from_status,
            toStatus=entry.to_status,
            changedBy=entry.changed_by,
            notes=entry.notes,
            createdAt=entry.created_at,
        )
        for entry in get_status_history(db, entityType, entityId, limit)
    ]


@router.post("/automation/run", response_model=AutomationResult)
async def run_status_automation(
    current_user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """
    Manually trigger status automation
    (In production, this should be run via scheduled job/cron)
    """
    result = update_contract_statuses(db)
    return AutomationResult(**result)
