"""
Automated status transitions for contracts
Handles signed (and partially-signed) → completed once the planner month is over
"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ..models import Contract, MonthlyPlanner
from ..shared.dates import month_has_ended
from ..status import SIGNED_CONTRACT_STATUSES, validate_contract_transition
from .status_history import SYSTEM_ACTOR, record_status_change

logger = logging.getLogger(__name__)


def update_contract_statuses(db: Session, today: Optional[date] = None) -> dict:
    """
    Complete signed contracts whose planner month has ended
    Should be run as a scheduled job (e.g., daily cron)

    Contract statuses: draft → sent → signed/partially-signed/rejected → completed;
    cancelled is manual

    Returns:
        dict: Summary of status changes made
    """
    summary = {"signed_to_completed": 0, "total_updated": 0}
    today = today or date.today()

    try:
        signed_contracts = (
            db.query(Contract)
            .join(MonthlyPlanner, Contract.planner_id == MonthlyPlanner.id)
            .filter(Contract.status.in_(SIGNED_CONTRACT_STATUSES))
            .all()
        )

        for contract in signed_contracts:
            planner = contract.planner
            if not month_has_ended(planner.month, planner.year, today):
                continue
            if validate_contract_transition(contract.status, "completed"):
                previous = contract.status
                record_status_change(
                    db, "contract", contract.id, previous, "completed", SYSTEM_ACTOR
                )
                contract.status = "completed"
                summary["signed_to_completed"] += 1
                logger.info(f"✅ Contract {contract.id} transitioned: {previous} → completed")

        if summary["signed_to_completed"] > 0:
            db.commit()
            summary["total_updated"] = summary["signed_to_completed"]
            logger.info(f"📊 Status automation summary: {summary}")
        else:
            logger.debug("ℹ️ No contract status updates needed")

        return summary

    except Exception as e:
        logger.error(f"❌ Error updating contract statuses: {str(e)}")
        db.rollback()
        raise
