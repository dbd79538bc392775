"""
Status history - audit trail of status changes

Rows are added to the caller's session and committed with the change they
describe.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..models import StatusHistory, User

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"
DEFAULT_HISTORY_LIMIT = 50


def admin_actor(user: Optional[User]) -> str:
    if user is None:
        return "admin"
    return f"admin:{user.username}"


def musician_actor(musician_id: int) -> str:
    return f"musician:{musician_id}"


def record_status_change(
    db: Session,
    entity_type: str,
    entity_id: int,
    from_status: Optional[str],
    to_status: str,
    changed_by: Optional[str] = None,
    notes: Optional[str] = None,
) -> Optional[StatusHistory]:
    """Add a history row for a status change; no-op when the status did not change"""
    if from_status == to_status:
        return None
    entry = StatusHistory(
        entity_type=entity_type,
        entity_id=entity_id,
        from_status=from_status,
        to_status=to_status,
        changed_by=changed_by,
        notes=notes,
    )
    db.add(entry)
    logger.debug(f"📜 {entity_type} {entity_id}: {from_status} → {to_status} by {changed_by}")
    return entry


def get_status_history(
    db: Session, entity_type: str, entity_id: int, limit: int = DEFAULT_HISTORY_LIMIT
) -> list[StatusHistory]:
    return (
        db.query(StatusHistory)
        .filter(StatusHistory.entity_type == entity_type, StatusHistory.entity_id == entity_id)
        .order_by(StatusHistory.created_at.desc(), StatusHistory.id.desc())
        .limit(limit)
        .all()
    )
