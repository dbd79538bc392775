"""Fee service - loads fee context from the database and applies the calculator"""

import logging
from types import SimpleNamespace
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ... import config
from ...models import Musician, MusicianPayRate, PlannerAssignment, PlannerSlot
from .calculator import RULE_OVERRIDE, FeeResult, resolve_fee

logger = logging.getLogger(__name__)


class FeeService:
    """Resolve fees for assignments using the musician pay-rate table"""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def event_category_for(slot: Optional[PlannerSlot]) -> int:
        """Slot's own event category, else the configured Club Performance category"""
        if slot is not None and slot.event_category_id:
            return slot.event_category_id
        return config.DEFAULT_EVENT_CATEGORY_ID

    def _pay_rates(self, musician_id: Optional[int]) -> list[MusicianPayRate]:
        if musician_id is None:
            return []
        return (
            self.db.query(MusicianPayRate).filter(MusicianPayRate.musician_id == musician_id).all()
        )

    def _resolve(self, assignment, musician, slot) -> FeeResult:
        musician_id = musician.id if musician else getattr(assignment, "musician_id", None)
        return resolve_fee(
            assignment,
            musician,
            slot,
            self._pay_rates(musician_id),
            self.event_category_for(slot),
            default_hours=config.DEFAULT_SLOT_HOURS,
            flat_minimum=config.FLAT_MINIMUM_FEE,
        )

    def preview_fee(
        self,
        musician: Optional[Musician],
        slot: Optional[PlannerSlot],
        actual_fee: Optional[float] = None,
    ) -> FeeResult:
        """Fee a musician would get for a slot, without touching any assignment"""
        candidate = SimpleNamespace(
            musician_id=musician.id if musician else None, actual_fee=actual_fee
        )
        return self._resolve(candidate, musician, slot)

    def fee_for_assignment(self, assignment: PlannerAssignment, refresh: bool = True) -> FeeResult:
        """
        Fee the musician is owed for an assignment.

        A hand-entered fee wins. Any other stored fee is only a cached copy:
        the fee is resolved from the current rates and, with refresh, the
        stored actual_fee is brought in line (the caller commits).
        """
        if assignment.fee_overridden and assignment.actual_fee and assignment.actual_fee > 0:
            return FeeResult(amount=float(assignment.actual_fee), rule=RULE_OVERRIDE)

        result = self.computed_fee(assignment)
        if refresh and assignment.actual_fee != result.amount:
            assignment.actual_fee = result.amount
        return result

    def computed_fee(self, assignment: PlannerAssignment) -> FeeResult:
        """Fee ignoring any stored actual_fee (used to refresh computed fees)"""
        musician = assignment.musician or self.db.get(Musician, assignment.musician_id)
        return self.preview_fee(musician, assignment.slot)

    def _refresh(self, assignments: Iterable[PlannerAssignment]) -> int:
        updated = 0
        for assignment in assignments:
            if assignment.fee_overridden:
                continue
            new_fee = self.computed_fee(assignment).amount
            if assignment.actual_fee != new_fee:
                logger.info(
                    f"💲 Recalculated fee for assignment {assignment.id}: "
                    f"{assignment.actual_fee} → {new_fee}"
                )
                assignment.actual_fee = new_fee
                updated += 1
        return updated

    def recalculate_for_slot(self, slot: PlannerSlot) -> int:
        """
        Refresh computed fees after a slot's times changed.
        Manual overrides are left as entered. Returns the number of fees updated.
        """
        return self._refresh(slot.assignments)

    def recalculate_for_musician(self, musician_id: int) -> int:
        """Refresh computed fees after one of the musician's rates changed"""
        assignments = (
            self.db.query(PlannerAssignment)
            .filter(
                PlannerAssignment.musician_id == musician_id,
                PlannerAssignment.fee_overridden.is_(False),
            )
            .all()
        )
        return self._refresh(assignments)
