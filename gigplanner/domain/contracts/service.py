"""Contract service - Business logic for contract generation, sending and e-signature"""

import html
import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...config import COMPANY_NAME, CONTRACT_TOKEN_TTL_DAYS, FRONTEND_URL
from ...email_service import (
    EmailDeliveryError,
    EmailNotConfiguredError,
    is_email_configured,
    send_contract_email,
    send_contract_response_notification,
)
from ...models import Contract, ContractLine, MonthlyPlanner, PlannerAssignment
from ...schemas import BulkResult
from ...security_utils import generate_secure_token, is_expired
from ...services.status_history import musician_actor, record_status_change
from ...shared.validators import sanitize_text
from ...status import (
    CONTRACT_LINE_STATUSES,
    validate_assignment_transition,
    validate_contract_transition,
)
from ..contract_templates.service import ContractTemplateService
from ..fees import FeeService
from .pdf_service import ContractPDFService
from .rendering import contract_period, default_terms, render_contract_markdown
from .repository import ContractRepository
from .schemas import (
    BatchItemResult,
    BatchResponseRequest,
    ContractLineResponse,
    ContractResponse,
    ContractSummary,
    GenerateContractsRequest,
    PublicContractResponse,
    PublicMusician,
)

logger = logging.getLogger(__name__)


def serialize_contract(contract: Contract) -> ContractResponse:
    musician = contract.musician
    return ContractResponse(
        id=contract.id,
        publicId=contract.public_id,
        plannerId=contract.planner_id,
        templateId=contract.template_id,
        periodLabel=contract_period(contract),
        musicianId=contract.musician_id,
        musicianName=musician.name if musician else None,
        musicianEmail=musician.email if musician else None,
        status=contract.status,
        amount=contract.amount,
        terms=contract.terms,
        tokenExpiresAt=contract.token_expires_at,
        musicianSignature=contract.musician_signature,
        companySignature=contract.company_signature,
        responseNotes=contract.response_notes,
        sentAt=contract.sent_at,
        respondedAt=contract.responded_at,
        createdAt=contract.created_at,
        lines=[serialize_line(line) for line in contract.lines],
    )


def serialize_line(line: ContractLine) -> ContractLineResponse:
    return ContractLineResponse(
        id=line.id,
        assignmentId=line.assignment_id,
        date=line.date,
        venueName=line.venue_name,
        startTime=line.start_time,
        endTime=line.end_time,
        fee=line.fee,
        status=line.status or "pending",
        responseNotes=line.response_notes,
        respondedAt=line.responded_at,
    )


def signing_url(token: str) -> str:
    return f"{FRONTEND_URL.rstrip('/')}/contracts/respond/{token}"

def summarize_lines(contract: Contract) -> ContractSummary:
    counts = {status: 0 for status in CONTRACT_LINE_STATUSES}
    for line in contract.lines:
        status = line.status or "pending"
        counts[status] = counts.get(status, 0) + 1
    return ContractSummary(
        contractId=contract.id,
        status=contract.status,
        totalDates=len(contract.lines),
        acceptedDates=counts["accepted"],
        rejectedDates=counts["rejected"],
        pendingDates=counts["pending"],
    )


def outcome_for_lines(lines: list[ContractLine]) -> str:
    """Contract status once every date is answered"""
    accepted = sum(1 for line in lines if line.status == "accepted")
    if accepted == len(lines):
        return "signed"
    if accepted == 0:
        return "rejected"
    return "partially-signed"


class ContractService:
    """Service layer for contract business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContractRepository()
        self.fees = FeeService(db)
        self.templates = ContractTemplateService(db)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_contracts(
        self,
        planner_id: Optional[int] = None,
        musician_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> list[Contract]:
        return self.repo.get_contracts(self.db, planner_id, musician_id, status)

    def get_contract(self, contract_id: int) -> Contract:
        contract = self.repo.get_contract_by_id(self.db, contract_id)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        return contract

    def get_summary(self, contract_id: int) -> ContractSummary:
        return summarize_lines(self.get_contract(contract_id))

    def render_content(self, contract_id: int) -> str:
        return render_contract_markdown(self.get_contract(contract_id))

    def generate_pdf(self, contract_id: int) -> bytes:
        return ContractPDFService(self.get_contract(contract_id)).generate()

    # ------------------------------------------------------------------
    # Status bookkeeping
    # ------------------------------------------------------------------

    def _set_contract_status(
        self,
        contract: Contract,
        new_status: str,
        changed_by: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> None:
        record_status_change(
            self.db, "contract", contract.id, contract.status, new_status, changed_by, notes
        )
        contract.status = new_status

    def _move_assignment(
        self, assignment: PlannerAssignment, new_status: str, changed_by: Optional[str]
    ) -> None:
        if not validate_assignment_transition(assignment.status, new_status):
            logger.debug(
                f"Assignment {assignment.id} stays {assignment.status} (not → {new_status})"
            )
            return
        record_status_change(
            self.db, "assignment", assignment.id, assignment.status, new_status, changed_by
        )
        assignment.status = new_status

    def _set_assignment_status(
        self,
        contract: Contract,
        new_status: str,
        changed_by: Optional[str] = None,
        lines: Optional[list[ContractLine]] = None,
    ) -> None:
        """Move the assignments behind the given lines (default: all), skipping invalid transitions"""
        if lines is None:
            assignments = self.repo.get_contract_assignments(self.db, contract)
        else:
            ids = [line.assignment_id for line in lines if line.assignment_id]
            assignments = [
                a for a in self.repo.get_contract_assignments(self.db, contract) if a.id in ids
            ]
        for assignment in assignments:
            self._move_assignment(assignment, new_status, changed_by)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _resolve_terms(self, data: GenerateContractsRequest) -> tuple[str, Optional[int]]:
        """Explicit terms, else the chosen template, else the default template, else standard terms"""
        if data.terms:
            return sanitize_text(data.terms), None
        template = self.templates.resolve(data.templateId)
        if template:
            return template.content, template.id
        return default_terms(), None

    def _build_contract(
        self,
        planner_id: int,
        musician_id: int,
        assignments: list[PlannerAssignment],
        terms: str,
        template_id: Optional[int] = None,
    ) -> Contract:
        contract = Contract(
            planner_id=planner_id,
            musician_id=musician_id,
            template_id=template_id,
            status="draft",
            terms=terms,
        )
        total = 0.0
        for assignment in sorted(assignments, key=lambda a: (a.slot.date, a.slot.start_time or "")):
            slot = assignment.slot
            fee = self.fees.fee_for_assignment(assignment).amount
            total += fee
            contract.lines.append(
                ContractLine(
                    assignment_id=assignment.id,
                    date=slot.date,
                    venue_name=slot.venue.name if slot.venue else None,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    fee=fee,
                    status="pending",
                )
            )
        contract.amount = round(total, 2)
        return contract

    async def generate_for_planner(
        self,
        planner_id: int,
        data: GenerateContractsRequest,
        changed_by: Optional[str] = None,
    ) -> BulkResult:
        """
        Create one draft contract per assigned musician, optionally sending each.

        Musicians who already hold an open contract for the planner are skipped.
        Failures are counted per musician and never abort the batch.
        """
        planner = self.db.get(MonthlyPlanner, planner_id)
        if not planner:
            raise HTTPException(status_code=404, detail="Planner not found")
        if planner.status != "finalized":
            raise HTTPException(
                status_code=400, detail="Planner must be finalized before generating contracts"
            )
        terms, template_id = self._resolve_terms(data)

        grouped: dict[int, list[PlannerAssignment]] = defaultdict(list)
        for assignment in self.repo.get_planner_assignments(self.db, planner_id):
            grouped[assignment.musician_id].append(assignment)

        musician_ids = data.musicianIds if data.musicianIds else list(grouped.keys())
        result = BulkResult(emailEnabled=is_email_configured())
        logger.info(f"📝 Generating contracts for planner {planner_id}: {len(musician_ids)} musician(s)")

        for musician_id in musician_ids:
            assignments = grouped.get(musician_id)
            if not assignments:
                result.skipped += 1
                result.details.append(
                    {"musicianId": musician_id, "status": "skipped", "reason": "No assignments"}
                )
                continue

            existing = self.repo.get_open_contract(self.db, planner_id, musician_id)
            if existing:
                result.skipped += 1
                result.details.append(
                    {
                        "musicianId": musician_id,
                        "status": "skipped",
                        "reason": f"Open contract {existing.id} ({existing.status}) already exists",
                        "contractId": existing.id,
                    }
                )
                continue

            try:
                contract = self._build_contract(
                    planner_id, musician_id, assignments, terms, template_id
                )
                self.db.add(contract)
                self.db.flush()
                record_status_change(self.db, "contract", contract.id, None, "draft", changed_by)
                self.db.commit()
                self.db.refresh(contract)
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"❌ Failed to create contract for musician {musician_id}: {e}")
                result.failed += 1
                result.details.append(
                    {"musicianId": musician_id, "status": "failed", "reason": str(e)}
                )
                continue

            result.created += 1
            detail = {
                "musicianId": musician_id,
                "status": "created",
                "contractId": contract.id,
                "amount": contract.amount,
            }

            if data.send:
                try:
                    _, email_sent, _ = await self.send_contract(
                        contract.id, data.message, changed_by
                    )
                    result.sent += 1
                    detail.update({"status": "sent", "emailSent": email_sent})
                except (HTTPException, SQLAlchemyError) as e:
                    self.db.rollback()
                    logger.error(f"❌ Failed to send contract {contract.id}: {e}")
                    result.failed += 1
                    detail.update({"status": "failed", "reason": str(e)})

            result.details.append(detail)

        logger.info(
            f"✅ Contract generation for planner {planner_id}: created={result.created} "
            f"sent={result.sent} skipped={result.skipped} failed={result.failed}"
        )
        return result

    # ------------------------------------------------------------------
    # Sending
    # ------------------------------------------------------------------

    async def send_contract(
        self, contract_id: int, message: Optional[str] = None, changed_by: Optional[str] = None
    ) -> tuple[Contract, bool, str]:
        """
        Issue a fresh single-use signing token and email the link.

        Returns (contract, email_sent, signing_url). Email failures are
        reported through email_sent and never undo the send.
        """
        contract = self.get_contract(contract_id)
        if contract.status not in ("draft", "sent") or not validate_contract_transition(
            contract.status, "sent"
        ):
            raise HTTPException(
                status_code=400,
                detail=f"Only draft or sent contracts can be sent (status: {contract.status})",
            )

        now = datetime.utcnow()
        contract.token = generate_secure_token()
        contract.token_expires_at = now + timedelta(days=CONTRACT_TOKEN_TTL_DAYS)
        self._set_contract_status(contract, "sent", changed_by)
        contract.sent_at = now
        # Dates already answered on an earlier link keep their answer
        pending = [line for line in contract.lines if (line.status or "pending") == "pending"]
        self._set_assignment_status(contract, "contract-sent", changed_by, lines=pending)
        self.db.commit()
        self.db.refresh(contract)

        url = signing_url(contract.token)
        logger.info(f"📤 Contract {contract.id} sent to musician {contract.musician_id}")

        email_sent = False
        musician = contract.musician
        if not musician or not musician.email:
            logger.warning(f"⚠️ Musician {contract.musician_id} has no email - link not emailed")
            return contract, email_sent, url

        lines = [
            {
                "date": line.date.strftime("%a %d %b %Y"),
                "venueName": line.venue_name,
                "startTime": line.start_time,
                "endTime": line.end_time,
                "fee": line.fee,
            }
            for line in contract.lines
        ]
        try:
            await send_contract_email(
                to=musician.email,
                musician_name=musician.name,
                period_label=contract_period(contract),
                lines=lines,
                total=contract.amount,
                signing_url=url,
                expires_on=contract.token_expires_at.strftime("%B %d, %Y"),
                message=message,
            )
            email_sent = True
        except (EmailNotConfiguredError, EmailDeliveryError) as e:
            logger.error(f"❌ Contract {contract.id} email failed: {e}")

        return contract, email_sent, url

    # ------------------------------------------------------------------
    # Manual status changes
    # ------------------------------------------------------------------

    def _transition(self, contract: Contract, new_status: str, changed_by: Optional[str]) -> None:
        if contract.status == new_status or not validate_contract_transition(
            contract.status, new_status
        ):
            raise HTTPException(
                status_code=400,
                detail=f"Invalid status transition from {contract.status} to {new_status}",
            )
        self._set_contract_status(contract, new_status, changed_by)

    def cancel_contract(self, contract_id: int, changed_by: Optional[str] = None) -> Contract:
        contract = self.get_contract(contract_id)
        self._transition(contract, "cancelled", changed_by)
        # Release the dates so a new contract can be generated for them
        self._set_assignment_status(contract, "scheduled", changed_by)
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"🚫 Contract {contract.id} cancelled")
        return contract

    def complete_contract(self, contract_id: int, changed_by: Optional[str] = None) -> Contract:
        contract = self.get_contract(contract_id)
        self._transition(contract, "completed", changed_by)
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"✅ Contract {contract.id} completed")
        return contract

    # ------------------------------------------------------------------
    # Public signing link
    # ------------------------------------------------------------------

    def _contract_for_token(self, token: str) -> Contract:
        contract = self.repo.get_contract_by_token(self.db, token)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        return contract

    def _open_for_response(self, token: str) -> Contract:
        contract = self._contract_for_token(token)
        if contract.status != "sent":
            raise HTTPException(
                status_code=409, detail=f"This contract has already been {contract.status}"
            )
        if is_expired(contract.token_expires_at):
            raise HTTPException(status_code=410, detail="This contract link has expired")
        return contract

    def get_public_contract(self, token: str) -> PublicContractResponse:
        contract = self._contract_for_token(token)
        if contract.status == "sent" and is_expired(contract.token_expires_at):
            raise HTTPException(status_code=410, detail="This contract link has expired")

        musician = contract.musician
        return PublicContractResponse(
            id=contract.id,
            periodLabel=contract_period(contract),
            status=contract.status,
            amount=contract.amount,
            musician=PublicMusician(id=musician.id, name=musician.name),
            lines=[serialize_line(line) for line in contract.lines],
            content=render_contract_markdown(contract),
            tokenExpiresAt=contract.token_expires_at,
            canRespond=contract.status == "sent",
        )

    @staticmethod
    def _store_signature(contract: Contract, signature: Optional[str], required: bool) -> None:
        """Keep a new typed signature (escaped); accepting needs one, given now or earlier"""
        signature = (signature or "").strip()
        if signature:
            contract.musician_signature = sanitize_text(signature, max_length=255)
        elif required and not contract.musician_signature:
            raise HTTPException(status_code=400, detail="A signature is required to accept")

    def _answer_line(
        self, contract: Contract, line: ContractLine, status: str, notes: Optional[str]
    ) -> None:
        line.status = status
        line.response_notes = sanitize_text(notes)
        line.responded_at = datetime.utcnow()
        self._set_assignment_status(
            contract,
            "contract-signed" if status == "accepted" else "contract-rejected",
            musician_actor(contract.musician_id),
            lines=[line],
        )

    def _finish_if_answered(self, contract: Contract, notes: Optional[str] = None) -> bool:
        """Settle the contract status once no date is pending; returns True when settled"""
        if not contract.lines or any(
            (line.status or "pending") == "pending" for line in contract.lines
        ):
            return False
        outcome = outcome_for_lines(contract.lines)
        self._set_contract_status(contract, outcome, musician_actor(contract.musician_id), notes)
        contract.responded_at = datetime.utcnow()
        if outcome != "rejected":
            contract.company_signature = COMPANY_NAME
        return True

    async def _notify_response(self, contract: Contract) -> None:
        try:
            await send_contract_response_notification(
                musician_name=contract.musician.name if contract.musician else "Unknown",
                period_label=contract_period(contract),
                verdict=contract.status,
                signature=html.unescape(contract.musician_signature)
                if contract.musician_signature
                else None,
                notes=html.unescape(contract.response_notes) if contract.response_notes else None,
            )
        except (EmailNotConfiguredError, EmailDeliveryError) as e:
            logger.error(f"❌ Response notification for contract {contract.id} failed: {e}")

    async def respond(
        self,
        token: str,
        accepted: bool,
        signature: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Contract:
        """Answer every remaining date at once; the token cannot be used again afterwards"""
        contract = self._open_for_response(token)
        self._store_signature(contract, signature, required=accepted)

        contract.response_notes = sanitize_text(notes)
        for line in contract.lines:
            if (line.status or "pending") == "pending":
                self._answer_line(contract, line, "accepted" if accepted else "rejected", None)
        if not self._finish_if_answered(contract, contract.response_notes):
            # Contract without dates
            self._set_contract_status(
                contract,
                "signed" if accepted else "rejected",
                musician_actor(contract.musician_id),
            )
            contract.responded_at = datetime.utcnow()
            if accepted:
                contract.company_signature = COMPANY_NAME
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"✍️ Contract {contract.id} {contract.status} by musician {contract.musician_id}")

        await self._notify_response(contract)
        return contract

    async def respond_to_date(
        self,
        token: str,
        line_id: int,
        status: str,
        notes: Optional[str] = None,
        signature: Optional[str] = None,
    ) -> tuple[Contract, ContractLine]:
        """Accept or reject one performance date on a sent contract"""
        contract = self._open_for_response(token)
        line = next((line for line in contract.lines if line.id == line_id), None)
        if line is None:
            raise HTTPException(status_code=404, detail="Date not found on this contract")
        if (line.status or "pending") != "pending":
            raise HTTPException(
                status_code=409, detail=f"This date has already been {line.status}"
            )
        self._store_signature(contract, signature, required=status == "accepted")

        self._answer_line(contract, line, status, notes)
        settled = self._finish_if_answered(contract)
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"🗓️ Contract {contract.id} date {line.id} {status}")

        if settled:
            logger.info(f"✍️ Contract {contract.id} {contract.status} by musician {contract.musician_id}")
            await self._notify_response(contract)
        return contract, line

    async def respond_batch(
        self, token: str, data: BatchResponseRequest
    ) -> tuple[Contract, list[BatchItemResult]]:
        """
        Answer several dates in one request.

        Unknown or already answered dates are reported per item and do not
        stop the others.
        """
        contract = self._open_for_response(token)
        accepting = any(item.status == "accepted" for item in data.responses)
        self._store_signature(contract, data.signature, required=accepting)

        lines_by_id = {line.id: line for line in contract.lines}
        results: list[BatchItemResult] = []
        for item in data.responses:
            line = lines_by_id.get(item.lineId)
            if line is None:
                results.append(
                    BatchItemResult(lineId=item.lineId, success=False, message="Date not found")
                )
                continue
            if (line.status or "pending") != "pending":
                results.append(
                    BatchItemResult(
                        lineId=item.lineId,
                        success=False,
                        message=f"Already {line.status}",
                    )
                )
                continue
            self._answer_line(contract, line, item.status, item.responseNotes)
            results.append(BatchItemResult(lineId=item.lineId, success=True, message=item.status))

        if data.notes:
            contract.response_notes = sanitize_text(data.notes)
        settled = self._finish_if_answered(contract, contract.response_notes)
        self.db.commit()
        self.db.refresh(contract)
        answered = sum(1 for r in results if r.success)
        logger.info(f"🗓️ Contract {contract.id}: {answered}/{len(results)} date(s) answered")

        if settled:
            logger.info(f"✍️ Contract {contract.id} {contract.status} by musician {contract.musician_id}")
            await self._notify_response(contract)
        return contract, results
