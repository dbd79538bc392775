"""Contract router - FastAPI endpoints for contract operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...schemas import BulkResult
from ...services.status_history import admin_actor
from .schemas import (
    BatchResponseRequest,
    BatchResponseResult,
    ContractAcceptRequest,
    ContractContentResponse,
    ContractRespondRequest,
    ContractRespondResult,
    ContractResponse,
    ContractSummary,
    DateResponseRequest,
    DateResponseResult,
    GenerateContractsRequest,
    PublicContractResponse,
    SendContractRequest,
    SendContractResponse,
)
from .service import ContractService, serialize_contract, serialize_line, summarize_lines

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/monthly-contracts", tags=["Contracts"])
planner_contracts_router = APIRouter(prefix="/planner-contracts", tags=["Contracts"])
public_router = APIRouter(prefix="/contracts/token", tags=["Contract Signing"])


def get_contract_service(db: Session = Depends(get_db)) -> ContractService:
    """Dependency injection for ContractService"""
    return ContractService(db)


# ============================================================================
# GENERATION
# ============================================================================


@planner_contracts_router.post("/{planner_id}", response_model=BulkResult)
async def generate_planner_contracts(
    planner_id: int,
    data: GenerateContractsRequest,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    """Generate (and optionally send) one contract per assigned musician"""
    return await service.generate_for_planner(planner_id, data, admin_actor(current_user))


# ============================================================================
# ADMIN OPERATIONS
# ============================================================================


@router.get("", response_model=list[ContractResponse])
async def get_contracts(
    plannerId: Optional[int] = Query(None, description="Filter by planner"),
    musicianId: Optional[int] = Query(None, description="Filter by musician"),
    status: Optional[str] = Query(None, description="Filter by contract status"),
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    return [serialize_contract(c) for c in service.get_contracts(plannerId, musicianId, status)]


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    return serialize_contract(service.get_contract(contract_id))


@router.post("/{contract_id}/send", response_model=SendContractResponse)
async def send_contract(
    contract_id: int,
    data: Optional[SendContractRequest] = None,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    """Issue a fresh signing link and email it to the musician"""
    contract, email_sent, url = await service.send_contract(
        contract_id, data.message if data else None, admin_actor(current_user)
    )
    return SendContractResponse(
        contract=serialize_contract(contract), emailSent=email_sent, signingUrl=url
    )


@router.get("/{contract_id}/summary", response_model=ContractSummary)
async def get_contract_summary(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    """Accepted, rejected and pending date counts"""
    return service.get_summary(contract_id)


@router.get("/{contract_id}/content", response_model=ContractContentResponse)
async def get_contract_content(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    return ContractContentResponse(
        contractId=contract_id, content=service.render_content(contract_id)
    )


@router.get("/{contract_id}/pdf")
async def download_contract_pdf(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    pdf_bytes = service.generate_pdf(contract_id)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="contract-{contract_id}.pdf"'},
    )


@router.post("/{contract_id}/cancel", response_model=ContractResponse)
async def cancel_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    return serialize_contract(service.cancel_contract(contract_id, admin_actor(current_user)))


@router.post("/{contract_id}/complete", response_model=ContractResponse)
async def complete_contract(
    contract_id: int,
    current_user: User = Depends(get_current_user),
    service: ContractService = Depends(get_contract_service),
):
    return serialize_contract(service.complete_contract(contract_id, admin_actor(current_user)))


# ============================================================================
# PUBLIC SIGNING (no auth, token is the credential)
# ============================================================================


@public_router.get("/{token}", response_model=PublicContractResponse)
async def get_contract_by_token(
    token: str,
    service: ContractService = Depends(get_contract_service),
):
    return service.get_public_contract(token)


@public_router.post("/{token}/respond", response_model=ContractRespondResult)
async def respond_to_contract(
    token: str,
    data: ContractRespondRequest,
    service: ContractService = Depends(get_contract_service),
):
    """Accept (with a typed signature) or reject a contract"""
    contract = await service.respond(
        token, data.status == "accepted", data.signature, data.response
    )
    return ContractRespondResult(
        contractId=contract.id, status=contract.status, respondedAt=contract.responded_at
    )


@public_router.post("/{token}/accept", response_model=ContractRespondResult)
async def accept_contract(
    token: str,
    data: ContractAcceptRequest,
    service: ContractService = Depends(get_contract_service),
):
    contract = await service.respond(token, True, data.signature)
    return ContractRespondResult(
        contractId=contract.id, status=contract.status, respondedAt=contract.responded_at
    )


@public_router.post("/{token}/dates/{line_id}", response_model=DateResponseResult)
async def respond_to_date(
    token: str,
    line_id: int,
    data: DateResponseRequest,
    service: ContractService = Depends(get_contract_service),
):
    """Accept or reject a single performance date"""
    contract, line = await service.respond_to_date(
        token, line_id, data.status, data.responseNotes, data.signature
    )
    return DateResponseResult(
        line=serialize_line(line),
        contractStatus=contract.status,
        summary=summarize_lines(contract),
    )


@public_router.post("/{token}/batch", response_model=BatchResponseResult)
async def respond_to_dates(
    token: str,
    data: BatchResponseRequest,
    service: ContractService = Depends(get_contract_service),
):
    """Answer several dates at once; each date reports its own outcome"""
    contract, results = await service.respond_batch(token, data)
    return BatchResponseResult(
        success=all(r.success for r in results),
        results=results,
        contractStatus=contract.status,
        summary=summarize_lines(contract),
    )
