"""Contract domain schemas - Pydantic models for validation"""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel, Field


class GenerateContractsRequest(BaseModel):
    """Generate contracts for a finalized planner"""

    musicianIds: Optional[list[int]] = None  # Default: every assigned musician
    send: bool = False
    message: Optional[str] = Field(None, max_length=2000)
    terms: Optional[str] = Field(None, max_length=5000)  # Default: template, then standard terms
    templateId: Optional[int] = None


class SendContractRequest(BaseModel):
    message: Optional[str] = Field(None, max_length=2000)


class ContractLineResponse(BaseModel):
    id: int
    assignmentId: Optional[int] = None
    date: dt.date
    venueName: Optional[str] = None
    startTime: Optional[str] = None
    endTime: Optional[str] = None
    fee: float
    status: str = "pending"
    responseNotes: Optional[str] = None
    respondedAt: Optional[dt.datetime] = None


class ContractResponse(BaseModel):
    """Schema for contract response"""

    id: int
    publicId: Optional[str] = None
    plannerId: int
    periodLabel: str
    templateId: Optional[int] = None
    musicianId: int
    musicianName: Optional[str] = None
    musicianEmail: Optional[str] = None
    status: str
    amount: float
    terms: Optional[str] = None
    tokenExpiresAt: Optional[dt.datetime] = None
    musicianSignature: Optional[str] = None
    companySignature: Optional[str] = None
    responseNotes: Optional[str] = None
    sentAt: Optional[dt.datetime] = None
    respondedAt: Optional[dt.datetime] = None
    createdAt: Optional[dt.datetime] = None
    lines: list[ContractLineResponse] = []


class SendContractResponse(BaseModel):
    contract: ContractResponse
    emailSent: bool
    signingUrl: str


class ContractContentResponse(BaseModel):
    contractId: int
    content: str  # Markdown


class PublicMusician(BaseModel):
    id: int
    name: str


class PublicContractResponse(BaseModel):
    """What the musician sees behind the signing link"""

    id: int
    periodLabel: str
    status: str
    amount: float
    musician: PublicMusician
    lines: list[ContractLineResponse]
    content: str
    tokenExpiresAt: Optional[dt.datetime] = None
    canRespond: bool


class ContractRespondRequest(BaseModel):
    status: Literal["accepted", "rejected"]
    signature: Optional[str] = Field(None, max_length=255)
    response: Optional[str] = Field(None, max_length=2000)


class ContractAcceptRequest(BaseModel):
    signature: str = Field(..., max_length=255)


class ContractRespondResult(BaseModel):
    success: bool = True
    contractId: int
    status: str
    respondedAt: dt.datetime


class DateResponseRequest(BaseModel):
    """Answer for a single performance date"""

    status: Literal["accepted", "rejected"]
    responseNotes: Optional[str] = Field(None, max_length=2000)
    signature: Optional[str] = Field(None, max_length=255)


class BatchDateResponse(BaseModel):
    lineId: int
    status: Literal["accepted", "rejected"]
    responseNotes: Optional[str] = Field(None, max_length=2000)


class BatchResponseRequest(BaseModel):
    responses: list[BatchDateResponse] = Field(..., min_length=1)
    signature: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = Field(None, max_length=2000)


class BatchItemResult(BaseModel):
    lineId: int
    success: bool
    message: str


class ContractSummary(BaseModel):
    contractId: int
    status: str
    totalDates: int
    acceptedDates: int
    rejectedDates: int
    pendingDates: int


class DateResponseResult(BaseModel):
    success: bool = True
    line: ContractLineResponse
    contractStatus: str
    summary: ContractSummary


class BatchResponseResult(BaseModel):
    success: bool
    results: list[BatchItemResult]
    contractStatus: str
    summary: ContractSummary
