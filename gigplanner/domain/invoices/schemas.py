"""Invoice domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class InvoiceResponse(BaseModel):
    id: int
    plannerId: int
    musicianId: int
    musicianName: Optional[str] = None
    month: int
    year: int
    totalSlots: int
    attendedSlots: int
    totalAmount: float
    status: str
    generatedAt: Optional[datetime] = None
    paidAt: Optional[datetime] = None
    notes: Optional[str] = None


class InvoiceGenerationResult(BaseModel):
    plannerId: int
    created: int = 0
    updated: int = 0
    skipped: int = 0
    invoices: list[InvoiceResponse] = []


class InvoiceStatusUpdate(BaseModel):
    notes: Optional[str] = Field(None, max_length=5000)
