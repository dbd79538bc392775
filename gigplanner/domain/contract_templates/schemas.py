"""Contract template schemas"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, Field

TEMPLATE_MAX_LENGTH = 20000


class ContractTemplateCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    # Supports {{musician_name}}, {{period}}, {{total}}, {{company}}, {{contract_id}}
    content: str = Field(..., min_length=1, max_length=TEMPLATE_MAX_LENGTH)
    isDefault: bool = False


class ContractTemplateUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=5000)
    content: Optional[str] = Field(None, min_length=1, max_length=TEMPLATE_MAX_LENGTH)


class ContractTemplateResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    content: str
    isDefault: bool
    createdBy: Optional[int] = None
    createdAt: Optional[dt.datetime] = None
    updatedAt: Optional[dt.datetime] = None
