from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserResponse(BaseModel):
    id: int
    username: str
    name: str
    email: str
    role: str

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    username: str
    password: str


class AdminSetupRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=8, max_length=72)
    name: str
    email: EmailStr


class TokenResponse(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
    user: UserResponse


class MessageResponse(BaseModel):
    message: str


class BulkResult(BaseModel):
    """Aggregate outcome of a bulk operation; individual failures never abort the batch"""

    created: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0
    details: list[dict] = []
    emailEnabled: Optional[bool] = None
