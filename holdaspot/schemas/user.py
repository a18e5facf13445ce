from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID
import re

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def sanitize_email(email: str) -> str:
    return email.strip().lower()


class UserCreate(BaseModel):
    email: str = Field(..., description="Email address used to sign in")

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        value = sanitize_email(value)
        if not value:
            raise ValueError("Email is required")
        if not EMAIL_RE.match(value):
            raise ValueError("Invalid email format")
        return value


class UserResponse(BaseModel):
    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    bonus_credits: int = Field(..., description="Standing bonus credit balance")
    is_admin: bool = Field(..., description="Whether the user is an administrator")
    credits_reset_date: datetime = Field(..., description="When the next weekly grant is due")
    created_at: datetime = Field(..., description="Creation time")

    class Config:
        from_attributes = True


class UserEnvelope(BaseModel):
    user: UserResponse


class BonusAdjustmentRequest(BaseModel):
    amount: int = Field(..., description="Signed number of bonus credits to add")
    notes: Optional[str] = Field(None, description="Reason for the adjustment")

    @field_validator("amount")
    @classmethod
    def check_amount(cls, value: int) -> int:
        if value == 0:
            raise ValueError("Amount must not be zero")
        return value
