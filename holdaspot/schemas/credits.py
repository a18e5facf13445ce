from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID

from holdaspot.models.credit_ledger import CreditReason


class LedgerEntryResponse(BaseModel):
    id: UUID = Field(..., description="Ledger entry ID")
    amount: int = Field(..., description="Signed credits of the event")
    transaction_type: CreditReason = Field(..., description="Event type")
    bonus_delta: int = Field(..., description="Change to the bonus pool")
    bonus_balance_after: int = Field(..., description="Bonus pool after the event")
    reservation_id: Optional[UUID] = Field(None, description="Related reservation")
    notes: Optional[str] = Field(None, description="Free-form notes")
    created_at: datetime = Field(..., description="When the event was recorded")

    class Config:
        from_attributes = True


class CreditsResponse(BaseModel):
    weekly_allowance: int = Field(..., description="Credits granted per calendar week")
    used_this_week: int = Field(..., description="Credits spent on confirmed reservations this week")
    weekly_remaining: int = Field(..., description="Weekly credits still available")
    bonus_credits: int = Field(..., description="Standing bonus pool")
    total_available: int = Field(..., description="weekly_remaining + bonus_credits")
    week_start: datetime = Field(..., description="Monday 00:00 local")
    week_end: datetime = Field(..., description="Following Monday 00:00 local")
    transactions: List[LedgerEntryResponse] = Field(default_factory=list, description="Recent ledger entries")


class BonusAdjustmentResponse(BaseModel):
    user_id: UUID = Field(..., description="User ID")
    bonus_credits: int = Field(..., description="Bonus pool after the adjustment")
    entry: LedgerEntryResponse


class CreditResetResponse(BaseModel):
    message: str = Field(..., description="Outcome")
    reset_count: int = Field(..., description="Users reset successfully")
    error_count: int = Field(0, description="Users that failed")
    total_users: int = Field(0, description="Users due for a reset")
