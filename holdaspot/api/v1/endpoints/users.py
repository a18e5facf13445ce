from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime, timezone
import logging

from holdaspot.core.auth import verify_admin_secret
from holdaspot.core.database import get_db
from holdaspot.core.exceptions import DatabaseError, HoldASpotException
from holdaspot.core.timeutils import parse_timestamp
from holdaspot.core.validation import parse_choice, parse_uuid
from holdaspot.models.reservation import ReservationStatus
from holdaspot.schemas.credits import (
    BonusAdjustmentResponse,
    CreditsResponse,
    LedgerEntryResponse,
)
from holdaspot.schemas.reservation import ReservationResponse, serialize_reservation
from holdaspot.schemas.user import BonusAdjustmentRequest, UserCreate, UserEnvelope, UserResponse
from holdaspot.services.credit_service import CreditService
from holdaspot.services.reservation_service import ReservationService
from holdaspot.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreate,
    response: Response,
    db: AsyncSession = Depends(get_db)
):
    """Sign up by email; an existing account is returned as is"""
    user, created = await UserService(db).get_or_create(request.email)
    if not created:
        response.status_code = status.HTTP_200_OK
    return {"user": UserResponse.model_validate(user)}


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: str, db: AsyncSession = Depends(get_db)):
    """Get user by ID"""
    user = await CreditService(db).get_user(parse_uuid(user_id, "user"))
    return UserResponse.model_validate(user)


@router.get("/{user_id}/credits", response_model=CreditsResponse)
async def get_user_credits(
    user_id: str,
    week_start: Optional[str] = Query(None, description="Any time in the week to report on"),
    db: AsyncSession = Depends(get_db)
):
    """Weekly allowance breakdown plus recent ledger entries"""
    user_uuid = parse_uuid(user_id, "user")
    reference = parse_timestamp(week_start, "week_start") if week_start else datetime.now(timezone.utc)

    credit_service = CreditService(db)
    user = await credit_service.get_user(user_uuid)
    try:
        breakdown = await credit_service.available_credits(user, reference)
        transactions = await credit_service.recent_transactions(user.id)
    except HoldASpotException:
        raise
    except Exception as e:
        logger.error(f"Error fetching credits for user {user_id}: {e}")
        raise DatabaseError("Failed to fetch credits")

    return CreditsResponse(
        **breakdown.to_dict(),
        transactions=[LedgerEntryResponse.model_validate(t) for t in transactions],
    )


@router.get("/{user_id}/reservations", response_model=List[ReservationResponse])
async def get_user_reservations(
    user_id: str,
    status: Optional[str] = Query(None, description="Filter by status"),
    db: AsyncSession = Depends(get_db)
):
    """List a user's reservations, newest first"""
    user_uuid = parse_uuid(user_id, "user")
    status_filter = parse_choice(status, ReservationStatus, "status") if status else None

    try:
        reservations = await ReservationService(db).list_user_reservations(user_uuid, status_filter)
    except HoldASpotException:
        raise
    except Exception as e:
        logger.error(f"Error fetching reservations for user {user_id}: {e}")
        raise DatabaseError("Failed to fetch reservations")

    now = datetime.now(timezone.utc)
    return [serialize_reservation(r, now) for r in reservations]


@router.post(
    "/{user_id}/bonus-credits",
    response_model=BonusAdjustmentResponse,
    dependencies=[Depends(verify_admin_secret)],
)
async def adjust_bonus_credits(
    user_id: str,
    request: BonusAdjustmentRequest,
    db: AsyncSession = Depends(get_db)
):
    """Add or remove bonus credits (admin only)"""
    user_uuid = parse_uuid(user_id, "user")
    entry = await CreditService(db).adjust_bonus(user_uuid, request.amount, request.notes)
    return {
        "user_id": user_uuid,
        "bonus_credits": entry.bonus_balance_after,
        "entry": LedgerEntryResponse.model_validate(entry),
    }
