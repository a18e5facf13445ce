from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime, timezone
import logging

from holdaspot.core.database import get_db
from holdaspot.core.exceptions import DatabaseError, HoldASpotException
from holdaspot.core.timeutils import parse_timestamp
from holdaspot.core.validation import parse_choice, parse_uuid, require_param
from holdaspot.models.reservation import CancelledBy, ReservationStatus
from holdaspot.schemas.reservation import (
    AvailabilityResponse,
    CancelReservationResponse,
    CreateReservationResponse,
    ReservationCreateRequest,
    ReservationResponse,
    serialize_reservation,
)
from holdaspot.services.facility_service import FacilityService
from holdaspot.services.reservation_service import ReservationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[ReservationResponse])
async def list_reservations(
    facility_id: Optional[str] = Query(None, description="Filter by facility"),
    start_date: Optional[str] = Query(None, description="Reservations starting at or after"),
    end_date: Optional[str] = Query(None, description="Reservations ending at or before"),
    status: str = Query(ReservationStatus.CONFIRMED.value, description="Filter by status"),
    db: AsyncSession = Depends(get_db)
):
    """Query reservations, ordered by start time"""
    facility_uuid = parse_uuid(facility_id, "facility") if facility_id else None
    start = parse_timestamp(start_date, "start_date") if start_date else None
    end = parse_timestamp(end_date, "end_date") if end_date else None
    status_filter = parse_choice(status, ReservationStatus, "status")

    try:
        reservations = await ReservationService(db).list_reservations(facility_uuid, start, end, status_filter)
    except HoldASpotException:
        raise
    except Exception as e:
        logger.error(f"Error fetching reservations: {e}")
        raise DatabaseError("Failed to fetch reservations")

    now = datetime.now(timezone.utc)
    return [serialize_reservation(r, now) for r in reservations]


@router.get("/availability", response_model=AvailabilityResponse)
async def check_availability(
    facility_id: Optional[str] = Query(None),
    start_time: Optional[str] = Query(None),
    end_time: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db)
):
    """Check whether a time slot is free"""
    facility_uuid = parse_uuid(facility_id, "facility")
    start = parse_timestamp(require_param(start_time, "start_time"), "start_time")
    end = parse_timestamp(require_param(end_time, "end_time"), "end_time")
    return await FacilityService(db).check_availability(facility_uuid, start, end)


@router.post("", response_model=CreateReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    request: ReservationCreateRequest,
    db: AsyncSession = Depends(get_db)
):
    """Book a facility against the user's credits"""
    user_uuid = parse_uuid(request.user_id, "user")
    facility_uuid = parse_uuid(request.facility_id, "facility")

    reservation, remaining = await ReservationService(db).create_reservation(
        user_uuid,
        facility_uuid,
        request.start_time,
        request.end_time,
    )
    return {
        "reservation": serialize_reservation(reservation),
        "remaining_credits": remaining,
    }


@router.delete("/{reservation_id}", response_model=CancelReservationResponse)
async def cancel_reservation(
    reservation_id: str,
    cancelled_by: str = Query(CancelledBy.USER.value, description="user or admin"),
    db: AsyncSession = Depends(get_db)
):
    """Cancel a reservation and refund its credits"""
    reservation_uuid = parse_uuid(reservation_id, "reservation")
    actor = parse_choice(cancelled_by, CancelledBy, "cancelled_by")

    reservation, bonus_refunded = await ReservationService(db).cancel_reservation(reservation_uuid, actor)
    return {
        "message": "Reservation cancelled successfully",
        "reservation": serialize_reservation(reservation),
        "refunded_credits": reservation.credits_used,
        "bonus_refunded": bonus_refunded,
    }
