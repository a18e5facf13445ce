from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime, timezone
from uuid import UUID

from holdaspot.models.facility import FacilityType
from holdaspot.models.reservation import Reservation, ReservationStatus, CancelledBy


class ReservationCreateRequest(BaseModel):
    user_id: str = Field(..., description="User ID")
    facility_id: str = Field(..., description="Facility ID")
    start_time: datetime = Field(..., description="Reservation start (ISO-8601)")
    end_time: datetime = Field(..., description="Reservation end (ISO-8601)")


class ReservationResponse(BaseModel):
    id: UUID = Field(..., description="Reservation ID")
    user_id: UUID = Field(..., description="User ID")
    facility_id: UUID = Field(..., description="Facility ID")
    start_time: datetime = Field(..., description="Reservation start")
    end_time: datetime = Field(..., description="Reservation end")
    credits_used: int = Field(..., description="Credits charged at creation")
    status: ReservationStatus = Field(..., description="Stored status")
    display_status: ReservationStatus = Field(..., description="Status with elapsed bookings shown as completed")
    cancelled_by: Optional[CancelledBy] = Field(None, description="Who cancelled the reservation")
    created_at: datetime = Field(..., description="Creation time")
    updated_at: datetime = Field(..., description="Last update time")
    facility_name: Optional[str] = Field(None, description="Facility name")
    facility_type: Optional[FacilityType] = Field(None, description="Facility type")
    sport_name: Optional[str] = Field(None, description="Sport name")


class CreateReservationResponse(BaseModel):
    reservation: ReservationResponse
    remaining_credits: int = Field(..., description="Credits left for the booked week")


class CancelReservationResponse(BaseModel):
    message: str = Field(..., description="Outcome")
    reservation: ReservationResponse
    refunded_credits: int = Field(..., description="Credits released by the cancellation")
    bonus_refunded: int = Field(..., description="Credits returned to the bonus pool")


class AvailabilityResponse(BaseModel):
    available: bool = Field(..., description="Whether the interval is free")
    reason: Optional[str] = Field(None, description="Why the interval is not available")


def display_status(reservation: Reservation, now: Optional[datetime] = None) -> ReservationStatus:
    """Confirmed reservations that have ended are shown as completed"""
    now = now or datetime.now(timezone.utc)
    if reservation.status == ReservationStatus.CONFIRMED and reservation.end_time <= now:
        return ReservationStatus.COMPLETED
    return reservation.status


def serialize_reservation(reservation: Reservation, now: Optional[datetime] = None) -> ReservationResponse:
    facility = reservation.facility
    sport = facility.sport if facility is not None else None
    return ReservationResponse(
        id=reservation.id,
        user_id=reservation.user_id,
        facility_id=reservation.facility_id,
        start_time=reservation.start_time,
        end_time=reservation.end_time,
        credits_used=reservation.credits_used,
        status=reservation.status,
        display_status=display_status(reservation, now),
        cancelled_by=reservation.cancelled_by,
        created_at=reservation.created_at,
        updated_at=reservation.updated_at,
        facility_name=facility.name if facility is not None else None,
        facility_type=facility.type if facility is not None else None,
        sport_name=sport.name if sport is not None else None,
    )
