from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import date, datetime
from uuid import UUID

from holdaspot.models.facility import FacilityType


class SportResponse(BaseModel):
    id: UUID = Field(..., description="Sport ID")
    name: str = Field(..., description="Sport name")
    is_active: bool = Field(..., description="Whether the sport is offered")
    max_booking_hours: float = Field(..., description="Longest allowed booking in hours")
    slot_duration_minutes: int = Field(..., description="Booking granularity in minutes")

    class Config:
        from_attributes = True


class FacilityResponse(BaseModel):
    id: UUID = Field(..., description="Facility ID")
    name: str = Field(..., description="Facility name")
    sport_id: UUID = Field(..., description="Sport ID")
    type: FacilityType = Field(..., description="court or bay")
    is_active: bool = Field(..., description="Whether the facility can be booked")
    sport: Optional[SportResponse] = Field(None, description="Sport played at the facility")

    class Config:
        from_attributes = True


class SlotResponse(BaseModel):
    start_time: datetime = Field(..., description="Slot start")
    end_time: datetime = Field(..., description="Slot end")
    available: bool = Field(..., description="No confirmed reservation overlaps the slot")
    is_past: bool = Field(..., description="Slot has already started")
    reservation_id: Optional[UUID] = Field(None, description="Reservation occupying the slot")


class FacilitySlotsResponse(BaseModel):
    facility_id: UUID = Field(..., description="Facility ID")
    day: date = Field(..., description="Local calendar day")
    timezone: str = Field(..., description="Timezone used for the day")
    slot_duration_minutes: int = Field(..., description="Slot length in minutes")
    slots: List[SlotResponse] = Field(..., description="Slots between opening and closing")
