from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
import logging
import uuid

from sqlalchemy import and_, case, select
from sqlalchemy.ext.asyncio import AsyncSession

from holdaspot.core.config import settings
from holdaspot.core.exceptions import NotFoundError, ValidationError
from holdaspot.core.timeutils import day_slots
from holdaspot.models.facility import Facility, FacilityType, Sport
from holdaspot.models.reservation import Reservation, ReservationStatus

logger = logging.getLogger(__name__)


class FacilityService:
    """Sports, facilities and per-facility availability"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_sports(self) -> List[Sport]:
        result = await self.db.execute(select(Sport).order_by(Sport.name.asc()))
        return list(result.scalars().all())

    async def list_facilities(
        self,
        facility_type: Optional[FacilityType] = None,
        sport_id: Optional[uuid.UUID] = None,
        search: Optional[str] = None,
    ) -> List[Facility]:
        """Active facilities, courts and bays grouped, then by name"""
        query = select(Facility).where(Facility.is_active.is_(True))

        if facility_type:
            query = query.where(Facility.type == facility_type)
        if sport_id:
            query = query.where(Facility.sport_id == sport_id)
        if search:
            query = query.where(Facility.name.ilike(f"%{search}%"))

        # Courts first on every backend, whatever its enum ordering
        type_order = case((Facility.type == FacilityType.COURT, 0), else_=1)
        query = query.order_by(type_order, Facility.name.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_facility(self, facility_id: uuid.UUID, active_only: bool = True) -> Facility:
        query = select(Facility).where(Facility.id == facility_id)
        if active_only:
            query = query.where(Facility.is_active.is_(True))
        facility = (await self.db.execute(query)).scalar_one_or_none()
        if not facility:
            raise NotFoundError("Facility not found")
        return facility

    async def overlapping(self, facility_id: uuid.UUID, start: datetime, end: datetime) -> List[Reservation]:
        """Confirmed reservations intersecting [start, end)"""
        result = await self.db.execute(
            select(Reservation)
            .where(
                and_(
                    Reservation.facility_id == facility_id,
                    Reservation.status == ReservationStatus.CONFIRMED,
                    Reservation.start_time < end,
                    Reservation.end_time > start,
                )
            )
            .order_by(Reservation.start_time.asc())
        )
        return list(result.scalars().all())

    async def check_availability(self, facility_id: uuid.UUID, start: datetime, end: datetime) -> Dict[str, Any]:
        """Advisory check for the booking form; the store has the final word"""
        if end <= start:
            raise ValidationError("End time must be after start time")

        await self.get_facility(facility_id)
        if await self.overlapping(facility_id, start, end):
            return {"available": False, "reason": "Time slot is already booked"}
        return {"available": True}

    async def get_day_slots(
        self,
        facility_id: uuid.UUID,
        day: date,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """Bookable grid for one local day between opening and closing hours"""
        facility = await self.get_facility(facility_id)
        now = now or datetime.now(timezone.utc)
        slot_minutes = settings.MINUTES_PER_CREDIT
        sport_minutes = facility.sport.slot_duration_minutes if facility.sport else None
        if sport_minutes and sport_minutes > 0 and sport_minutes % settings.MINUTES_PER_CREDIT == 0:
            slot_minutes = sport_minutes
        elif sport_minutes is not None and sport_minutes != slot_minutes:
            logger.warning(
                f"Sport {facility.sport.id} slot length {sport_minutes} is not a multiple of "
                f"{settings.MINUTES_PER_CREDIT} minutes, using {slot_minutes}"
            )

        slots = day_slots(day, settings.FACILITY_OPEN_HOUR, settings.FACILITY_CLOSE_HOUR, slot_minutes)
        taken = await self.overlapping(facility_id, slots[0][0], slots[-1][1]) if slots else []

        grid = []
        for slot_start, slot_end in slots:
            holder = next(
                (r for r in taken if r.start_time < slot_end and r.end_time > slot_start),
                None,
            )
            grid.append({
                "start_time": slot_start.astimezone(timezone.utc),
                "end_time": slot_end.astimezone(timezone.utc),
                "available": holder is None,
                "is_past": slot_start <= now,
                "reservation_id": holder.id if holder else None,
            })

        return {
            "facility_id": facility.id,
            "day": day,
            "timezone": settings.LOCAL_TIMEZONE,
            "slot_duration_minutes": slot_minutes,
            "slots": grid,
        }
