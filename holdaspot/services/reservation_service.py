from datetime import datetime, timezone
from typing import List, Optional, Tuple
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from holdaspot.core.config import settings
from holdaspot.core.credits import bonus_portion, bonus_refund, credits_to_time_string, validate_booking
from holdaspot.core.database import utcnow
from holdaspot.core.exceptions import (
    ConflictError,
    DatabaseError,
    HoldASpotException,
    InsufficientCreditsError,
    NotFoundError,
    ValidationError,
)
from holdaspot.core.timeutils import localize, week_bounds
from holdaspot.models.credit_ledger import CreditReason
from holdaspot.models.reservation import OVERLAP_CONSTRAINT, CancelledBy, Reservation, ReservationStatus
from holdaspot.services.credit_service import CreditService
from holdaspot.services.facility_service import FacilityService

logger = logging.getLogger(__name__)

EXCLUSION_VIOLATION = "23P01"


def is_overlap_violation(exc: IntegrityError) -> bool:
    """True when the store rejected a reservation for overlapping another"""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return code == EXCLUSION_VIOLATION or OVERLAP_CONSTRAINT in str(orig)


class ReservationService:
    """Reservation lifecycle: confirmed -> cancelled"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.credits = CreditService(db)
        self.facilities = FacilityService(db)

    async def get_reservation(self, reservation_id: uuid.UUID) -> Reservation:
        reservation = (
            await self.db.execute(select(Reservation).where(Reservation.id == reservation_id))
        ).scalar_one_or_none()
        if not reservation:
            raise NotFoundError("Reservation not found")
        return reservation

    async def create_reservation(
        self,
        user_id: uuid.UUID,
        facility_id: uuid.UUID,
        start_time: datetime,
        end_time: datetime,
        now: Optional[datetime] = None,
    ) -> Tuple[Reservation, int]:
        """Book a facility and charge the user.

        Insert and charge share one transaction; any failure after the insert
        rolls both back. Returns the reservation and the credits left for its week.
        """
        now = now or datetime.now(timezone.utc)
        start = localize(start_time).astimezone(timezone.utc)
        end = localize(end_time).astimezone(timezone.utc)

        facility = await self.facilities.get_facility(facility_id)
        user = await self.credits.get_user(user_id)

        max_hours = facility.sport.max_booking_hours if facility.sport else settings.DEFAULT_MAX_BOOKING_HOURS
        credits_needed = validate_booking(start, end, max_hours, now)

        available = await self.credits.available_credits(user, start)
        if credits_needed > available.total_available:
            raise InsufficientCreditsError(
                "Insufficient credits",
                f"You need {credits_needed} credits but only have {available.total_available}",
            )

        reservation = Reservation(
            user_id=user.id,
            facility_id=facility.id,
            start_time=start,
            end_time=end,
            credits_used=credits_needed,
            status=ReservationStatus.CONFIRMED,
        )

        try:
            self.db.add(reservation)
            try:
                await self.db.flush()
            except IntegrityError as e:
                if is_overlap_violation(e):
                    raise ConflictError("Time slot unavailable", "This time slot is already booked")
                raise

            from_bonus = bonus_portion(credits_needed, available.weekly_remaining)
            if from_bonus:
                await self.credits.deduct_bonus(user, from_bonus)

            await self.credits.record(
                user,
                -credits_needed,
                CreditReason.RESERVATION,
                bonus_delta=-from_bonus,
                reservation_id=reservation.id,
                notes=f"Booking {facility.name} ({credits_to_time_string(credits_needed)})",
            )
            await self.db.commit()
        except HoldASpotException:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to create reservation for user {user_id} on facility {facility_id}: {e}")
            raise DatabaseError("Failed to process booking")

        remaining = available.total_available - credits_needed
        logger.info(
            f"Reservation {reservation.id} booked: facility {facility.id}, "
            f"{credits_needed} credits ({from_bonus} from bonus), {remaining} remaining"
        )
        return await self.get_reservation(reservation.id), remaining

    async def cancel_reservation(
        self,
        reservation_id: uuid.UUID,
        cancelled_by: CancelledBy = CancelledBy.USER,
        now: Optional[datetime] = None,
    ) -> Tuple[Reservation, int]:
        """Cancel a confirmed, not yet started reservation.

        The bonus-drawn part of its cost goes back to the bonus pool; the weekly
        part is freed implicitly because cancelled reservations do not count.
        A failed refund is logged and does not undo the cancellation.
        Returns the reservation and the bonus credits refunded.
        """
        now = now or datetime.now(timezone.utc)
        reservation = await self.get_reservation(reservation_id)

        if reservation.status == ReservationStatus.CANCELLED:
            raise ValidationError("Reservation is already cancelled")
        if reservation.status != ReservationStatus.CONFIRMED:
            raise ValidationError(f"Cannot cancel a {reservation.status.value} reservation")
        if reservation.start_time < now:
            raise ValidationError("Cannot cancel past reservations")

        user_id = reservation.user_id
        credits_used = reservation.credits_used
        week_start, week_end = week_bounds(reservation.start_time)

        try:
            used_including = await self.credits.used_in_week(user_id, week_start, week_end)

            reservation.status = ReservationStatus.CANCELLED
            reservation.cancelled_by = cancelled_by
            reservation.updated_at = utcnow()
            await self.db.flush()

            refunded = 0
            try:
                async with self.db.begin_nested():
                    refunded = await self._refund(reservation, used_including)
            except (SQLAlchemyError, HoldASpotException) as e:
                refunded = 0
                logger.error(f"Failed to refund credits for cancelled reservation {reservation_id}: {e}")

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to cancel reservation {reservation_id}: {e}")
            raise DatabaseError("Failed to cancel reservation")

        logger.info(
            f"Reservation {reservation_id} cancelled by {cancelled_by.value}: "
            f"{credits_used} credits released, {refunded} returned to bonus"
        )
        return await self.get_reservation(reservation_id), refunded

    async def _refund(self, reservation: Reservation, used_including: int) -> int:
        user = await self.credits.get_user(reservation.user_id)
        refund = bonus_refund(used_including, reservation.credits_used)
        if refund:
            await self.credits.add_bonus(user, refund)
        await self.credits.record(
            user,
            reservation.credits_used,
            CreditReason.REFUND,
            bonus_delta=refund,
            reservation_id=reservation.id,
            notes="Reservation cancelled",
        )
        return refund

    async def list_reservations(
        self,
        facility_id: Optional[uuid.UUID] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        status: ReservationStatus = ReservationStatus.CONFIRMED,
    ) -> List[Reservation]:
        query = select(Reservation).where(Reservation.status == status)

        if facility_id:
            query = query.where(Reservation.facility_id == facility_id)
        if start_date:
            query = query.where(Reservation.start_time >= start_date)
        if end_date:
            query = query.where(Reservation.end_time <= end_date)

        query = query.order_by(Reservation.start_time.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_user_reservations(
        self,
        user_id: uuid.UUID,
        status: Optional[ReservationStatus] = None,
    ) -> List[Reservation]:
        query = select(Reservation).where(Reservation.user_id == user_id)
        if status:
            query = query.where(Reservation.status == status)

        query = query.order_by(Reservation.start_time.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())
