from datetime import datetime, timezone
from typing import List, Optional
import logging
import uuid

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from holdaspot.core.config import settings
from holdaspot.core.credits import CreditBreakdown, compute_allowance
from holdaspot.core.exceptions import InsufficientCreditsError, NotFoundError, ValidationError
from holdaspot.core.timeutils import week_bounds
from holdaspot.models.credit_ledger import CreditLedger, CreditReason
from holdaspot.models.reservation import Reservation, ReservationStatus
from holdaspot.models.user import User

logger = logging.getLogger(__name__)


class CreditService:
    """Weekly allowance, bonus pool and the credit ledger"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: uuid.UUID) -> User:
        user = await self.db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    async def used_in_week(self, user_id: uuid.UUID, week_start: datetime, week_end: datetime) -> int:
        """Credits of the user's confirmed reservations starting in [week_start, week_end)"""
        result = await self.db.execute(
            select(func.coalesce(func.sum(Reservation.credits_used), 0)).where(
                and_(
                    Reservation.user_id == user_id,
                    Reservation.status == ReservationStatus.CONFIRMED,
                    Reservation.start_time >= week_start,
                    Reservation.start_time < week_end,
                )
            )
        )
        return int(result.scalar_one())

    async def available_credits(self, user: User, reference: Optional[datetime] = None) -> CreditBreakdown:
        """Credits the user can still spend in the week containing `reference`"""
        reference = reference or datetime.now(timezone.utc)
        week_start, week_end = week_bounds(reference)
        used = await self.used_in_week(user.id, week_start, week_end)
        return compute_allowance(used, user.bonus_credits, week_start, week_end)

    async def deduct_bonus(self, user: User, amount: int) -> int:
        """Take `amount` from the bonus pool, only if the pool covers it"""
        result = await self.db.execute(
            update(User)
            .where(and_(User.id == user.id, User.bonus_credits >= amount))
            .values(bonus_credits=User.bonus_credits - amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            # Another request spent the pool since the balance was read
            raise InsufficientCreditsError(
                "Insufficient credits",
                f"Bonus balance no longer covers {amount} credits",
            )
        await self.db.refresh(user)
        return user.bonus_credits

    async def add_bonus(self, user: User, amount: int) -> int:
        """Add a signed amount to the bonus pool; the pool never goes negative"""
        result = await self.db.execute(
            update(User)
            .where(and_(User.id == user.id, User.bonus_credits + amount >= 0))
            .values(bonus_credits=User.bonus_credits + amount)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ValidationError(
                "Bonus credits cannot go below zero",
                f"Current balance is {user.bonus_credits}",
            )
        await self.db.refresh(user)
        return user.bonus_credits

    async def record(
        self,
        user: User,
        amount: int,
        transaction_type: CreditReason,
        bonus_delta: int = 0,
        reservation_id: Optional[uuid.UUID] = None,
        notes: Optional[str] = None,
    ) -> CreditLedger:
        """Append a ledger entry; call after the bonus pool has been updated"""
        entry = CreditLedger(
            user_id=user.id,
            amount=amount,
            transaction_type=transaction_type,
            bonus_delta=bonus_delta,
            bonus_balance_after=user.bonus_credits,
            reservation_id=reservation_id,
            notes=notes,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def record_weekly_grant(self, user: User, notes: str = "Weekly credit reset") -> CreditLedger:
        return await self.record(user, settings.WEEKLY_CREDITS, CreditReason.WEEKLY_RESET, notes=notes)

    async def adjust_bonus(self, user_id: uuid.UUID, amount: int, notes: Optional[str] = None) -> CreditLedger:
        """Admin adjustment of the bonus pool"""
        user = await self.get_user(user_id)
        try:
            await self.add_bonus(user, amount)
            entry = await self.record(
                user,
                amount,
                CreditReason.ADMIN_ADJUSTMENT,
                bonus_delta=amount,
                notes=notes or "Admin adjustment",
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Adjusted bonus credits for user {user_id} by {amount}, new balance: {user.bonus_credits}")
        return entry

    async def recent_transactions(self, user_id: uuid.UUID, limit: int = 20) -> List[CreditLedger]:
        result = await self.db.execute(
            select(CreditLedger)
            .where(CreditLedger.user_id == user_id)
            .order_by(CreditLedger.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
