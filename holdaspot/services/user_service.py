from datetime import datetime, timezone
from typing import Optional, Tuple
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from holdaspot.core.timeutils import next_monday_midnight
from holdaspot.models.user import User
from holdaspot.services.credit_service import CreditService

logger = logging.getLogger(__name__)


class UserService:
    """Email sign-up"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.credits = CreditService(db)

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def get_or_create(self, email: str, now: Optional[datetime] = None) -> Tuple[User, bool]:
        """Return the user for `email`, creating it with the initial weekly grant"""
        existing = await self.get_by_email(email)
        if existing:
            return existing, False

        now = now or datetime.now(timezone.utc)
        user = User(
            email=email,
            bonus_credits=0,
            credits_reset_date=next_monday_midnight(now),
        )
        try:
            self.db.add(user)
            await self.db.flush()
            await self.credits.record_weekly_grant(user, notes="Initial weekly credits")
            await self.db.commit()
        except IntegrityError:
            # Concurrent sign-up with the same email
            await self.db.rollback()
            existing = await self.get_by_email(email)
            if existing is None:
                raise
            return existing, False

        logger.info(f"Created user {user.id} for {email}")
        return user, True
