from datetime import datetime, timezone
from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
import asyncio
import logging

from holdaspot.core.database import AsyncSessionLocal
from holdaspot.core.exceptions import HoldASpotException
from holdaspot.core.timeutils import next_monday_midnight
from holdaspot.models.user import User
from holdaspot.services.credit_service import CreditService

logger = logging.getLogger(__name__)


async def reset_weekly_credits(db: AsyncSession, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Grant the weekly allowance to every user whose reset date has passed.

    Each user is committed on its own; one failure is logged and counted
    without stopping the rest of the batch.
    """
    now = now or datetime.now(timezone.utc)
    result = await db.execute(select(User.id).where(User.credits_reset_date <= now))
    user_ids = list(result.scalars().all())

    if not user_ids:
        return {
            "message": "No users need credit reset",
            "reset_count": 0,
            "error_count": 0,
            "total_users": 0,
        }

    credit_service = CreditService(db)
    next_reset = next_monday_midnight(now)
    success_count = 0
    error_count = 0

    for user_id in user_ids:
        try:
            user = await credit_service.get_user(user_id)
            user.credits_reset_date = next_reset
            await credit_service.record_weekly_grant(user)
            await db.commit()
            success_count += 1
        except (SQLAlchemyError, HoldASpotException) as e:
            await db.rollback()
            logger.error(f"Error resetting credits for user {user_id}: {e}")
            error_count += 1

    logger.info(f"Credit reset complete: {success_count} successful, {error_count} errors")
    return {
        "message": "Credit reset completed",
        "reset_count": success_count,
        "error_count": error_count,
        "total_users": len(user_ids),
    }


async def run_weekly_reset() -> Dict[str, Any]:
    """Entry point for an external scheduler"""
    async with AsyncSessionLocal() as db:
        return await reset_weekly_credits(db)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    print(asyncio.run(run_weekly_reset()))
