from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from holdaspot.core.auth import verify_cron_secret
from holdaspot.core.database import get_db
from holdaspot.schemas.credits import CreditResetResponse
from holdaspot.tasks.credit_tasks import reset_weekly_credits

router = APIRouter()


@router.post("/reset", response_model=CreditResetResponse, dependencies=[Depends(verify_cron_secret)])
async def reset_credits(db: AsyncSession = Depends(get_db)):
    """Weekly credit reset, called by the scheduler"""
    return await reset_weekly_credits(db)
