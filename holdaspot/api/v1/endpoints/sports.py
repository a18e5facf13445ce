from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from holdaspot.core.database import get_db
from holdaspot.schemas.facility import SportResponse
from holdaspot.services.facility_service import FacilityService

router = APIRouter()


@router.get("", response_model=List[SportResponse])
async def list_sports(db: AsyncSession = Depends(get_db)):
    """List sports by name"""
    sports = await FacilityService(db).list_sports()
    return [SportResponse.model_validate(s) for s in sports]
