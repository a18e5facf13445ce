from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime
import logging

from holdaspot.core.database import get_db
from holdaspot.core.exceptions import DatabaseError, HoldASpotException
from holdaspot.core.timeutils import local_tz, parse_date
from holdaspot.core.validation import parse_choice, parse_uuid
from holdaspot.models.facility import FacilityType
from holdaspot.schemas.facility import FacilityResponse, FacilitySlotsResponse
from holdaspot.services.facility_service import FacilityService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[FacilityResponse])
async def list_facilities(
    facility_type: Optional[str] = Query(None, alias="type", description="court or bay"),
    sport_id: Optional[str] = Query(None, description="Filter by sport"),
    search: Optional[str] = Query(None, description="Search by name"),
    db: AsyncSession = Depends(get_db)
):
    """List active facilities with optional filters"""
    type_filter = parse_choice(facility_type, FacilityType, "facility type") if facility_type else None
    sport_uuid = parse_uuid(sport_id, "sport") if sport_id else None

    try:
        facilities = await FacilityService(db).list_facilities(type_filter, sport_uuid, search)
    except HoldASpotException:
        raise
    except Exception as e:
        logger.error(f"Error fetching facilities: {e}")
        raise DatabaseError("Failed to fetch facilities")

    return [FacilityResponse.model_validate(f) for f in facilities]


@router.get("/{facility_id}", response_model=FacilityResponse)
async def get_facility(facility_id: str, db: AsyncSession = Depends(get_db)):
    """Get an active facility"""
    facility = await FacilityService(db).get_facility(parse_uuid(facility_id, "facility"))
    return FacilityResponse.model_validate(facility)


@router.get("/{facility_id}/slots", response_model=FacilitySlotsResponse)
async def get_facility_slots(
    facility_id: str,
    date: Optional[str] = Query(None, description="Local day in YYYY-MM-DD format, defaults to today"),
    db: AsyncSession = Depends(get_db)
):
    """Slot grid for one day with availability"""
    facility_uuid = parse_uuid(facility_id, "facility")
    day = parse_date(date, "date") if date else datetime.now(local_tz()).date()
    return await FacilityService(db).get_day_slots(facility_uuid, day)
