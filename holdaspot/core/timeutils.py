from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Tuple

from dateutil import parser as date_parser
import pytz

from holdaspot.core.config import settings
from holdaspot.core.exceptions import ValidationError


def local_tz():
    """Timezone used for calendar weeks and facility hours"""
    return pytz.timezone(settings.LOCAL_TIMEZONE)


def localize(dt: datetime) -> datetime:
    """Attach the local timezone to naive datetimes; aware ones pass through"""
    if dt.tzinfo is None:
        return local_tz().localize(dt)
    return dt


def local_midnight(day: date) -> datetime:
    return local_tz().localize(datetime.combine(day, time.min))


def week_bounds(reference: datetime) -> Tuple[datetime, datetime]:
    """Monday 00:00 local of the week containing `reference`, and the next Monday.

    Both bounds are returned in UTC.
    """
    local = localize(reference).astimezone(local_tz())
    monday = local.date() - timedelta(days=local.weekday())
    start = local_midnight(monday)
    end = local_midnight(monday + timedelta(days=7))
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def next_monday_midnight(from_dt: Optional[datetime] = None) -> datetime:
    """Next Monday 00:00 local strictly after the current local day (UTC)"""
    from_dt = from_dt or datetime.now(timezone.utc)
    _, end = week_bounds(from_dt)
    return end


def duration_minutes(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() // 60)


def day_slots(day: date, open_hour: int, close_hour: int, slot_minutes: int) -> List[Tuple[datetime, datetime]]:
    """Consecutive slots covering the opening hours of a local day"""
    slots = []
    current = local_tz().localize(datetime.combine(day, time(hour=open_hour)))
    closing = local_tz().localize(datetime.combine(day, time(hour=close_hour)))
    if slot_minutes <= 0:
        raise ValueError(f"Slot length must be positive, got {slot_minutes} minutes")
    step = timedelta(minutes=slot_minutes)
    while current < closing:
        slot_end = local_tz().normalize(current + step)
        slots.append((current, slot_end))
        current = slot_end
    return slots


def parse_timestamp(value: str, field: str) -> datetime:
    """Parse an ISO-8601 query value; naive values are local time"""
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError):
        raise ValidationError(f"Invalid {field} format", "Expected an ISO-8601 timestamp")
    return localize(parsed)


def parse_date(value: str, field: str) -> date:
    try:
        return date_parser.isoparse(value).date()
    except (ValueError, OverflowError):
        raise ValidationError(f"Invalid {field} format", "Expected YYYY-MM-DD")
