from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, Optional

from holdaspot.core.config import settings
from holdaspot.core.exceptions import ValidationError
from holdaspot.core.timeutils import duration_minutes


@dataclass
class CreditBreakdown:
    """Credits available to a user for one calendar week"""
    weekly_allowance: int
    used_this_week: int
    weekly_remaining: int
    bonus_credits: int
    total_available: int
    week_start: datetime
    week_end: datetime

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["week_start"] = self.week_start.isoformat()
        data["week_end"] = self.week_end.isoformat()
        return data


def compute_allowance(
    used_this_week: int,
    bonus_credits: int,
    week_start: datetime,
    week_end: datetime,
    weekly_allowance: Optional[int] = None,
) -> CreditBreakdown:
    """Combine the weekly allowance with the bonus pool"""
    if weekly_allowance is None:
        weekly_allowance = settings.WEEKLY_CREDITS
    weekly_remaining = max(0, weekly_allowance - used_this_week)
    return CreditBreakdown(
        weekly_allowance=weekly_allowance,
        used_this_week=used_this_week,
        weekly_remaining=weekly_remaining,
        bonus_credits=bonus_credits,
        total_available=weekly_remaining + bonus_credits,
        week_start=week_start,
        week_end=week_end,
    )


def validate_booking(
    start: datetime,
    end: datetime,
    max_booking_hours: Optional[float] = None,
    now: Optional[datetime] = None,
) -> int:
    """Check a proposed interval and return the credits it costs.

    Raises ValidationError naming the first violated rule.
    """
    if max_booking_hours is None:
        max_booking_hours = settings.DEFAULT_MAX_BOOKING_HOURS
    now = now or datetime.now(start.tzinfo)
    slot = settings.MINUTES_PER_CREDIT

    if start <= now:
        raise ValidationError("Cannot book time slots in the past")

    if end <= start:
        raise ValidationError("End time must be after start time")

    # Seconds count too: 10:00:00 -> 10:30:15 is not aligned
    if (end - start).total_seconds() % (slot * 60) != 0:
        raise ValidationError(f"Booking must be in {slot}-minute increments")

    minutes = duration_minutes(start, end)
    if minutes > max_booking_hours * 60:
        raise ValidationError(f"Maximum booking duration is {max_booking_hours:g} hours")

    return minutes // slot


def bonus_portion(credits_needed: int, weekly_remaining: int) -> int:
    """Part of a booking paid from the bonus pool"""
    return max(0, credits_needed - weekly_remaining)


def bonus_excess(used: int, weekly_allowance: Optional[int] = None) -> int:
    """Credits of a week that could only have come from the bonus pool"""
    if weekly_allowance is None:
        weekly_allowance = settings.WEEKLY_CREDITS
    return max(0, used - weekly_allowance)


def bonus_refund(used_including: int, credits_used: int, weekly_allowance: Optional[int] = None) -> int:
    """Bonus credits to return when a booking of `credits_used` is cancelled.

    `used_including` is the week's confirmed usage with the booking still counted.
    """
    used_excluding = used_including - credits_used
    return bonus_excess(used_including, weekly_allowance) - bonus_excess(used_excluding, weekly_allowance)


def credits_to_time_string(credits: int) -> str:
    """Human readable duration (e.g. "30 minutes", "1.5 hours")"""
    minutes = credits * settings.MINUTES_PER_CREDIT
    if minutes < 60:
        return f"{minutes} minutes"
    hours = minutes / 60
    return "1 hour" if hours == 1 else f"{hours:g} hours"
