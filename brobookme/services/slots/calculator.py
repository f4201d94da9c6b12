# brobookme/services/slots/calculator.py
"""
Level 1: Raw slot calculation.

Produces the ordered slot start instants of one provider day:
  working hours of the weekday → grid of (slot_duration + break) steps

Contains:
✓ working hours of the weekday
✓ slot duration + break step
✓ booking delay (same-day cutoff only)

Does NOT contain:
✗ Blocked dates / blocked slots (Blocking Filter)
✗ Bookings (Booking Reconciler)

Only the slot START has to be before closing time, so the last slot of a day
may end after `end`. Existing providers rely on those slot counts.
"""

import logging
from datetime import date, datetime, timedelta, timezone as dt_timezone
from zoneinfo import ZoneInfo

from .config import WEEKDAYS, SlotPolicy, WorkingHours, WorkingHoursConfig, parse_time_of_day

logger = logging.getLogger(__name__)


def compute_raw_slots(
    target_date: date,
    working_hours: WorkingHoursConfig,
    policy: SlotPolicy,
    now: datetime,
    timezone: str | ZoneInfo,
) -> list[datetime]:
    """
    Calculate slot start instants for a provider on a specific date.

    Returns:
        Ascending list of timezone-aware datetimes (in the provider zone).
        Empty list = closed, past or fully elapsed day.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    zone = _zone(timezone)
    today = local_today(now, zone)

    if target_date < today:
        return []

    hours = (working_hours or {}).get(weekday_name(target_date))
    if hours is None:
        return []

    bounds = _day_bounds(target_date, hours, zone)
    if bounds is None:
        return []
    start, end = bounds

    step = timedelta(minutes=policy.step_minutes)
    if step <= timedelta(0):
        # Rejected at settings save time, never loop on it
        logger.warning("Non-positive slot step %s, no slots generated", step)
        return []

    cutoff = None
    if target_date == today:
        cutoff = now + timedelta(hours=policy.booking_delay_hours)

    slots: list[datetime] = []
    current = start
    while current < end:
        if cutoff is None or current > cutoff:
            slots.append(current.astimezone(zone))
        current += step

    return slots


# ── Helpers ──────────────────────────────────────────────────────────────


def weekday_name(target_date: date) -> str:
    """"monday" … "sunday" for a calendar date."""
    return WEEKDAYS[target_date.weekday()]


def local_today(now: datetime, timezone: str | ZoneInfo) -> date:
    """Calendar date of `now` in the provider timezone."""
    return now.astimezone(_zone(timezone)).date()


def _zone(timezone: str | ZoneInfo) -> ZoneInfo:
    if isinstance(timezone, ZoneInfo):
        return timezone
    return ZoneInfo(timezone)


def _day_bounds(
    target_date: date,
    hours: WorkingHours,
    zone: ZoneInfo,
) -> tuple[datetime, datetime] | None:
    """
    Resolve working hours of a day to UTC instants.

    Stepping happens on absolute instants, so a DST switch inside working
    hours shifts later wall-clock labels instead of producing duplicates.
    """
    try:
        start_t = parse_time_of_day(hours.start)
        end_t = parse_time_of_day(hours.end)
    except (ValueError, AttributeError):
        logger.warning(
            "Malformed working hours %r-%r for %s, treating day as closed",
            hours.start, hours.end, target_date.isoformat(),
        )
        return None

    start = datetime.combine(target_date, start_t, tzinfo=zone).astimezone(dt_timezone.utc)
    end = datetime.combine(target_date, end_t, tzinfo=zone).astimezone(dt_timezone.utc)
    return start, end
