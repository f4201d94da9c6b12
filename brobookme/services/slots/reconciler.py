# brobookme/services/slots/reconciler.py
"""
Level 2: Cross-reference slots with existing bookings.

Slots and bookings share one grid (bookings are only created at slot starts),
so occupancy is exact instant equality, not interval overlap.
"""

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime, timedelta, timezone

from .blocking import exclude_blocked
from .calculator import compute_raw_slots
from .config import BookingSnapshot, BookingStatus, ProviderSchedule, Slot
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_DAYS = 365

# Pending bookings wait for payment and keep the slot reserved meanwhile
OCCUPYING_STATUSES = frozenset({BookingStatus.UPCOMING, BookingStatus.PENDING})


def mark_taken(
    slots: list[Slot],
    bookings: Iterable[BookingSnapshot],
    *,
    include_completed: bool = False,
    capacity: int = 1,
) -> list[Slot]:
    """
    Flag slots occupied by bookings.

    Args:
        slots: Slots of one day
        bookings: Bookings of the same day
        include_completed: Count Completed bookings too (past-day views)
        capacity: Bookings a slot accepts before it is taken

    Returns:
        New list, same order, with taken/booked_count set.
    """
    statuses = set(OCCUPYING_STATUSES)
    if include_completed:
        statuses.add(BookingStatus.COMPLETED)

    counts = Counter(
        booking.date_time.astimezone(timezone.utc)
        for booking in bookings
        if booking.status in statuses
    )

    result = []
    for slot in slots:
        count = counts.get(slot.start.astimezone(timezone.utc), 0)
        result.append(replace(slot, taken=count >= capacity, booked_count=count))
    return result


def free_slots(slots: Iterable[Slot]) -> list[Slot]:
    """Slots that are neither blocked nor taken."""
    return [slot for slot in slots if slot.is_free]


def find_next_available_date(
    from_date: date,
    schedule: ProviderSchedule,
    now: datetime,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> date:
    """
    First date (from_date inclusive) with at least one customer-bookable slot.

    Bookings are not consulted: the answer says where slots exist, the day
    view then shows which of them are still free.

    Returns:
        The found date, or from_date when nothing opens within horizon_days.

    Raises:
        ConfigurationError: Provider has no working hours configured at all.
    """
    if schedule.working_hours is None:
        raise ConfigurationError("Provider has no working hours configured")

    current = from_date
    for _ in range(horizon_days):
        raw = compute_raw_slots(
            current, schedule.working_hours, schedule.policy, now, schedule.zone
        )
        if raw:
            slots, _ = exclude_blocked(
                raw, current, schedule.blocked_dates, schedule.blocked_slots
            )
            if slots:
                return current
        current += timedelta(days=1)

    logger.info(
        "No open slots within %d days from %s", horizon_days, from_date.isoformat()
    )
    return from_date
