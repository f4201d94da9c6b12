# brobookme/services/slots/__init__.py
"""
Slots calculation module.

Level 1: Raw provider slots (cached in Redis Sorted Sets)
Level 2: Blocks and bookings (applied on every read)
"""

from .config import (
    BookingSnapshot,
    BookingStatus,
    ProviderSchedule,
    Slot,
    SlotPolicy,
    WorkingHours,
)
from .errors import ConfigurationError, SlotNoLongerAvailable, SlotsError
from .calculator import compute_raw_slots
from .blocking import annotate_blocks, exclude_blocked
from .reconciler import find_next_available_date, mark_taken
from .presentation import present_slots
from .redis_store import SlotsRedisStore
from .invalidator import invalidate_provider_cache
from .availability import customer_day, ensure_slot_bookable, management_day

__all__ = [
    "BookingSnapshot",
    "BookingStatus",
    "ProviderSchedule",
    "Slot",
    "SlotPolicy",
    "WorkingHours",
    "ConfigurationError",
    "SlotNoLongerAvailable",
    "SlotsError",
    "compute_raw_slots",
    "annotate_blocks",
    "exclude_blocked",
    "find_next_available_date",
    "mark_taken",
    "present_slots",
    "SlotsRedisStore",
    "invalidate_provider_cache",
    "customer_day",
    "ensure_slot_bookable",
    "management_day",
]
