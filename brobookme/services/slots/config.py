# brobookme/services/slots/config.py
"""
Provider settings snapshot for slots calculation.

Everything here is immutable: a ProviderSchedule is built once per request
from the stored provider row and handed to the pure calculation functions.
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from functools import cached_property
from zoneinfo import ZoneInfo


WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


@dataclass(frozen=True)
class WorkingHours:
    """Open/close wall-clock times for one weekday ("HH:MM", 24h)."""
    start: str
    end: str


# weekday name -> hours, missing key or None = closed
WorkingHoursConfig = dict[str, WorkingHours | None]


@dataclass(frozen=True)
class SlotPolicy:
    """
    Slot grid policy.

    Attributes:
        slot_duration_minutes: Length of one appointment
        break_minutes: Gap after each appointment
        booking_delay_hours: Minimum lead time for same-day slots
    """
    slot_duration_minutes: int
    break_minutes: int = 0
    booking_delay_hours: float = 0

    @property
    def step_minutes(self) -> int:
        """Distance between two consecutive slot starts."""
        return self.slot_duration_minutes + self.break_minutes


class BookingStatus(str, Enum):
    PENDING = "Pending"
    UPCOMING = "Upcoming"
    COMPLETED = "Completed"
    CANCELED = "Canceled"
    NOT_COMPLETED = "Not Completed"


@dataclass(frozen=True)
class BookingSnapshot:
    id: int | str
    date_time: datetime
    status: BookingStatus


@dataclass(frozen=True)
class ProviderSchedule:
    """Read-only view of everything the slot core needs about a provider."""
    working_hours: WorkingHoursConfig | None
    policy: SlotPolicy
    timezone: str = "UTC"
    blocked_dates: frozenset[str] = field(default_factory=frozenset)
    blocked_slots: frozenset[datetime] = field(default_factory=frozenset)
    multiple_bookings_per_slot: bool = False
    bookings_per_slot: int = 1

    @cached_property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def capacity(self) -> int:
        """How many bookings a single slot accepts."""
        if self.multiple_bookings_per_slot:
            return max(self.bookings_per_slot, 1)
        return 1


# ── Time helpers ─────────────────────────────────────────────────────────


def parse_time_of_day(value: str) -> time:
    """Parse "HH:MM" into a time. Raises ValueError on bad input."""
    hour_str, minute_str = value.strip().split(":")
    return time(int(hour_str), int(minute_str))


def working_hours_from_dict(data: dict | None) -> WorkingHoursConfig | None:
    """
    Build WorkingHoursConfig from the stored JSON shape:
    {"monday": {"start": "09:00", "end": "17:00"}, "sunday": null, ...}

    Keys are matched case-insensitively. Entries without both start and end
    are treated as closed.
    """
    if data is None:
        return None

    result: WorkingHoursConfig = {}
    for day, hours in data.items():
        name = day.lower()
        if name not in WEEKDAYS:
            continue
        if isinstance(hours, dict) and hours.get("start") and hours.get("end"):
            result[name] = WorkingHours(start=hours["start"], end=hours["end"])
        else:
            result[name] = None
    return result


@dataclass(frozen=True)
class Slot:
    """
    One slot of a provider day, identified by its start instant.

    Flags are filled in step by step: blocking filter sets `blocked` and
    `day_blocked`, reconciler sets `taken` and `booked_count`.
    """
    start: datetime
    blocked: bool = False
    day_blocked: bool = False
    taken: bool = False
    booked_count: int = 0

    @property
    def is_free(self) -> bool:
        return not (self.blocked or self.day_blocked or self.taken)
