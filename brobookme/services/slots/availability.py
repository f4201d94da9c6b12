# brobookme/services/slots/availability.py
"""
Day availability for the two consumers of slots.

- management_day: provider slot management (blocks annotated, all slots shown)
- customer_day: public booking form (blocked and taken slots removed)
- ensure_slot_bookable: re-check right before a booking is written

Raw slots come from the Redis cache when a store is given, otherwise they are
calculated on the fly. Blocks and bookings are always applied fresh.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from .blocking import annotate_blocks, exclude_blocked
from .calculator import compute_raw_slots, local_today
from .config import (
    BookingSnapshot,
    BookingStatus,
    ProviderSchedule,
    Slot,
    SlotPolicy,
    working_hours_from_dict,
)
from .errors import SlotNoLongerAvailable
from .reconciler import free_slots, mark_taken
from .redis_store import SlotsRedisStore, slot_scores

logger = logging.getLogger(__name__)


@dataclass
class DaySlots:
    date: date
    day_blocked: bool
    slots: list[Slot] = field(default_factory=list)


def management_day(
    schedule: ProviderSchedule,
    target_date: date,
    bookings: list[BookingSnapshot],
    now: datetime,
    raw_slots: list[datetime] | None = None,
) -> DaySlots:
    """Every slot of the day, flagged blocked / day-blocked / taken."""
    if raw_slots is None:
        raw_slots = _raw_slots(schedule, target_date, now)

    slots, day_blocked = annotate_blocks(
        raw_slots, target_date, schedule.blocked_dates, schedule.blocked_slots
    )
    slots = mark_taken(
        slots,
        bookings,
        include_completed=target_date <= local_today(now, schedule.zone),
        capacity=schedule.capacity,
    )
    return DaySlots(date=target_date, day_blocked=day_blocked, slots=slots)


def customer_day(
    schedule: ProviderSchedule,
    target_date: date,
    bookings: list[BookingSnapshot],
    now: datetime,
    raw_slots: list[datetime] | None = None,
) -> DaySlots:
    """Only the slots a customer can book right now."""
    if raw_slots is None:
        raw_slots = _raw_slots(schedule, target_date, now)

    slots, day_blocked = exclude_blocked(
        raw_slots, target_date, schedule.blocked_dates, schedule.blocked_slots
    )
    slots = mark_taken(slots, bookings, capacity=schedule.capacity)
    return DaySlots(date=target_date, day_blocked=day_blocked, slots=free_slots(slots))


def ensure_slot_bookable(
    schedule: ProviderSchedule,
    slot_start: datetime,
    bookings: list[BookingSnapshot],
    now: datetime,
    ignore_booking_id: int | None = None,
) -> None:
    """
    Re-run availability for a single slot before it is persisted.

    Never uses the cache: this check closes the window between listing
    slots and writing the booking.

    Raises:
        SlotNoLongerAvailable: Slot is closed, blocked, too soon or full.
    """
    target_date = slot_start.astimezone(schedule.zone).date()
    if ignore_booking_id is not None:
        bookings = [b for b in bookings if b.id != ignore_booking_id]

    raw = _raw_slots(schedule, target_date, now)
    slot_utc = slot_start.astimezone(timezone.utc)
    if slot_utc not in {s.astimezone(timezone.utc) for s in raw}:
        raise SlotNoLongerAvailable(slot_start, "slot is outside working hours or too soon")

    day = customer_day(schedule, target_date, bookings, now, raw_slots=raw)
    if day.day_blocked:
        raise SlotNoLongerAvailable(slot_start, "day is blocked")

    if slot_utc not in {s.start.astimezone(timezone.utc) for s in day.slots}:
        raise SlotNoLongerAvailable(slot_start, "slot is blocked or fully booked")


# ── Raw slots (with cache) ───────────────────────────────────────────────


def cached_raw_slots(
    schedule: ProviderSchedule,
    provider_id: int,
    target_date: date,
    now: datetime,
    store: SlotsRedisStore | None,
) -> list[datetime]:
    """Raw slots via Redis cache when available, calculated otherwise."""
    if store is None:
        return _raw_slots(schedule, target_date, now)

    try:
        cached = store.get_available_slots(provider_id, target_date, now)
        if cached is not None:
            return cached

        # Cache miss, calculate and store
        raw = _raw_slots(schedule, target_date, now)
        store.store_day_slots(
            provider_id,
            target_date,
            slot_scores(target_date, raw, schedule.policy, schedule.zone),
            schedule.zone,
        )
        return raw
    except RedisError as e:
        logger.error(f"Slots cache unavailable, calculating directly: {e}")
        return _raw_slots(schedule, target_date, now)


def _raw_slots(schedule: ProviderSchedule, target_date: date, now: datetime) -> list[datetime]:
    return compute_raw_slots(
        target_date, schedule.working_hours or {}, schedule.policy, now, schedule.zone
    )


# ── Conversion from storage ──────────────────────────────────────────────


def provider_to_schedule(provider) -> ProviderSchedule:
    """Build the immutable schedule snapshot from a Providers row."""
    return ProviderSchedule(
        working_hours=working_hours_from_dict(load_work_schedule(provider)),
        policy=SlotPolicy(
            slot_duration_minutes=provider.slot_duration_minutes,
            break_minutes=provider.break_minutes or 0,
            booking_delay_hours=provider.booking_delay_hours or 0,
        ),
        timezone=provider.timezone or "UTC",
        blocked_dates=frozenset(load_json_list(provider.blocked_dates)),
        blocked_slots=frozenset(
            parsed
            for parsed in map(parse_instant, load_json_list(provider.blocked_slots))
            if parsed is not None
        ),
        multiple_bookings_per_slot=bool(provider.multiple_bookings_per_slot),
        bookings_per_slot=provider.bookings_per_slot or 1,
    )


def booking_to_snapshot(booking) -> BookingSnapshot:
    return BookingSnapshot(
        id=booking.id,
        date_time=parse_instant(booking.date_time),
        status=BookingStatus(booking.status),
    )


def load_work_schedule(provider) -> dict | None:
    """Stored weekday map of a Providers row, None when missing or unreadable."""
    try:
        data = json.loads(provider.work_schedule) if provider.work_schedule else None
    except json.JSONDecodeError:
        logger.warning(f"Provider {provider.username}: unreadable work_schedule")
        return None
    return data if isinstance(data, dict) else None


def load_json_list(value: str | None) -> list:
    try:
        data = json.loads(value) if value else []
    except json.JSONDecodeError:
        return []
    return data if isinstance(data, list) else []


def parse_instant(value: str | datetime) -> datetime | None:
    """ISO string → aware datetime. Naive values are taken as UTC."""
    try:
        dt = value if isinstance(value, datetime) else datetime.fromisoformat(value)
    except (TypeError, ValueError):
        logger.warning(f"Unparsable instant: {value!r}")
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def to_utc_text(value: datetime) -> str:
    """Storage form of an instant: second precision, UTC offset."""
    return value.astimezone(timezone.utc).replace(microsecond=0).isoformat()


# ── Database helpers ─────────────────────────────────────────────────────


def get_provider(db: Session, username: str):
    """Get provider by username."""
    from ...models import Providers
    return db.query(Providers).filter(Providers.username == username).first()


def get_bookings_for_day(
    db: Session,
    provider_id: int,
    target_date: date,
    schedule: ProviderSchedule,
) -> list:
    """Get bookings of the provider's local calendar day."""
    from ...models import Bookings

    day_start = datetime.combine(target_date, time.min, tzinfo=schedule.zone)
    day_end = datetime.combine(target_date + timedelta(days=1), time.min, tzinfo=schedule.zone)

    return (
        db.query(Bookings)
        .filter(
            Bookings.provider_id == provider_id,
            Bookings.date_time >= to_utc_text(day_start),
            Bookings.date_time < to_utc_text(day_end),
        )
        .order_by(Bookings.date_time)
        .all()
    )
