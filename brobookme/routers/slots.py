# brobookme/routers/slots.py
"""
Slots API endpoints.

GET  /providers/{username}/slots/day            - Bookable slots (booking form)
GET  /providers/{username}/slots/manage         - Annotated slots (slot management)
GET  /providers/{username}/slots/next-available - First date with open slots
POST /providers/{username}/slots/blocked-slots  - Block / unblock one slot
POST /providers/{username}/slots/blocked-dates  - Block / unblock whole dates
POST /providers/{username}/slots/invalidate     - Drop cached raw slots
"""

import json
import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from redis import Redis
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..dependencies import get_now, get_provider_or_404, get_redis, get_slots_store
from ..models import Providers as DBProviders
from ..schemas.slots import (
    BlockedDatesUpdate,
    BlockedSlotToggle,
    BlockedStateResponse,
    InvalidateResponse,
    NextAvailableResponse,
    SlotsDayResponse,
)
from ..services.slots import (
    SlotsRedisStore,
    customer_day,
    find_next_available_date,
    invalidate_provider_cache,
    management_day,
    present_slots,
)
from ..services.slots.availability import (
    DaySlots,
    booking_to_snapshot,
    cached_raw_slots,
    get_bookings_for_day,
    load_json_list,
    parse_instant,
    provider_to_schedule,
    to_utc_text,
)
from ..services.slots.calculator import local_today
from ..services.slots.invalidator import get_affected_dates
from ..services.slots.presentation import format_slot_date


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/providers/{username}/slots", tags=["slots"])


def _day_response(
    provider: DBProviders,
    day: DaySlots,
    now: datetime,
) -> SlotsDayResponse:
    return SlotsDayResponse(
        username=provider.username,
        date=day.date,
        date_display=format_slot_date(day.date, provider.date_format),
        timezone=provider.timezone,
        day_blocked=day.day_blocked,
        slots=present_slots(day.slots, now, provider.timezone),
    )


@router.get("/day", response_model=SlotsDayResponse)
def get_bookable_slots(
    target_date: date = Query(..., alias="date"),
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    store: SlotsRedisStore | None = Depends(get_slots_store),
):
    """Slots a customer can book on a date."""
    if provider.is_suspended:
        raise HTTPException(status_code=404, detail="Provider not found")

    schedule = provider_to_schedule(provider)
    if target_date < local_today(now, schedule.zone):
        raise HTTPException(status_code=400, detail="Date cannot be in the past")

    raw = cached_raw_slots(schedule, provider.id, target_date, now, store)
    bookings = [
        booking_to_snapshot(b)
        for b in get_bookings_for_day(db, provider.id, target_date, schedule)
    ]
    day = customer_day(schedule, target_date, bookings, now, raw_slots=raw)
    return _day_response(provider, day, now)


@router.get("/manage", response_model=SlotsDayResponse)
def get_management_slots(
    target_date: date = Query(..., alias="date"),
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
    store: SlotsRedisStore | None = Depends(get_slots_store),
):
    """All slots of a date with blocked / booked flags (provider view)."""
    schedule = provider_to_schedule(provider)
    raw = cached_raw_slots(schedule, provider.id, target_date, now, store)
    bookings = [
        booking_to_snapshot(b)
        for b in get_bookings_for_day(db, provider.id, target_date, schedule)
    ]
    day = management_day(schedule, target_date, bookings, now, raw_slots=raw)
    return _day_response(provider, day, now)


@router.get("/next-available", response_model=NextAvailableResponse)
def get_next_available_date(
    from_date: date | None = None,
    provider: DBProviders = Depends(get_provider_or_404),
    now: datetime = Depends(get_now),
):
    """First date with at least one open slot, scanning forward."""
    schedule = provider_to_schedule(provider)
    start = from_date or local_today(now, schedule.zone)

    # ConfigurationError is turned into 422 by the app handler
    next_date = find_next_available_date(
        start, schedule, now, horizon_days=settings.next_available_horizon_days
    )

    # Fallback returns the start date itself, tell the caller whether it is real
    found = bool(customer_day(schedule, next_date, [], now).slots)
    return NextAvailableResponse(
        username=provider.username,
        from_date=start,
        next_date=next_date,
        found=found,
    )


@router.post("/blocked-slots", response_model=BlockedStateResponse)
def toggle_blocked_slot(
    data: BlockedSlotToggle,
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
):
    """Block or unblock a single slot instant."""
    slot_text = to_utc_text(data.slot)
    current = [
        to_utc_text(parsed)
        for parsed in map(parse_instant, load_json_list(provider.blocked_slots))
        if parsed is not None
    ]

    if data.block:
        updated = current if slot_text in current else current + [slot_text]
    else:
        updated = [s for s in current if s != slot_text]

    provider.blocked_slots = json.dumps(updated)
    db.commit()
    logger.info(
        f"Slot {'blocked' if data.block else 'unblocked'}: {provider.username} {slot_text}"
    )
    return _blocked_state(provider)


@router.post("/blocked-dates", response_model=BlockedStateResponse)
def update_blocked_dates(
    data: BlockedDatesUpdate,
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
):
    """Block or unblock whole dates (set semantics, order kept)."""
    current = load_json_list(provider.blocked_dates)
    keys = [d.isoformat() for d in data.dates]

    if data.block:
        updated = list(dict.fromkeys(current + keys))
    else:
        to_unblock = set(keys)
        updated = [d for d in current if d not in to_unblock]

    provider.blocked_dates = json.dumps(updated)
    db.commit()
    logger.info(
        f"Dates {'blocked' if data.block else 'unblocked'}: {provider.username} {keys}"
    )
    return _blocked_state(provider)


@router.post("/invalidate", response_model=InvalidateResponse)
def invalidate_slots_cache(
    date_start: date | None = None,
    date_end: date | None = None,
    provider: DBProviders = Depends(get_provider_or_404),
    redis: Redis = Depends(get_redis),
):
    """Manually invalidate slots cache for provider (admin endpoint)."""
    dates = None
    if date_start is not None:
        dates = get_affected_dates(date_start, date_end or date_start)

    deleted = invalidate_provider_cache(redis, provider.id, dates)

    return InvalidateResponse(
        username=provider.username,
        deleted_keys=deleted,
        dates=dates if dates else "all",
    )


def _blocked_state(provider: DBProviders) -> BlockedStateResponse:
    return BlockedStateResponse(
        username=provider.username,
        blocked_dates=load_json_list(provider.blocked_dates),
        blocked_slots=load_json_list(provider.blocked_slots),
    )
