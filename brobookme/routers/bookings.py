# brobookme/routers/bookings.py

import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_now, get_provider_or_404
from ..models import Bookings as DBBookings
from ..models import Providers as DBProviders
from ..schemas.bookings import (
    BookingCancel,
    BookingCreate,
    BookingRead,
    BookingReschedule,
)
from ..services.slots import BookingStatus, SlotNoLongerAvailable, ensure_slot_bookable
from ..services.slots.availability import (
    booking_to_snapshot,
    get_bookings_for_day,
    provider_to_schedule,
    to_utc_text,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/providers/{username}/bookings", tags=["bookings"])


def _recheck_slot(
    db: Session,
    provider: DBProviders,
    slot_start: datetime,
    now: datetime,
    ignore_booking_id: int | None = None,
) -> None:
    """Availability re-check right before a booking row is written."""
    schedule = provider_to_schedule(provider)
    slot_date = slot_start.astimezone(schedule.zone).date()
    bookings = [
        booking_to_snapshot(b)
        for b in get_bookings_for_day(db, provider.id, slot_date, schedule)
    ]
    try:
        ensure_slot_bookable(schedule, slot_start, bookings, now, ignore_booking_id)
    except SlotNoLongerAvailable as e:
        logger.info(f"Booking rejected for {provider.username}: {e}")
        raise


def _get_booking_or_404(db: Session, provider: DBProviders, id: int) -> DBBookings:
    obj = db.get(DBBookings, id)
    if not obj or obj.provider_id != provider.id:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.get("/", response_model=list[BookingRead])
def list_bookings_for_day(
    target_date: date = Query(..., alias="date"),
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
):
    schedule = provider_to_schedule(provider)
    return get_bookings_for_day(db, provider.id, target_date, schedule)


@router.get("/{id}", response_model=BookingRead)
def get_booking(
    id: int,
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
):
    return _get_booking_or_404(db, provider, id)


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    if provider.is_suspended:
        raise HTTPException(status_code=404, detail="Provider not found")

    # Lock the provider row so concurrent bookings re-check one at a time
    db.query(DBProviders).filter(DBProviders.id == provider.id).with_for_update().first()
    _recheck_slot(db, provider, data.date_time, now)

    obj = DBBookings(
        **data.model_dump(exclude={"date_time"}),
        provider_id=provider.id,
        date_time=to_utc_text(data.date_time),
        status=BookingStatus.UPCOMING.value,
    )
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info(f"Booking created: provider={provider.username} id={obj.id} at={obj.date_time}")
    return obj


@router.post("/{id}/reschedule", response_model=BookingRead)
def reschedule_booking(
    id: int,
    data: BookingReschedule,
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
    now: datetime = Depends(get_now),
):
    obj = _get_booking_or_404(db, provider, id)
    if obj.status not in (BookingStatus.UPCOMING.value, BookingStatus.PENDING.value):
        raise HTTPException(status_code=400, detail=f"Cannot reschedule a {obj.status} booking")

    db.query(DBProviders).filter(DBProviders.id == provider.id).with_for_update().first()
    _recheck_slot(db, provider, data.date_time, now, ignore_booking_id=obj.id)

    obj.date_time = to_utc_text(data.date_time)
    db.commit()
    db.refresh(obj)
    logger.info(f"Booking rescheduled: id={obj.id} to={obj.date_time}")
    return obj


@router.post("/{id}/cancel", response_model=BookingRead)
def cancel_booking(
    id: int,
    data: BookingCancel | None = None,
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
):
    obj = _get_booking_or_404(db, provider, id)
    if obj.status not in (BookingStatus.UPCOMING.value, BookingStatus.PENDING.value):
        raise HTTPException(status_code=400, detail=f"Cannot cancel a {obj.status} booking")
    obj.status = BookingStatus.CANCELED.value
    obj.cancel_reason = data.reason if data else None
    db.commit()
    db.refresh(obj)
    logger.info(f"Booking canceled: id={obj.id}")
    return obj


@router.post("/{id}/complete", response_model=BookingRead)
def complete_booking(
    id: int,
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
):
    obj = _get_booking_or_404(db, provider, id)
    if obj.status == BookingStatus.CANCELED.value:
        raise HTTPException(status_code=400, detail="Cannot complete a Canceled booking")
    obj.status = BookingStatus.COMPLETED.value
    db.commit()
    db.refresh(obj)
    return obj


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
