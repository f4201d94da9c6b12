# brobookme/routers/providers.py

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from redis import Redis
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_provider_or_404, get_redis
from ..models import Providers as DBProviders
from ..schemas.providers import (
    ProviderCreate,
    ProviderRead,
    ProviderSettingsIn,
)
from ..services.slots import invalidate_provider_cache
from ..services.slots.availability import get_provider, load_json_list, load_work_schedule

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/providers", tags=["providers"])


def provider_read(obj: DBProviders) -> ProviderRead:
    work_schedule = load_work_schedule(obj) or {}
    return ProviderRead(
        id=obj.id,
        username=obj.username,
        name=obj.name,
        email=obj.email,
        is_suspended=bool(obj.is_suspended),
        settings=ProviderSettingsIn(
            working_hours=work_schedule,
            slot_duration_minutes=obj.slot_duration_minutes,
            break_minutes=obj.break_minutes,
            booking_delay_hours=obj.booking_delay_hours,
            multiple_bookings_per_slot=bool(obj.multiple_bookings_per_slot),
            bookings_per_slot=obj.bookings_per_slot,
            timezone=obj.timezone,
            date_format=obj.date_format,
        ),
        blocked_dates=load_json_list(obj.blocked_dates),
        blocked_slots=load_json_list(obj.blocked_slots),
    )


def apply_settings(obj: DBProviders, data: ProviderSettingsIn) -> None:
    obj.work_schedule = json.dumps({
        day: hours.model_dump() if hours else None
        for day, hours in data.working_hours.items()
    })
    obj.slot_duration_minutes = data.slot_duration_minutes
    obj.break_minutes = data.break_minutes
    obj.booking_delay_hours = data.booking_delay_hours
    obj.multiple_bookings_per_slot = int(data.multiple_bookings_per_slot)
    obj.bookings_per_slot = data.bookings_per_slot
    obj.timezone = data.timezone
    obj.date_format = data.date_format


@router.post("/", response_model=ProviderRead, status_code=status.HTTP_201_CREATED)
def create_provider(
    data: ProviderCreate,
    db: Session = Depends(get_db),
):
    if get_provider(db, data.username):
        raise HTTPException(status_code=409, detail="Username already taken")

    obj = DBProviders(username=data.username, name=data.name, email=data.email)
    apply_settings(obj, data.settings)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    logger.info(f"Provider created: {obj.username}")
    return provider_read(obj)


@router.get("/{username}", response_model=ProviderRead)
def get_provider_by_username(provider: DBProviders = Depends(get_provider_or_404)):
    return provider_read(provider)


@router.put("/{username}/settings", response_model=ProviderRead)
def update_provider_settings(
    data: ProviderSettingsIn,
    provider: DBProviders = Depends(get_provider_or_404),
    db: Session = Depends(get_db),
    redis: Redis = Depends(get_redis),
):
    apply_settings(provider, data)
    db.commit()
    db.refresh(provider)

    # Cached grids were built from the old hours / policy / timezone
    invalidate_provider_cache(redis, provider.id)
    return provider_read(provider)


@router.patch("/{username}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{username}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
