# brobookme/dependencies.py
"""Shared FastAPI dependencies (overridden in tests)."""

from datetime import datetime, timezone

from fastapi import Depends, HTTPException
from redis import Redis
from sqlalchemy.orm import Session

from .config import settings
from .database import get_db
from .redis_client import redis_client
from .services.slots import SlotsRedisStore
from .services.slots.availability import get_provider


def get_now() -> datetime:
    return datetime.now(timezone.utc)


def get_redis() -> Redis:
    return redis_client


def get_slots_store(redis: Redis = Depends(get_redis)) -> SlotsRedisStore | None:
    if not settings.slots_cache_enabled:
        return None
    return SlotsRedisStore(redis)


def get_provider_or_404(username: str, db: Session = Depends(get_db)):
    obj = get_provider(db, username)
    if not obj:
        raise HTTPException(status_code=404, detail="Provider not found")
    return obj
