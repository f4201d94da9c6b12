"""Shared test fixtures and helpers."""

import fnmatch
import json
from datetime import date, datetime, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from brobookme.models import Base, Bookings, Providers
from brobookme.services.slots.config import (
    BookingSnapshot,
    BookingStatus,
    ProviderSchedule,
    SlotPolicy,
    WorkingHours,
)


# Monday 2025-03-10, 09:15 UTC
NOW = datetime(2025, 3, 10, 9, 15, tzinfo=timezone.utc)
TODAY = date(2025, 3, 10)
WEDNESDAY = date(2025, 3, 12)
SATURDAY = date(2025, 3, 15)

WEEKDAY_HOURS = {
    day: WorkingHours("09:00", "17:00")
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
}


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def make_schedule(
    working_hours: Optional[dict] = None,
    slot_duration_minutes: int = 45,
    break_minutes: int = 15,
    booking_delay_hours: float = 0,
    **kwargs,
) -> ProviderSchedule:
    """Helper to create a ProviderSchedule with sensible defaults."""
    return ProviderSchedule(
        working_hours=WEEKDAY_HOURS if working_hours is None else working_hours,
        policy=SlotPolicy(slot_duration_minutes, break_minutes, booking_delay_hours),
        **kwargs,
    )


def make_booking(
    date_time: datetime,
    status: BookingStatus = BookingStatus.UPCOMING,
    id: int = 1,
) -> BookingSnapshot:
    return BookingSnapshot(id=id, date_time=date_time, status=status)


class FakePipeline:
    def __init__(self, redis: "FakeRedis"):
        self.redis = redis
        self.calls = []

    def __getattr__(self, name):
        def queue(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return queue

    def execute(self):
        return [getattr(self.redis, name)(*args, **kwargs) for name, args, kwargs in self.calls]


class FakeRedis:
    """In-memory stand-in for the sorted-set commands the slot store uses."""

    def __init__(self):
        self.zsets: dict[str, dict[str, float]] = {}
        self.expiry: dict[str, int] = {}

    def pipeline(self):
        return FakePipeline(self)

    def ping(self):
        return True

    def exists(self, key):
        return int(key in self.zsets)

    def delete(self, *keys):
        deleted = 0
        for key in keys:
            if self.zsets.pop(key, None) is not None:
                deleted += 1
            self.expiry.pop(key, None)
        return deleted

    def zadd(self, key, mapping):
        self.zsets.setdefault(key, {}).update(mapping)
        return len(mapping)

    def expireat(self, key, when):
        self.expiry[key] = when
        return True

    def zrangebyscore(self, key, min, max):
        items = sorted(self.zsets.get(key, {}).items(), key=lambda kv: (kv[1], kv[0]))
        return [member for member, score in items if self._in_range(score, min, max)]

    def scan_iter(self, match="*"):
        return iter([key for key in list(self.zsets) if fnmatch.fnmatch(key, match)])

    @staticmethod
    def _in_range(score, min, max):
        def bound(value):
            value = str(value)
            if value.startswith("("):
                return float(value[1:]), True
            return float(value), False

        low, low_excl = bound(min)
        high, high_excl = bound(max)
        above = score > low if low_excl else score >= low
        below = score < high if high_excl else score <= high
        return above and below


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def provider_row(db_session):
    """Provider working Mon–Fri 09:00–17:00 on a 45+15 minute grid."""
    obj = Providers(
        username="acme",
        name="Acme Studio",
        email="owner@acme.test",
        timezone="UTC",
        date_format="dd/MM/yyyy",
        work_schedule=json.dumps({
            day: {"start": hours.start, "end": hours.end}
            for day, hours in WEEKDAY_HOURS.items()
        } | {"saturday": None, "sunday": None}),
        slot_duration_minutes=45,
        break_minutes=15,
        booking_delay_hours=0,
        multiple_bookings_per_slot=0,
        bookings_per_slot=1,
        blocked_dates="[]",
        blocked_slots="[]",
        is_suspended=0,
    )
    db_session.add(obj)
    db_session.commit()
    db_session.refresh(obj)
    return obj


def add_booking(db_session, provider, date_time: str, status: str = "Upcoming") -> Bookings:
    obj = Bookings(
        provider_id=provider.id,
        customer_name="Jane Doe",
        date_time=date_time,
        status=status,
    )
    db_session.add(obj)
    db_session.commit()
    db_session.refresh(obj)
    return obj


@pytest.fixture
def client(db_session, fake_redis):
    from brobookme.database import get_db
    from brobookme.dependencies import get_now, get_redis
    from brobookme.main import app

    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_now] = lambda: NOW
    app.dependency_overrides[get_redis] = lambda: fake_redis
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
