"""Tests for booking reconciliation and the next-available-date search."""

from datetime import date, timedelta

import pytest

from brobookme.services.slots.config import (
    BookingStatus,
    ProviderSchedule,
    Slot,
    SlotPolicy,
    WorkingHours,
)
from brobookme.services.slots.errors import ConfigurationError
from brobookme.services.slots.reconciler import (
    find_next_available_date,
    free_slots,
    mark_taken,
)
from tests.conftest import NOW, SATURDAY, TODAY, WEDNESDAY, make_booking, make_schedule, utc


SLOTS = [Slot(start=utc(2025, 3, 12, h, 0)) for h in (9, 10, 11, 12)]


class TestMarkTaken:
    def test_exact_match_takes_slot(self):
        result = mark_taken(SLOTS, [make_booking(SLOTS[1].start)])
        assert [s.taken for s in result] == [False, True, False, False]
        assert result[1].booked_count == 1

    def test_no_interval_overlap(self):
        result = mark_taken(SLOTS, [make_booking(utc(2025, 3, 12, 10, 30))])
        assert not any(s.taken for s in result)

    def test_canceled_bookings_do_not_count(self):
        result = mark_taken(SLOTS, [make_booking(SLOTS[0].start, BookingStatus.CANCELED)])
        assert not result[0].taken

    def test_pending_booking_holds_slot(self):
        result = mark_taken(SLOTS, [make_booking(SLOTS[0].start, BookingStatus.PENDING)])
        assert result[0].taken

    def test_completed_only_for_past_queries(self):
        booking = make_booking(SLOTS[2].start, BookingStatus.COMPLETED)
        assert not mark_taken(SLOTS, [booking])[2].taken
        assert mark_taken(SLOTS, [booking], include_completed=True)[2].taken

    def test_capacity(self):
        bookings = [make_booking(SLOTS[0].start, id=i) for i in range(2)]
        result = mark_taken(SLOTS, bookings, capacity=3)
        assert not result[0].taken
        assert result[0].booked_count == 2

        bookings.append(make_booking(SLOTS[0].start, id=3))
        assert mark_taken(SLOTS, bookings, capacity=3)[0].taken

    def test_input_is_not_mutated(self):
        mark_taken(SLOTS, [make_booking(SLOTS[0].start)])
        assert not SLOTS[0].taken

    def test_free_slots(self):
        slots = [
            Slot(start=SLOTS[0].start),
            Slot(start=SLOTS[1].start, blocked=True),
            Slot(start=SLOTS[2].start, taken=True),
            Slot(start=SLOTS[3].start, day_blocked=True),
        ]
        assert free_slots(slots) == [slots[0]]


class TestFindNextAvailableDate:
    def test_open_today(self):
        assert find_next_available_date(TODAY, make_schedule(), NOW) == TODAY

    def test_skips_weekend(self):
        assert find_next_available_date(SATURDAY, make_schedule(), NOW) == date(2025, 3, 17)

    def test_skips_blocked_dates(self):
        schedule = make_schedule(blocked_dates=frozenset({"2025-03-12", "2025-03-13"}))
        assert find_next_available_date(WEDNESDAY, schedule, NOW) == date(2025, 3, 14)

    def test_day_with_every_slot_blocked_is_skipped(self):
        hours = {"wednesday": WorkingHours("09:00", "10:00"), "thursday": WorkingHours("09:00", "10:00")}
        schedule = make_schedule(
            working_hours=hours,
            slot_duration_minutes=60,
            break_minutes=0,
            blocked_slots=frozenset({utc(2025, 3, 12, 9, 0)}),
        )
        assert find_next_available_date(WEDNESDAY, schedule, NOW) == date(2025, 3, 13)

    def test_elapsed_today_moves_to_tomorrow(self):
        hours = {"monday": WorkingHours("08:00", "09:00"), "tuesday": WorkingHours("09:00", "10:00")}
        schedule = make_schedule(working_hours=hours, slot_duration_minutes=30, break_minutes=0)
        assert find_next_available_date(TODAY, schedule, NOW) == date(2025, 3, 11)

    def test_always_closed_falls_back_to_from_date(self):
        schedule = make_schedule(working_hours={})
        assert find_next_available_date(WEDNESDAY, schedule, NOW) == WEDNESDAY

    def test_horizon_bounds_the_scan(self):
        # Only open on Fridays, but the horizon ends before Friday
        schedule = make_schedule(working_hours={"friday": WorkingHours("09:00", "17:00")})
        assert find_next_available_date(TODAY, schedule, NOW, horizon_days=4) == TODAY
        assert find_next_available_date(TODAY, schedule, NOW, horizon_days=5) == TODAY + timedelta(days=4)

    def test_missing_config_raises(self):
        schedule = ProviderSchedule(working_hours=None, policy=SlotPolicy(30))
        with pytest.raises(ConfigurationError):
            find_next_available_date(TODAY, schedule, NOW)
