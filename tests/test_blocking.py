"""Tests for the two blocking modes."""

from datetime import datetime, timedelta, timezone

import pytest

from brobookme.services.slots.blocking import (
    annotate_blocks,
    date_key,
    exclude_blocked,
    is_day_blocked,
)
from tests.conftest import WEDNESDAY, utc


RAW = [utc(2025, 3, 12, h, 0) for h in (9, 10, 11, 12)]


class TestDayBlocked:
    def test_date_key_format(self):
        assert date_key(WEDNESDAY) == "2025-03-12"

    def test_customer_mode_returns_nothing(self):
        slots, day_blocked = exclude_blocked(RAW, WEDNESDAY, {"2025-03-12"}, set())
        assert slots == []
        assert day_blocked is True

    def test_management_mode_keeps_slots_flagged(self):
        slots, day_blocked = annotate_blocks(RAW, WEDNESDAY, {"2025-03-12"}, set())
        assert day_blocked is True
        assert len(slots) == 4
        assert all(s.day_blocked for s in slots)

    def test_other_dates_do_not_block(self):
        assert not is_day_blocked(WEDNESDAY, ["2025-03-11", "2025-03-13"])


class TestSlotBlocked:
    def test_customer_mode_drops_blocked_slot(self):
        slots, day_blocked = exclude_blocked(RAW, WEDNESDAY, set(), {RAW[1]})
        assert day_blocked is False
        assert [s.start for s in slots] == [RAW[0], RAW[2], RAW[3]]

    def test_management_mode_flags_blocked_slot(self):
        slots, _ = annotate_blocks(RAW, WEDNESDAY, set(), {RAW[1]})
        assert [s.blocked for s in slots] == [False, True, False, False]
        assert not any(s.day_blocked for s in slots)

    def test_instants_compare_across_offsets(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        same_instant = datetime(2025, 3, 12, 15, 30, tzinfo=ist)  # 10:00 UTC
        slots, _ = exclude_blocked(RAW, WEDNESDAY, set(), {same_instant})
        assert RAW[1] not in [s.start for s in slots]

    def test_naive_blocked_instant_is_rejected(self):
        with pytest.raises(ValueError):
            annotate_blocks(RAW, WEDNESDAY, set(), {datetime(2025, 3, 12, 10, 0)})
