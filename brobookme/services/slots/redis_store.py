# brobookme/services/slots/redis_store.py
"""
Redis storage for raw slots using Sorted Sets.

Key format: slots:day:{provider_id}:{date}
Value: Sorted Set where member = slot start (ISO instant),
       score = unix timestamp after which the slot is no longer offered:
       max(slot − booking_delay, local start of the slot's day).

Query: ZRANGEBYSCORE key (now_ts +inf → only live slots. This reproduces the
same-day cutoff: before the day starts every slot is live, on the day itself
a slot stays live while now < slot − delay.
Sentinel: "__empty__" with score=0 marks "calculated, zero slots".

Only raw slots are cached. Blocks and bookings change often and are applied
after reading.
"""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from redis import Redis

from .config import SlotPolicy


EMPTY_SENTINEL = "__empty__"


def slot_scores(
    target_date: date,
    raw_slots: list[datetime],
    policy: SlotPolicy,
    zone: ZoneInfo,
) -> list[tuple[datetime, float]]:
    """Pair every raw slot with the timestamp it stops being offered."""
    day_start_ts = datetime.combine(target_date, time.min, tzinfo=zone).timestamp()
    delay = timedelta(hours=policy.booking_delay_hours)
    return [
        (slot, max((slot - delay).timestamp(), day_start_ts))
        for slot in raw_slots
    ]


class SlotsRedisStore:
    """Redis storage wrapper using Sorted Sets for raw slot data."""

    KEY_PREFIX = "slots:day"

    def __init__(self, redis: Redis):
        self.redis = redis

    def _key(self, provider_id: int, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{provider_id}:{dt.isoformat()}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_day_slots(
        self,
        provider_id: int,
        dt: date,
        slots: list[tuple[datetime, float]],
        zone: ZoneInfo,
    ) -> None:
        """
        Store calculated slots for a day.

        Args:
            provider_id: Provider ID
            dt: Target date
            slots: List of (slot_start, expire_ts) pairs.
                   Empty list → sentinel is stored.
            zone: Provider timezone, bounds the sentinel lifetime
        """
        key = self._key(provider_id, dt)
        pipe = self.redis.pipeline()

        # Remove old data
        pipe.delete(key)

        if slots:
            mapping = {start.isoformat(): expire_ts for start, expire_ts in slots}
            pipe.zadd(key, mapping)
            max_expire = max(expire_ts for _, expire_ts in slots)
            # Key lives until the last slot expires + 1 minute buffer
            pipe.expireat(key, int(max_expire) + 60)
        else:
            # Empty day: sentinel so EXISTS returns True
            pipe.zadd(key, {EMPTY_SENTINEL: 0})
            end_of_day = datetime.combine(dt, time.max, tzinfo=zone)
            pipe.expireat(key, int(end_of_day.timestamp()) + 60)

        pipe.execute()

    # ── Read ─────────────────────────────────────────────────────────────

    def get_available_slots(
        self,
        provider_id: int,
        dt: date,
        now: datetime,
    ) -> list[datetime] | None:
        """
        Get live raw slots for a day.

        Returns:
            Ascending list of slot starts, or None on cache miss.
        """
        key = self._key(provider_id, dt)
        if not self.redis.exists(key):
            return None

        members = self.redis.zrangebyscore(key, f"({now.timestamp()}", "+inf")
        starts = [
            datetime.fromisoformat(member)
            for member in map(_decode, members)
            if member != EMPTY_SENTINEL
        ]
        return sorted(starts)

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_day_slots(
        self,
        provider_id: int,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached slots.

        Args:
            provider_id: Provider ID
            dates: Specific dates, or None to delete all for provider.

        Returns:
            Number of deleted keys.
        """
        if dates:
            keys = [self._key(provider_id, dt) for dt in dates]
        else:
            pattern = f"{self.KEY_PREFIX}:{provider_id}:*"
            keys = list(self.redis.scan_iter(match=pattern))

        if not keys:
            return 0

        return self.redis.delete(*keys)


def _decode(member: str | bytes) -> str:
    return member.decode() if isinstance(member, bytes) else member
