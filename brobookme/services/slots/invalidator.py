# brobookme/services/slots/invalidator.py
"""
Cache invalidation for provider slots.

Triggers:
✓ Working hours / slot policy / timezone changed → invalidate all dates

Does NOT trigger:
✗ Booking created/cancelled (applied on read)
✗ Blocked dates / blocked slots changed (applied on read)
"""

import logging
from datetime import date, timedelta

from redis import Redis
from redis.exceptions import RedisError

from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def invalidate_provider_cache(
    redis: Redis,
    provider_id: int,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached slots for provider.

    Args:
        redis: Redis client
        provider_id: Provider ID
        dates: List of specific dates to invalidate,
               or None to invalidate all cached dates

    Returns:
        Number of deleted cache keys (0 when Redis is unreachable)
    """
    store = SlotsRedisStore(redis)
    try:
        deleted = store.delete_day_slots(provider_id, dates)
    except RedisError as e:
        logger.error(f"Failed to invalidate slots cache for provider {provider_id}: {e}")
        return 0

    logger.info(f"Slots cache invalidated: provider={provider_id} keys={deleted}")
    return deleted


def get_affected_dates(date_start: date, date_end: date) -> list[date]:
    """Every date of the inclusive range, bounds may come in either order."""
    first, last = sorted((date_start, date_end))
    return [first + timedelta(days=offset) for offset in range((last - first).days + 1)]
