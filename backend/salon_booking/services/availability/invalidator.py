# backend/salon_booking/services/availability/invalidator.py
"""
Cache invalidation for slot listings.

Triggers:
✓ Working hours replaced          → invalidate all dates of the salon
✓ Holiday created/toggled/deleted → invalidate that date
✓ Reservation created/rescheduled/status changed → invalidate affected dates

Every write path calls this after commit.
"""

import logging
from datetime import date, datetime, timedelta

from redis import Redis
from redis.exceptions import RedisError

from .redis_store import SlotsRedisStore

logger = logging.getLogger(__name__)


def invalidate_salon_cache(
    redis: Redis | None,
    salon_id: int,
    dates: list[date] | None = None,
) -> int:
    """
    Invalidate cached listings for salon.

    Args:
        redis: Redis client (None → cache disabled, nothing to do)
        salon_id: Salon ID
        dates: List of specific dates to invalidate,
               or None to invalidate all cached dates

    Returns:
        Number of deleted cache keys
    """
    if redis is None:
        return 0

    store = SlotsRedisStore(redis)
    try:
        deleted = store.delete_salon_slots(salon_id, dates)
    except RedisError:
        # Keys still expire after cache_ttl_seconds; the write path revalidates anyway
        logger.exception(f"Failed to invalidate availability cache for salon {salon_id}")
        return 0

    logger.info(
        f"Availability cache invalidated: salon={salon_id} "
        f"dates={[d.isoformat() for d in dates] if dates else 'all'} deleted={deleted}"
    )
    return deleted


def get_affected_dates(
    date_start: date,
    date_end: date,
) -> list[date]:
    """
    Get list of dates in range [date_start, date_end].
    """
    if date_start > date_end:
        date_start, date_end = date_end, date_start

    dates = []
    current = date_start
    while current <= date_end:
        dates.append(current)
        current += timedelta(days=1)

    return dates


def get_affected_dates_from_interval(start: datetime, end: datetime) -> list[date]:
    """Dates touched by a reservation [start, end)."""
    last = (end - timedelta(microseconds=1)).date() if end > start else start.date()
    return get_affected_dates(start.date(), last)
