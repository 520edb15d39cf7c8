# backend/salon_booking/services/availability/redis_store.py
"""
Redis storage for slot listings using Sorted Sets.

Key format: availability:day:{salon_id}:{date}:{service_id}:{employee_id|any}
Value: Sorted Set where member = "HH:MM|emp_id,emp_id",
       score = minutes since midnight of the slot start.

Query: ZRANGEBYSCORE key {min_minute} +inf → drops slots already past today.
Sentinel: "__empty__" with score=-1 marks "calculated, zero slots".
Every key carries a short TTL; writes to working hours, holidays and
reservations delete the salon's keys (see invalidator).

Generation: availability:gen:{salon_id} is bumped on every invalidation.
A listing is stored only if the generation read before it was calculated
is still current, so a result computed from data older than the last
write never lands in the cache.
"""

from datetime import date

from redis import Redis
from redis.exceptions import WatchError

from .config import BookingConfig, get_booking_config, slot_minutes


EMPTY_SENTINEL = "__empty__"


def _decode(value) -> str:
    return value.decode() if isinstance(value, bytes) else value


class SlotsRedisStore:
    """Redis storage wrapper using Sorted Sets for slot listings."""

    KEY_PREFIX = "availability:day"
    GENERATION_PREFIX = "availability:gen"

    def __init__(self, redis: Redis, config: BookingConfig | None = None):
        self.redis = redis
        self.config = config or get_booking_config()

    def _key(self, salon_id: int, dt: date, service_id: int, employee_id: int | None) -> str:
        employee = employee_id if employee_id is not None else "any"
        return f"{self.KEY_PREFIX}:{salon_id}:{dt.isoformat()}:{service_id}:{employee}"

    def _generation_key(self, salon_id: int) -> str:
        return f"{self.GENERATION_PREFIX}:{salon_id}"

    def get_generation(self, salon_id: int) -> int:
        return int(self.redis.get(self._generation_key(salon_id)) or 0)

    # ── Write ────────────────────────────────────────────────────────────

    def store_day_slots(
        self,
        salon_id: int,
        dt: date,
        service_id: int,
        employee_id: int | None,
        slots: list[tuple[str, list[int]]],
        generation: int | None = None,
    ) -> bool:
        """
        Store a computed listing.

        Args:
            slots: List of ("HH:MM", [employee_id, ...]) pairs.
                   Empty list → sentinel is stored.
            generation: Salon generation read before the listing was
                   calculated. None stores unconditionally.

        Returns:
            False if the salon was invalidated in the meantime (nothing stored).
        """
        key = self._key(salon_id, dt, service_id, employee_id)
        generation_key = self._generation_key(salon_id)

        with self.redis.pipeline() as pipe:
            try:
                pipe.watch(generation_key)
                if generation is not None and int(pipe.get(generation_key) or 0) != generation:
                    return False

                pipe.multi()
                pipe.delete(key)
                if slots:
                    mapping = {
                        f"{time_str}|{','.join(str(e) for e in employees)}": slot_minutes(time_str)
                        for time_str, employees in slots
                    }
                    pipe.zadd(key, mapping)
                else:
                    # Empty day: sentinel so EXISTS returns True
                    pipe.zadd(key, {EMPTY_SENTINEL: -1})
                pipe.expire(key, self.config.cache_ttl_seconds)
                pipe.execute()
            except WatchError:
                return False

        return True

    # ── Read ─────────────────────────────────────────────────────────────

    def get_day_slots(
        self,
        salon_id: int,
        dt: date,
        service_id: int,
        employee_id: int | None,
        min_minute: int = 0,
    ) -> list[tuple[str, list[int]]] | None:
        """
        Get cached slots starting at or after min_minute.

        Returns:
            Sorted list of ("HH:MM", [employee_id, ...]), or None on cache miss.
        """
        key = self._key(salon_id, dt, service_id, employee_id)
        if not self.redis.exists(key):
            return None

        members = self.redis.zrangebyscore(key, min_minute, "+inf")
        result = []
        for member in members:
            member = _decode(member)
            if member == EMPTY_SENTINEL:
                continue
            time_str, _, employees = member.partition("|")
            result.append((time_str, [int(e) for e in employees.split(",") if e]))
        return result

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_salon_slots(
        self,
        salon_id: int,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached listings and bump the salon generation.

        Args:
            salon_id: Salon ID
            dates: Specific dates, or None to delete all for the salon.

        Returns:
            Number of deleted keys.
        """
        self.redis.incr(self._generation_key(salon_id))

        if dates:
            keys = []
            for dt in dates:
                keys.extend(self.redis.keys(f"{self.KEY_PREFIX}:{salon_id}:{dt.isoformat()}:*"))
        else:
            keys = self.redis.keys(f"{self.KEY_PREFIX}:{salon_id}:*")

        if not keys:
            return 0

        return self.redis.delete(*keys)
