# backend/app/services/slots/redis_store.py
"""
Redis cache for available slots using Sorted Sets.

Key format: slots:day:{staff_id}:{service_id}:{date}
Value: Sorted Set where member = "HH:MM" (slot start),
       score = expire_ts (unix timestamp when the slot falls inside
       the min-advance cutoff and stops being bookable).

Query: ZRANGEBYSCORE key ({now_ts} +inf → only live slots.
Sentinel: "__empty__" with score=0 marks "calculated, zero slots".

Invalidation: any appointment write deletes every key of the
affected (staff_id, date), see invalidator.py.
"""

from datetime import date, datetime, timedelta
from redis import Redis

from .calculator import Slot
from .config import BookingConfig, get_booking_config, minutes_to_time_str, time_str_to_minutes


EMPTY_SENTINEL = "__empty__"


class SlotsRedisStore:
    """Redis storage wrapper using Sorted Sets for slot data."""

    KEY_PREFIX = "slots:day"

    def __init__(self, redis: Redis, config: BookingConfig | None = None):
        self.redis = redis
        self.config = config or get_booking_config()

    def _key(self, staff_id: int, service_id: int, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{staff_id}:{service_id}:{dt.isoformat()}"

    def _day_pattern(self, staff_id: int, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{staff_id}:*:{dt.isoformat()}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_day_slots(
        self,
        staff_id: int,
        service_id: int,
        dt: date,
        slots: list[Slot],
        now: datetime,
    ) -> None:
        """
        Store available slots for a day.

        Empty list → sentinel is stored.
        """
        key = self._key(staff_id, service_id, dt)
        ttl_deadline = int(now.timestamp()) + self.config.cache_ttl_seconds
        pipe = self.redis.pipeline()

        # Remove old data
        pipe.delete(key)

        if slots:
            mapping = {
                _slot_member(slot): self._expire_ts(slot)
                for slot in slots
            }
            pipe.zadd(key, mapping)
            max_expire = int(max(mapping.values())) + 60
            # Key lives until the last slot expires, capped by cache TTL
            pipe.expireat(key, min(max_expire, ttl_deadline))
        else:
            pipe.zadd(key, {EMPTY_SENTINEL: 0})
            pipe.expireat(key, ttl_deadline)

        pipe.execute()

    def _expire_ts(self, slot: Slot) -> float:
        return (slot.start - self.config.min_advance).timestamp()

    # ── Read ─────────────────────────────────────────────────────────────

    def get_available_slots(
        self,
        staff_id: int,
        service_id: int,
        dt: date,
        duration_minutes: int,
        now: datetime,
    ) -> list[Slot] | None:
        """
        Get live slots for a day.

        Returns:
            Chronological list of slots, or None on cache miss.
        """
        key = self._key(staff_id, service_id, dt)
        if not self.redis.exists(key):
            return None

        # Exclusive lower bound: slot_start must be strictly after now + advance
        members = self.redis.zrangebyscore(key, f"({now.timestamp()}", "+inf")
        day_start = datetime.combine(dt, datetime.min.time())

        slots = []
        for m in members:
            time_str = m.decode() if isinstance(m, bytes) else m
            if time_str == EMPTY_SENTINEL:
                continue
            start = day_start + timedelta(minutes=time_str_to_minutes(time_str))
            slots.append(Slot(
                start=start,
                end=start + timedelta(minutes=duration_minutes),
                staff_id=staff_id,
            ))
        return sorted(slots, key=lambda s: s.start)

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_day_slots(
        self,
        staff_id: int,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached slots of a staff member, all services.

        Args:
            staff_id: Staff member ID
            dates: Specific dates, or None to delete all for the staff member.

        Returns:
            Number of deleted keys.
        """
        if dates:
            keys = []
            for dt in dates:
                keys.extend(self.redis.scan_iter(match=self._day_pattern(staff_id, dt)))
        else:
            keys = list(self.redis.scan_iter(match=f"{self.KEY_PREFIX}:{staff_id}:*"))

        if not keys:
            return 0

        return self.redis.delete(*keys)


def _slot_member(slot: Slot) -> str:
    return minutes_to_time_str(slot.start.hour * 60 + slot.start.minute)
