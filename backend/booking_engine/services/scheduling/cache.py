# backend/booking_engine/services/scheduling/cache.py
"""
Redis cache of resolved working windows.

Key format: slots:windows:{business_id}:{date}
Value: JSON list of [start_iso, end_iso] pairs (UTC), after blocked dates
       were subtracted. "[]" marks "calculated, closed".

Bookings are never cached; they are read on every request, so a stale
cache entry can only be stale about rules or blocked dates. Those writes
go through invalidate_business_cache().

Cache failures are logged and treated as a miss.
"""

import json
import logging
from datetime import date, datetime

from redis import Redis
from redis.exceptions import RedisError

from ...config import settings
from .windows import TimeWindow

logger = logging.getLogger(__name__)


class WorkingWindowsRedisStore:
    """Redis storage wrapper for per-day working windows."""

    KEY_PREFIX = "slots:windows"

    def __init__(self, redis: Redis, ttl_seconds: int | None = None):
        self.redis = redis
        self.ttl_seconds = ttl_seconds or settings.slots_cache_ttl_seconds

    def _key(self, business_id: int, dt: date) -> str:
        return f"{self.KEY_PREFIX}:{business_id}:{dt.isoformat()}"

    # ── Write ────────────────────────────────────────────────────────────

    def store_windows(
        self,
        business_id: int,
        dt: date,
        windows: list[TimeWindow],
    ) -> None:
        payload = json.dumps([[w.start.isoformat(), w.end.isoformat()] for w in windows])
        try:
            self.redis.set(self._key(business_id, dt), payload, ex=self.ttl_seconds)
        except RedisError as e:
            logger.warning(f"Failed to cache windows for business={business_id} date={dt}: {e}")

    # ── Read ─────────────────────────────────────────────────────────────

    def get_windows(self, business_id: int, dt: date) -> list[TimeWindow] | None:
        """
        Returns:
            Cached windows, or None on cache miss.
        """
        try:
            raw = self.redis.get(self._key(business_id, dt))
        except RedisError as e:
            logger.warning(f"Failed to read cached windows for business={business_id} date={dt}: {e}")
            return None

        if raw is None:
            return None

        if isinstance(raw, bytes):
            raw = raw.decode()

        try:
            pairs = json.loads(raw)
            return [
                TimeWindow(datetime.fromisoformat(start), datetime.fromisoformat(end))
                for start, end in pairs
            ]
        except (ValueError, TypeError):
            logger.warning(f"Corrupt cache entry {self._key(business_id, dt)}, ignoring")
            return None

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_windows(
        self,
        business_id: int,
        dates: list[date] | None = None,
    ) -> int:
        """
        Delete cached windows.

        Args:
            business_id: Business ID
            dates: Specific dates, or None to delete all for business.

        Returns:
            Number of deleted keys (0 when Redis is unreachable).
        """
        try:
            if dates:
                keys = [self._key(business_id, dt) for dt in dates]
            else:
                pattern = f"{self.KEY_PREFIX}:{business_id}:*"
                keys = self.redis.keys(pattern)

            if not keys:
                return 0

            return self.redis.delete(*keys)
        except RedisError as e:
            logger.warning(f"Failed to invalidate cached windows for business={business_id}: {e}")
            return 0


def invalidate_business_cache(
    redis: Redis | None,
    business_id: int,
    dates: list[date] | None = None,
) -> int:
    """Invalidate cached windows for a business (no-op without Redis)."""
    if redis is None:
        return 0
    return WorkingWindowsRedisStore(redis).delete_windows(business_id, dates)
