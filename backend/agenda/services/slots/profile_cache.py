# backend/agenda/services/slots/profile_cache.py
"""
Redis cache for store profiles (config + weekly hours).

Key format: agenda:store:{store_id}
Value: JSON {"store": {...}, "hours": [{...}, ...]} with TTL.
Sentinel: {"store": null} marks "looked up, store does not exist".

Bookings are never cached: availability is time-sensitive and the
ledger is re-read on every calculation.

Invalidation triggers:
✓ Store scheduling fields changed (timezone, step, buffers)
✓ Store hours edited
"""

import json
import logging
from dataclasses import asdict
from datetime import time

from redis import Redis
from redis.exceptions import RedisError

from .directory import StoreDirectory
from .models import StoreConfig, WeeklyHours

logger = logging.getLogger(__name__)


class StoreProfileCache:
    """Read-through cache in front of StoreDirectory."""

    KEY_PREFIX = "agenda:store"

    def __init__(self, redis: Redis, ttl_seconds: int = 300):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    def _key(self, store_id: int) -> str:
        return f"{self.KEY_PREFIX}:{store_id}"

    # ── Read ─────────────────────────────────────────────────────────────

    def get_profile(
        self,
        directory: StoreDirectory,
        store_id: int,
    ) -> tuple[StoreConfig | None, list[WeeklyHours]]:
        """
        Store config and weekly hours, from Redis when cached.

        Redis failures fall back to the directory.
        """
        try:
            cached = self.redis.get(self._key(store_id))
        except RedisError as e:
            logger.warning(f"Profile cache read failed for store {store_id}: {e}")
            return _load(directory, store_id)

        if cached is not None:
            return _decode(cached)

        store, hours = _load(directory, store_id)
        try:
            self.redis.setex(self._key(store_id), self.ttl_seconds, _encode(store, hours))
        except RedisError as e:
            logger.warning(f"Profile cache write failed for store {store_id}: {e}")
        return store, hours

    # ── Delete ───────────────────────────────────────────────────────────

    def delete_profile(self, store_id: int) -> int:
        """Drop the cached profile. Returns number of deleted keys."""
        return self.redis.delete(self._key(store_id))


def invalidate_store_cache(redis: Redis, store_id: int) -> int:
    """
    Invalidate the cached profile of a store.

    Returns:
        Number of deleted cache keys
    """
    deleted = StoreProfileCache(redis).delete_profile(store_id)
    logger.info(f"Store profile cache invalidated: store={store_id} deleted={deleted}")
    return deleted


# ── Serialization ────────────────────────────────────────────────────────


def _load(directory: StoreDirectory, store_id: int) -> tuple[StoreConfig | None, list[WeeklyHours]]:
    store = directory.get_store_config(store_id)
    if store is None:
        return None, []
    return store, directory.get_weekly_hours(store_id)


def _time_str(value: str | time | None) -> str | None:
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    return value


def _encode(store: StoreConfig | None, hours: list[WeeklyHours]) -> str:
    return json.dumps({
        "store": asdict(store) if store else None,
        "hours": [
            {
                "day_of_week": row.day_of_week,
                "is_closed": row.is_closed,
                "open_time": _time_str(row.open_time),
                "close_time": _time_str(row.close_time),
            }
            for row in hours
        ],
    })


def _decode(raw: str | bytes) -> tuple[StoreConfig | None, list[WeeklyHours]]:
    if isinstance(raw, bytes):
        raw = raw.decode()
    data = json.loads(raw)
    if not data.get("store"):
        return None, []
    return (
        StoreConfig(**data["store"]),
        [WeeklyHours(**row) for row in data.get("hours", [])],
    )
