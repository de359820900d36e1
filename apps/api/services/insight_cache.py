"""
Daily Insight Cache

Advisory cache for the home-screen InsightResult, one entry per user per
local calendar day:

    key:    insight:{user_id}:{YYYY-MM-DD}
    value:  JSON-serialized InsightResult dict
    expiry: end of that local day

Only the current day's entry is kept per user. Each user has an index set
(insight_index:{user_id}) listing the insight keys written for them; put()
deletes every other key in that set before recording the new one, so old
days are pruned on write without scanning by prefix.

A miss, a stale entry or an unreachable Redis only means recomputation.
Nothing here raises into the caller.
"""

import json
import logging
from datetime import date, datetime, tzinfo
from typing import Any, Dict, Optional

from core.cache import get_redis_client
from services.day_window import day_bounds, get_local_tz

logger = logging.getLogger(__name__)

KEY_PREFIX = "insight"
INDEX_PREFIX = "insight_index"
MIN_TTL_S = 1


def _index_key(user_id: str) -> str:
    return f"{INDEX_PREFIX}:{user_id}"


def parse_key(key: str) -> Optional[tuple]:
    """Split an insight key into (user_id, date). None if it isn't one."""
    prefix, sep, rest = key.partition(":")
    if prefix != KEY_PREFIX or not sep:
        return None
    user_id, sep, day_str = rest.rpartition(":")
    if not sep or not user_id:
        return None
    try:
        return user_id, date.fromisoformat(day_str)
    except ValueError:
        return None


def seconds_until_end_of_day(
    day: date, tz: Optional[tzinfo] = None, now: Optional[datetime] = None,
) -> int:
    """Whole seconds from now until 23:59:59.999 local on `day` (at least 1)."""
    tz = tz or get_local_tz()
    now = now or datetime.now(tz)
    if now.tzinfo is None:
        now = now.replace(tzinfo=tz)
    _, end = day_bounds(day, tz)
    remaining = int((end - now).total_seconds())
    return max(remaining, MIN_TTL_S)


class InsightCache:
    """get/put over a Redis-like client; client=None disables caching."""

    def __init__(self, client: Any = None, tz: Optional[tzinfo] = None):
        self.client = client
        self.tz = tz

    @property
    def enabled(self) -> bool:
        return self.client is not None

    @staticmethod
    def key_for(user_id: str, day: date) -> str:
        return f"{KEY_PREFIX}:{user_id}:{day.isoformat()}"

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        if not self.enabled:
            return None

        try:
            raw = self.client.get(key)
        except Exception as e:
            logger.warning(f"Redis read error for insight cache {key}: {e}")
            return None

        if not raw:
            return None

        try:
            value = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning(f"Discarding unreadable insight cache entry {key}")
            return None

        return value if isinstance(value, dict) else None

    def put(
        self,
        key: str,
        value: Dict[str, Any],
        ttl: Optional[int] = None,
        now: Optional[datetime] = None,
        tz: Optional[tzinfo] = None,
    ) -> bool:
        """
        Store `value` under `key` and prune the same user's other entries.

        ttl defaults to the seconds remaining in the key's local day, in `tz`
        when given (the zone the caller used to pick the day), else self.tz.
        Returns False when caching is disabled or Redis fails.
        """
        if not self.enabled:
            return False

        parsed = parse_key(key)
        if parsed is None:
            logger.warning(f"Refusing to cache under malformed insight key {key!r}")
            return False
        user_id, day = parsed

        if ttl is None:
            ttl = seconds_until_end_of_day(day, tz or self.tz, now)
        ttl = max(int(ttl), MIN_TTL_S)

        index = _index_key(user_id)
        try:
            self._prune(index, keep=key)
            self.client.setex(key, ttl, json.dumps(value, default=str))
            self.client.sadd(index, key)
            self.client.expire(index, ttl)
        except Exception as e:
            logger.warning(f"Redis write error for insight cache {key}: {e}")
            return False

        logger.debug(f"Insight cached {key} (ttl={ttl}s)")
        return True

    def _prune(self, index: str, keep: Optional[str]) -> None:
        stale = [k for k in (self.client.smembers(index) or ()) if k != keep]
        if not stale:
            return
        self.client.delete(*stale)
        self.client.srem(index, *stale)
        logger.debug(f"Pruned {len(stale)} insight cache entries from {index}")


def get_insight_cache() -> InsightCache:
    """InsightCache bound to the shared Redis client (disabled if unavailable)."""
    return InsightCache(get_redis_client())
