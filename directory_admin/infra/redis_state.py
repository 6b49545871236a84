from __future__ import annotations

import json
import logging
import os
from functools import lru_cache

from redis import Redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

REDIS_URL = os.getenv("REDIS_URL")
STAFF_COUNT_CACHE_TTL = int(os.getenv("STAFF_COUNT_CACHE_TTL", "60"))
STAFF_COUNT_CACHE_KEY = "directory:designation-staff-counts"


@lru_cache(maxsize=1)
def get_redis() -> Redis | None:
    if not REDIS_URL:
        return None
    return Redis.from_url(REDIS_URL, decode_responses=True, socket_timeout=1.0)


def check_redis_ready() -> bool | None:
    """None when the cache is not configured."""
    client = get_redis()
    if client is None:
        return None
    try:
        return bool(client.ping())
    except Exception:
        return False


def load_staff_counts() -> dict[str, int] | None:
    client = get_redis()
    if client is None:
        return None
    try:
        raw = client.get(STAFF_COUNT_CACHE_KEY)
    except RedisError:
        logger.warning("staff count cache read failed", exc_info=True)
        return None
    if raw is None:
        return None
    try:
        decoded = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(decoded, dict):
        return None
    try:
        return {str(key): int(value) for key, value in decoded.items()}
    except (TypeError, ValueError):
        logger.warning("discarding malformed staff count cache entry")
        return None


def store_staff_counts(counts: dict[str, int]) -> None:
    client = get_redis()
    if client is None:
        return
    try:
        client.set(STAFF_COUNT_CACHE_KEY, json.dumps(counts), ex=STAFF_COUNT_CACHE_TTL)
    except RedisError:
        logger.warning("staff count cache write failed", exc_info=True)


def invalidate_staff_counts() -> None:
    client = get_redis()
    if client is None:
        return
    try:
        client.delete(STAFF_COUNT_CACHE_KEY)
    except RedisError:
        logger.warning("staff count cache invalidation failed", exc_info=True)
