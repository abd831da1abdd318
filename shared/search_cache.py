"""
Redis cache for search responses. Fail-open: search works without it.

Keys carry a generation number. Writers that change what a search can return
(provider settings, user profiles) bump the generation, so every cached response
written before the change stops being read.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from redis import Redis
from redis.exceptions import RedisError

from .config import CACHE_TTL_SECONDS, REDIS_DB, REDIS_HOST, REDIS_PORT, SEARCH_CACHE_ENABLED

logger = logging.getLogger(__name__)

GENERATION_KEY = "search:generation"

# simple global redis client (sync)
r = Redis(host=REDIS_HOST, port=REDIS_PORT, db=REDIS_DB, decode_responses=True)


def cache_key(generation: int, service_type: str, lat: float, lon: float) -> str:
    return f"search:{generation}:{service_type.strip()}:{lat:.5f}:{lon:.5f}"


class SearchCache:
    def __init__(self, client: Redis, ttl_seconds: int):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def generation(self) -> Optional[int]:
        """Current generation, or None when Redis is unreachable."""
        try:
            value = self.client.get(GENERATION_KEY)
        except RedisError as e:
            logger.warning("cache generation read failed: %s", e)
            return None
        return int(value) if value else 0

    def key_for(self, service_type: str, lat: float, lon: float) -> Optional[str]:
        generation = self.generation()
        if generation is None:
            return None
        return cache_key(generation, service_type, lat, lon)

    def get(self, key: str) -> Optional[Any]:
        try:
            cached = self.client.get(key)
        except RedisError as e:
            logger.warning("cache read failed for %s: %s", key, e)
            return None
        return json.loads(cached) if cached else None

    def set(self, key: str, value: Any) -> None:
        try:
            self.client.setex(key, self.ttl_seconds, json.dumps(value))
        except RedisError as e:
            logger.warning("cache write failed for %s: %s", key, e)

    def invalidate(self) -> None:
        try:
            self.client.incr(GENERATION_KEY)
        except RedisError as e:
            # old entries still expire after ttl_seconds
            logger.warning("cache invalidation failed: %s", e)

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except RedisError:
            return False


def get_search_cache() -> Optional[SearchCache]:
    return SearchCache(r, CACHE_TTL_SECONDS) if SEARCH_CACHE_ENABLED else None
