"""식당 추천 응답 Redis 캐시.

키 형식: `dining:{location 소문자}`, 값은 응답 JSON 문자열, TTL은 DINING_CACHE_TTL_SECONDS.
REDIS_URL이 없으면 캐시를 쓰지 않는다. Redis 오류는 로그만 남기고 캐시 미스로 처리한다.
"""

from __future__ import annotations

import asyncio
import json
from functools import lru_cache
from typing import Any

import redis

from app.core.config import get_settings
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy

logger = get_logger(__name__)


def dining_cache_key(location: str) -> str:
    return f"dining:{location.strip().lower()}"


class DiningCache:
    """식당 추천 응답 캐시."""

    def __init__(self, client: redis.Redis | None, ttl_seconds: int = 3600) -> None:
        self._client = client
        self._ttl_seconds = max(1, int(ttl_seconds))

    @property
    def enabled(self) -> bool:
        return self._client is not None

    @classmethod
    def from_settings(cls) -> DiningCache:
        settings = get_settings()
        client = None
        if settings.REDIS_URL:
            timeout_seconds = get_timeout_policy(settings).external_api_timeout_seconds
            client = redis.Redis.from_url(
                settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=timeout_seconds,
                socket_timeout=timeout_seconds,
            )
        return cls(client, settings.DINING_CACHE_TTL_SECONDS)

    async def get(self, location: str) -> dict[str, Any] | None:
        """캐시된 응답을 반환합니다. 없거나 읽을 수 없으면 None입니다."""
        if self._client is None:
            return None
        key = dining_cache_key(location)
        try:
            raw = await asyncio.to_thread(self._client.get, key)
        except redis.RedisError as exc:
            logger.warning("Dining cache read failed: key=%s error=%s", key, exc)
            return None
        if raw is None:
            return None
        try:
            cached = json.loads(raw)
        except ValueError:
            logger.warning("Dining cache entry is not valid JSON: key=%s", key)
            return None
        return cached if isinstance(cached, dict) else None

    async def set(self, location: str, response: dict[str, Any]) -> None:
        if self._client is None:
            return
        key = dining_cache_key(location)
        try:
            await asyncio.to_thread(self._client.setex, key, self._ttl_seconds, json.dumps(response))
        except redis.RedisError as exc:
            logger.warning("Dining cache write failed: key=%s error=%s", key, exc)

    def ping(self) -> bool:
        """Redis 연결 여부를 확인합니다. 캐시가 꺼져 있으면 False입니다."""
        if self._client is None:
            return False
        return bool(self._client.ping())


@lru_cache(maxsize=1)
def get_dining_cache() -> DiningCache:
    """프로세스 단위 캐시 인스턴스를 반환합니다."""
    return DiningCache.from_settings()
