"""지역 조회 클라이언트 (식당/명소/역사).

세 조회를 동시에 실행하고, 각 조회는 타임아웃과 실패 시 해당 필드만 비운다. 결과는 원본 지역 문자열을
키로 세션 동안 메모이즈하며, 진행 중인 조회도 공유한다.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import Protocol, TypeVar

from app.core.logger import get_logger
from app.schemas.place import PlaceRef
from app.schemas.trip import Suggestions

logger = get_logger(__name__)

T = TypeVar("T")


class LookupBackend(Protocol):
    """조회 호출을 제공하는 객체 (일반적으로 TripServiceClient)."""

    async def get_dining_suggestions(self, location: str) -> list[PlaceRef]: ...

    async def get_site_suggestions(self, location: str) -> list[PlaceRef]: ...

    async def get_location_history(self, location: str) -> str: ...


class LocationLookupClient:
    """지역 하나에 대한 추천 정보를 조회합니다."""

    def __init__(self, backend: LookupBackend, timeout_seconds: float = 5) -> None:
        self._backend = backend
        self._timeout_seconds = timeout_seconds
        self._memo: dict[str, asyncio.Task[Suggestions]] = {}

    def clear(self) -> None:
        """메모를 비웁니다."""
        self._memo.clear()

    async def fetch(self, location: str | None) -> Suggestions:
        """지역의 식당/명소/역사를 조회합니다. 빈 지역은 네트워크 호출 없이 빈 결과를 반환합니다."""
        if not location or not str(location).strip():
            return Suggestions.empty()

        task = self._memo.get(location)
        if task is None:
            task = asyncio.ensure_future(self._load(location))
            self._memo[location] = task
        return await asyncio.shield(task)

    async def _load(self, location: str) -> Suggestions:
        restaurants, sights, history = await asyncio.gather(
            self._guarded("dining", self._backend.get_dining_suggestions(location), [], location),
            self._guarded("sights", self._backend.get_site_suggestions(location), [], location),
            self._guarded("history", self._backend.get_location_history(location), "", location),
        )
        return Suggestions(restaurants=restaurants, sights=sights, history=history)

    async def _guarded(self, kind: str, call: Awaitable[T], fallback: T, location: str) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self._timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning("Location lookup timed out: kind=%s location=%s", kind, location)
        except Exception as exc:
            logger.warning("Location lookup failed: kind=%s location=%s error=%s", kind, location, exc)
        return fallback
