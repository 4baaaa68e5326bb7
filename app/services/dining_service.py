"""여러 출처의 식당 추천 취합 서비스.

Google 텍스트 검색을 출처별 쿼리(일반/미쉐린/제임스 비어드/Eater)로 동시에 실행하고, 이름과 주소의
유사도(Dice 계수)로 중복을 제거한다. 한 출처의 실패는 해당 출처의 상태에만 기록된다.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass

from app.core.logger import get_logger
from app.schemas.place import DiningResponse, PlaceRef, SourceStatus
from app.services.dining_cache import DiningCache
from app.services.places_service import PlacesServiceProtocol

logger = get_logger(__name__)

PAIR_SIMILARITY_THRESHOLD = 0.7


@dataclass(frozen=True)
class DiningSource:
    label: str
    query_template: str

    def query_for(self, location: str) -> str:
        return self.query_template.format(location=location)


DINING_SOURCES: tuple[DiningSource, ...] = (
    DiningSource("GooglePlaces", "restaurants near {location}"),
    DiningSource("Michelin", "michelin star restaurants near {location}"),
    DiningSource("JamesBeard", "james beard award restaurants near {location}"),
    DiningSource("Eater", "eater 38 restaurants near {location}"),
)


def _bigrams(text: str) -> Counter[str]:
    compact = "".join(text.split())
    return Counter(compact[index : index + 2] for index in range(len(compact) - 1))


def dice_similarity(first: str, second: str) -> float:
    """두 문자열의 바이그램 Dice 계수(0~1)를 계산합니다. 공백은 무시합니다."""
    first_compact = "".join(first.split())
    second_compact = "".join(second.split())
    if first_compact == second_compact:
        return 1.0
    if len(first_compact) < 2 or len(second_compact) < 2:
        return 0.0

    first_bigrams = _bigrams(first_compact)
    second_bigrams = _bigrams(second_compact)
    overlap = sum((first_bigrams & second_bigrams).values())
    return (2.0 * overlap) / (len(first_compact) + len(second_compact) - 2)


def _is_duplicate(existing: PlaceRef, candidate: PlaceRef, threshold: float) -> bool:
    name_similarity = dice_similarity(existing.name.lower(), candidate.name.lower())
    address_similarity = 0.0
    if existing.address and candidate.address:
        address_similarity = dice_similarity(existing.address.lower(), candidate.address.lower())
    return name_similarity >= threshold or (
        name_similarity > PAIR_SIMILARITY_THRESHOLD and address_similarity > PAIR_SIMILARITY_THRESHOLD
    )


def deduplicate_restaurants(restaurants: list[PlaceRef], threshold: float = 0.85) -> list[PlaceRef]:
    """먼저 나온 항목을 남기고, 이름이 매우 비슷하거나 이름과 주소가 모두 비슷한 항목을 제거합니다."""
    deduped: list[PlaceRef] = []
    for candidate in restaurants:
        if not any(_is_duplicate(existing, candidate, threshold) for existing in deduped):
            deduped.append(candidate)
    return deduped


class DiningService:
    """식당 추천 조회 (캐시 → 출처별 검색 → 중복 제거 → 캐시 저장)."""

    def __init__(
        self,
        places: PlacesServiceProtocol,
        cache: DiningCache | None = None,
        dedup_threshold: float = 0.85,
        sources: tuple[DiningSource, ...] = DINING_SOURCES,
    ) -> None:
        self._places = places
        self._cache = cache
        self._dedup_threshold = dedup_threshold
        self._sources = sources

    async def suggest(self, location: str) -> dict:
        """지역의 식당 추천 응답(`{data, sources}`)을 반환합니다."""
        if self._cache is not None:
            cached = await self._cache.get(location)
            if cached is not None:
                logger.info("Dining cache hit: location=%s", location)
                return cached

        results = await asyncio.gather(
            *(self._places.search(source.query_for(location), "restaurant", source.label) for source in self._sources),
            return_exceptions=True,
        )

        combined: list[PlaceRef] = []
        statuses: list[SourceStatus] = []
        for source, result in zip(self._sources, results):
            if isinstance(result, Exception):
                logger.warning("Dining source failed: source=%s error=%s", source.label, result)
                statuses.append(SourceStatus(source=source.label, status="error", error=str(result)))
                continue
            combined.extend(result)
            statuses.append(SourceStatus(source=source.label, status="ok", count=len(result)))

        deduped = deduplicate_restaurants(combined, self._dedup_threshold)
        logger.info(
            "Dining suggestions collected: location=%s candidates=%d deduped=%d",
            location,
            len(combined),
            len(deduped),
        )

        response = DiningResponse(data=deduped, sources=statuses).to_wire()
        if self._cache is not None:
            await self._cache.set(location, response)
        return response
