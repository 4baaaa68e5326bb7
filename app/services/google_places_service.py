"""Google Places API 서비스 구현."""

from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import Any

import requests

from app.core.config import get_settings
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy, to_requests_timeout
from app.schemas.place import PlaceRef
from app.services.places_service import PlacesServiceProtocol, TypesPredicate

logger = get_logger(__name__)


class GooglePlacesError(RuntimeError):
    """Google Places 호출 설정 실패 시 발생하는 예외."""


class GooglePlacesService(PlacesServiceProtocol):
    """Google Places API(Text Search) 기반 Places 서비스."""

    _BASE_URL = "https://places.googleapis.com/v1"
    _SEARCH_PATH = "/places:searchText"

    _SEARCH_FIELD_MASK = "places.id,places.displayName,places.formattedAddress,places.types"

    def __init__(
        self,
        api_key: str,
        timeout_seconds: int = 5,
        page_size: int = 5,
        language_code: str = "en",
    ) -> None:
        if not api_key:
            raise GooglePlacesError("GOOGLE_MAPS_API_KEY is not configured.")
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds
        self._page_size = page_size
        self._language_code = language_code.strip() if language_code else ""

    @classmethod
    def from_settings(cls) -> GooglePlacesService:
        """애플리케이션 설정으로 서비스 인스턴스를 생성합니다."""
        settings = get_settings()
        timeout_policy = get_timeout_policy(settings)
        if not settings.GOOGLE_MAPS_API_KEY:
            logger.error("GOOGLE_MAPS_API_KEY is not configured.")
        return cls(
            api_key=settings.GOOGLE_MAPS_API_KEY,
            timeout_seconds=timeout_policy.google_places_timeout_seconds,
            page_size=settings.GOOGLE_PLACES_PAGE_SIZE,
            language_code=settings.GOOGLE_PLACES_LANGUAGE_CODE,
        )

    async def search(
        self,
        query: str,
        included_type: str | None = None,
        source_label: str | None = None,
        accept_types: TypesPredicate | None = None,
    ) -> list[PlaceRef]:
        """텍스트 쿼리로 장소를 검색합니다."""
        if not query.strip():
            return []

        payload: dict[str, Any] = {"textQuery": query, "pageSize": self._page_size}
        if self._language_code:
            payload["languageCode"] = self._language_code
        if included_type:
            payload["includedType"] = included_type

        data = await self._request(payload)
        places_raw = (data or {}).get("places") or []
        if accept_types is not None:
            places_raw = [item for item in places_raw if accept_types(item.get("types") or [])]

        places = [place for place in (self._map_place(item, source_label) for item in places_raw) if place]
        logger.info(
            "Google Places search completed: source=%s included_type=%s candidate_count=%d",
            source_label,
            included_type,
            len(places),
        )
        return places[: self._page_size]

    async def _request(self, payload: dict[str, Any]) -> dict[str, Any] | None:
        headers = {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self._api_key,
            "X-Goog-FieldMask": self._SEARCH_FIELD_MASK,
        }
        request_timeout = to_requests_timeout(self._timeout_seconds)

        def _send() -> requests.Response:
            with requests.Session() as session:
                return session.post(
                    f"{self._BASE_URL}{self._SEARCH_PATH}",
                    json=payload,
                    headers=headers,
                    timeout=request_timeout,
                )

        try:
            response = await asyncio.to_thread(_send)
            response.raise_for_status()
            return response.json()
        except requests.HTTPError as exc:
            response = exc.response
            status_code = response.status_code if response is not None else None
            body = (response.text or "")[:200] if response is not None else ""
            logger.error("Google Places API error: status=%s body=%s", status_code, body)
            return None
        except requests.RequestException as exc:
            logger.error("Google Places API request failed: %s", exc)
            return None
        except ValueError as exc:
            logger.error("Google Places API response parse failed: %s", exc)
            return None

    def _map_place(self, raw: dict[str, Any], source_label: str | None) -> PlaceRef | None:
        display_name = raw.get("displayName") or {}
        name = display_name.get("text")
        if not name:
            return None

        return PlaceRef(
            name=name,
            address=raw.get("formattedAddress") or "",
            external_id=raw.get("id") or raw.get("placeId"),
            source_label=source_label,
        )


@lru_cache(maxsize=1)
def get_google_places_service() -> GooglePlacesService:
    """설정 재사용을 위한 프로세스 단위 싱글톤을 반환합니다."""
    return GooglePlacesService.from_settings()
