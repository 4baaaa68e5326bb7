"""여행 서비스 HTTP 클라이언트.

편집 엔진이 서비스와 주고받는 모든 호출을 담당한다. `requests`는 블로킹이므로 `asyncio.to_thread`로
이벤트 루프 밖에서 실행한다. 조회 실패는 `TripServiceError`로 올리고, 저장 실패는 재시도 후 False를 반환한다.
"""

from __future__ import annotations

import asyncio
from typing import Any

import requests

from app.core.config import Settings, get_settings
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy, to_requests_timeout
from app.schemas.place import PlaceRef
from app.schemas.trip import TripDocument

logger = get_logger(__name__)


class TripServiceError(RuntimeError):
    """서비스 호출이 실패했거나 응답을 해석할 수 없을 때 발생하는 예외."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _is_retryable_request_error(exc: Exception) -> bool:
    """재시도 가능한 요청 예외인지 판별합니다."""
    if isinstance(exc, (requests.Timeout, requests.ConnectionError)):
        return True

    if isinstance(exc, requests.HTTPError):
        status_code = exc.response.status_code if exc.response is not None else None
        return status_code is None or status_code == 429 or status_code >= 500

    return False


class TripServiceClient:
    """여행 서비스(`/config`, `/getTrips`, `/saveTrip`, 조회 프록시) 클라이언트."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: int = 30,
        save_timeout_seconds: int = 10,
        max_retries: int = 2,
        backoff_base_seconds: float = 0.5,
        backoff_max_seconds: float = 5.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._save_timeout_seconds = save_timeout_seconds
        self._max_retries = max(0, int(max_retries))
        self._backoff_base = max(0.0, float(backoff_base_seconds))
        self._backoff_max = max(self._backoff_base, float(backoff_max_seconds))

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> TripServiceClient:
        """애플리케이션 설정으로 클라이언트를 생성합니다."""
        resolved = settings or get_settings()
        policy = get_timeout_policy(resolved)
        return cls(
            resolved.TRIP_SERVICE_URL,
            timeout_seconds=policy.external_api_timeout_seconds,
            save_timeout_seconds=policy.save_timeout_seconds,
            max_retries=resolved.SAVE_MAX_RETRIES,
            backoff_base_seconds=resolved.SAVE_BACKOFF_BASE_SECONDS,
            backoff_max_seconds=resolved.SAVE_BACKOFF_MAX_SECONDS,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
        timeout_seconds: int | None = None,
    ) -> requests.Response:
        url = f"{self._base_url}{path}"
        request_timeout = to_requests_timeout(timeout_seconds or self._timeout_seconds)

        def _send() -> requests.Response:
            return requests.request(method, url, params=params, json=payload, timeout=request_timeout)

        response = await asyncio.to_thread(_send)
        response.raise_for_status()
        return response

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._request("GET", path, params=params)
            return response.json()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            raise TripServiceError(f"GET {path} failed: status={status_code}", status_code) from exc
        except requests.RequestException as exc:
            raise TripServiceError(f"GET {path} failed: {exc}") from exc
        except ValueError as exc:
            raise TripServiceError(f"GET {path} returned invalid JSON") from exc

    async def fetch_config(self) -> dict[str, Any]:
        """`/config`에서 클라이언트 설정(장소 검색 키)을 가져옵니다."""
        data = await self._get_json("/config")
        return data if isinstance(data, dict) else {}

    async def fetch_trip_list(self) -> list[str]:
        """저장된 여행 식별자 목록을 가져옵니다."""
        data = await self._get_json("/getTrips")
        if not isinstance(data, list):
            return []
        return [str(item) for item in data]

    async def fetch_trip(self, trip_id: str) -> TripDocument:
        """여행 문서 하나를 불러옵니다."""
        data = await self._get_json("/getTrip", {"tripName": trip_id})
        try:
            return TripDocument.model_validate(data)
        except ValueError as exc:
            raise TripServiceError(f"Trip document is malformed: {trip_id}") from exc

    async def save_trip(self, doc: TripDocument) -> bool:
        """문서 전체를 저장하고, 실패 시 지수 백오프로 재시도합니다.

        Returns:
            최종적으로 저장에 성공했는지 여부.
        """
        payload = doc.to_payload()
        max_attempts = 1 + self._max_retries

        for attempt in range(1, max_attempts + 1):
            try:
                await self._request("POST", "/saveTrip", payload=payload, timeout_seconds=self._save_timeout_seconds)
                if attempt > 1:
                    logger.info("Trip saved after retry: attempt=%d/%d trip_id=%s", attempt, max_attempts, doc.trip_id)
                return True
            except requests.RequestException as exc:
                is_retryable = _is_retryable_request_error(exc)
                status_code = None
                if isinstance(exc, requests.HTTPError) and exc.response is not None:
                    status_code = exc.response.status_code

                if attempt >= max_attempts or not is_retryable:
                    logger.error(
                        "Trip save failed permanently: attempts=%d trip_id=%s status_code=%s retryable=%s error=%s",
                        attempt,
                        doc.trip_id,
                        status_code,
                        is_retryable,
                        exc,
                    )
                    return False

                delay = min(self._backoff_max, self._backoff_base * (2 ** (attempt - 1)))
                logger.warning(
                    "Trip save failed, retrying: attempt=%d/%d delay=%.2fs trip_id=%s status_code=%s error=%s",
                    attempt,
                    max_attempts,
                    delay,
                    doc.trip_id,
                    status_code,
                    exc,
                )
                await asyncio.sleep(delay)

        return False

    async def get_dining_suggestions(self, location: str) -> list[PlaceRef]:
        data = await self._get_json("/getDiningSuggestions", {"location": location})
        items = (data or {}).get("data") if isinstance(data, dict) else None
        return [PlaceRef.model_validate(item) for item in items or [] if isinstance(item, dict)]

    async def get_site_suggestions(self, location: str) -> list[PlaceRef]:
        data = await self._get_json("/getSiteSuggestions", {"location": location})
        items = (data or {}).get("results") if isinstance(data, dict) else None
        return [PlaceRef.model_validate(item) for item in items or [] if isinstance(item, dict)]

    async def get_location_history(self, location: str) -> str:
        data = await self._get_json("/getLocationHistory", {"location": location})
        if not isinstance(data, dict):
            return ""
        return str(data.get("extract") or "")
