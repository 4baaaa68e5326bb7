"""애플리케이션 전역 설정을 관리하는 모듈."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """환경 변수 기반 설정 모델."""

    GOOGLE_MAPS_API_KEY: str = ""
    GOOGLE_PLACES_LANGUAGE_CODE: str = "en"
    GOOGLE_PLACES_PAGE_SIZE: int = 5
    GOOGLE_PLACES_TIMEOUT_SECONDS: int = 5
    TRIPS_DIR: str = "trips"
    REDIS_URL: str | None = None
    DINING_CACHE_TTL_SECONDS: int = 3600
    DINING_DEDUP_THRESHOLD: float = 0.85
    WIKIPEDIA_LANGUAGE: str = "en"
    WIKIPEDIA_USER_AGENT: str = "itinerary-planner/0.1 (trip history lookup)"
    HISTORY_MAX_CHARS: int = 2000
    TRIP_SERVICE_URL: str = "http://localhost:3000"
    REQUEST_TIMEOUT_SECONDS: int = 30
    EXTERNAL_API_TIMEOUT_SECONDS: int = 10
    LOOKUP_TIMEOUT_SECONDS: int = 5
    SAVE_TIMEOUT_SECONDS: int = 10
    SAVE_MAX_RETRIES: int = 2
    SAVE_BACKOFF_BASE_SECONDS: float = 0.5
    SAVE_BACKOFF_MAX_SECONDS: float = 5.0
    APP_ENV: str = "development"
    EXPOSE_INTERNAL_ERRORS: bool = False
    CORS_ALLOW_ORIGINS: str = "*"
    CORS_ALLOW_METHODS: str = "GET,POST,OPTIONS"
    CORS_ALLOW_HEADERS: str = "Content-Type"
    SECURITY_HEADERS_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("DINING_DEDUP_THRESHOLD", mode="before")
    @classmethod
    def _clamp_dining_dedup_threshold(cls, value: object) -> float:
        try:
            numeric = float(value) if value is not None else 0.85
        except (TypeError, ValueError):
            numeric = 0.85
        return min(1.0, max(0.0, numeric))

    @field_validator("GOOGLE_PLACES_PAGE_SIZE", mode="before")
    @classmethod
    def _clamp_google_places_page_size(cls, value: object) -> int:
        try:
            numeric = int(value) if value is not None else 5
        except (TypeError, ValueError):
            numeric = 5
        return min(20, max(1, numeric))

    @field_validator("REDIS_URL", mode="before")
    @classmethod
    def _blank_redis_url_as_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache
def get_settings() -> Settings:
    """Settings 인스턴스를 반환한다. 최초 호출 시에만 생성되고 이후 캐싱된다."""
    return Settings()
