"""API 의존성 모음."""

from fastapi import HTTPException, Query, status

from app.core.config import get_settings
from app.services.dining_cache import get_dining_cache
from app.services.dining_service import DiningService
from app.services.google_places_service import GooglePlacesError, GooglePlacesService, get_google_places_service
from app.services.history_service import HistoryService, get_history_service
from app.services.trip_repository import TripRepository, get_trip_repository


def require_location(location: str | None = Query(default=None)) -> str:
    """`location` 쿼리 파라미터를 요구합니다."""
    cleaned = (location or "").strip()
    if not cleaned:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Location is required.")
    return cleaned


def get_repository() -> TripRepository:
    """여행 문서 저장소를 제공합니다."""
    return get_trip_repository()


def get_places_service() -> GooglePlacesService:
    """Google Places 서비스를 제공합니다. 키가 없으면 503을 반환합니다."""
    try:
        return get_google_places_service()
    except GooglePlacesError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


def get_dining_service() -> DiningService:
    places = get_places_service()
    return DiningService(places, get_dining_cache(), get_settings().DINING_DEDUP_THRESHOLD)


def get_history() -> HistoryService:
    return get_history_service()
