"""지역 조회 프록시 API (식당/명소/역사)."""

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_dining_service, get_history, get_places_service, require_location
from app.core.logger import get_logger
from app.schemas.place import HistoryResponse, SiteSuggestionsResponse
from app.services.dining_service import DiningService
from app.services.history_service import HistoryService
from app.services.places_service import PlacesServiceProtocol, is_sight

router = APIRouter(tags=["suggestions"])
logger = get_logger(__name__)


@router.get("/getDiningSuggestions")
async def get_dining_suggestions(
    location: str = Depends(require_location),  # noqa: B008
    dining: DiningService = Depends(get_dining_service),  # noqa: B008
) -> dict:
    """여러 출처의 식당 추천을 중복 제거해 반환합니다."""
    logger.info("Dining suggestions requested: location=%s", location)
    return await dining.suggest(location)


@router.get("/getSiteSuggestions")
async def get_site_suggestions(
    location: str = Depends(require_location),  # noqa: B008
    places: PlacesServiceProtocol = Depends(get_places_service),  # noqa: B008
) -> dict:
    """지역 주변 관광 명소를 반환합니다."""
    results = await places.search(
        f"points of interest near {location}",
        source_label="GooglePlaces",
        accept_types=is_sight,
    )
    return SiteSuggestionsResponse(results=results).to_wire()


@router.get("/getLocationHistory", response_model=HistoryResponse)
async def get_location_history(
    location: str = Depends(require_location),  # noqa: B008
    history: HistoryService = Depends(get_history),  # noqa: B008
) -> HistoryResponse:
    """지역의 Wikipedia 요약을 반환합니다."""
    result = await history.lookup(location)
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No article found for {location}")
    return result
