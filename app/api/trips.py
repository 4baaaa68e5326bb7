"""여행 문서 설정/목록/조회/저장 API."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import ValidationError

from app.api.dependencies import get_repository
from app.core.config import get_settings
from app.core.logger import get_logger
from app.schemas.trip import ClientConfigResponse, SaveTripResponse, TripDocument
from app.services.trip_repository import TripNotFoundError, TripRepository, validate_trip_id

router = APIRouter(tags=["trips"])
logger = get_logger(__name__)


@router.get("/config", response_model=ClientConfigResponse, response_model_by_alias=True)
def get_client_config() -> ClientConfigResponse:
    """클라이언트 장소 검색 위젯용 키를 반환합니다."""
    return ClientConfigResponse(google_maps_api_key=get_settings().GOOGLE_MAPS_API_KEY)


@router.get("/getTrips", response_model=list[str])
def list_trips(repository: TripRepository = Depends(get_repository)) -> list[str]:  # noqa: B008
    """저장된 여행 식별자 목록을 반환합니다."""
    return repository.list_trip_ids()


@router.get("/getTrip")
def get_trip(
    trip_name: str | None = Query(default=None, alias="tripName"),
    repository: TripRepository = Depends(get_repository),  # noqa: B008
) -> dict[str, Any]:
    """여행 문서 하나를 반환합니다."""
    try:
        trip_id = validate_trip_id(trip_name or "")
        return repository.load(trip_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except TripNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Trip not found: {trip_name}") from exc


@router.post("/saveTrip", response_model=SaveTripResponse, response_model_by_alias=True)
def save_trip(
    payload: dict[str, Any] = Body(...),  # noqa: B008
    repository: TripRepository = Depends(get_repository),  # noqa: B008
) -> SaveTripResponse:
    """여행 문서 전체를 저장합니다. 일자별 `suggestions`는 저장하지 않습니다."""
    if not payload.get("tripName") or not payload.get("startDate") or not isinstance(payload.get("trip"), list):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing required fields or invalid trip data",
        )

    try:
        doc = TripDocument.model_validate(payload)
        trip_id = repository.save(doc)
    except ValidationError as exc:
        logger.warning("Trip payload rejected: %s", exc.errors(include_url=False))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid trip data") from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return SaveTripResponse(message="Trip saved successfully", trip_id=trip_id)
