"""여행 문서(TripDocument) 스키마.

한 개정(revision)의 문서는 불변으로 취급한다. 모든 모델은 `frozen=True`이며, 변경은 항상
새 문서를 만드는 방식으로만 이뤄진다. 와이어 포맷은 camelCase 키를 사용한다.
"""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.time_derivation import DEFAULT_WAKE_UP_TIME, coerce_length
from app.schemas.place import PlaceRef

_MODEL_CONFIG = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Lodging(BaseModel):
    """숙소 정보. 모든 필드는 독립적으로 생략 가능하다."""

    model_config = _MODEL_CONFIG

    name: str | None = Field(default=None, description="숙소 이름")
    address: str | None = Field(default=None, description="숙소 주소")
    phone: str | None = Field(default=None, description="숙소 전화번호")
    room_type: str | None = Field(default=None, alias="roomType", description="객실 유형")


class Activity(BaseModel):
    """일자 내 개별 활동. 시작 시각은 저장하지 않는다."""

    model_config = _MODEL_CONFIG

    name: str = Field(default="", description="활동 이름")
    length: int = Field(default=0, ge=0, description="활동 길이 (분)")
    location: str = Field(default="", description="활동 장소")
    notes: str = Field(default="", description="메모")

    @field_validator("length", mode="before")
    @classmethod
    def _coerce_length(cls, value: object) -> int:
        return coerce_length(value)

    @field_validator("name", "location", "notes", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value


class Suggestions(BaseModel):
    """일자에 붙는 파생 조회 결과. 저장 대상이 아니다."""

    model_config = _MODEL_CONFIG

    restaurants: list[PlaceRef] = Field(default_factory=list, description="식당 추천")
    sights: list[PlaceRef] = Field(default_factory=list, description="명소 추천")
    history: str = Field(default="", description="지역 역사 요약")

    @classmethod
    def empty(cls) -> Suggestions:
        return cls()


class Day(BaseModel):
    """여행의 하루."""

    model_config = _MODEL_CONFIG

    location: str = Field(default="", description="그날의 지역 (자유 입력)")
    wake_up_time: str = Field(default=DEFAULT_WAKE_UP_TIME, alias="wakeUpTime", description="기상 시각 HH:MM")
    lodging: Lodging = Field(default_factory=Lodging, description="숙소 정보")
    activities: list[Activity] = Field(default_factory=list, description="순서가 의미 있는 활동 목록")
    suggestions: Suggestions | None = Field(default=None, description="파생 추천 정보 (저장 제외)")

    @field_validator("wake_up_time", mode="before")
    @classmethod
    def _default_wake_up_time(cls, value: object) -> object:
        return DEFAULT_WAKE_UP_TIME if value is None else value

    @field_validator("location", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("lodging", mode="before")
    @classmethod
    def _none_as_empty_lodging(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("activities", mode="before")
    @classmethod
    def _none_as_empty_activities(cls, value: object) -> object:
        return [] if value is None else value


class TripDocument(BaseModel):
    """편집 세션 동안 TripStore가 보유하는 전체 여행 문서."""

    model_config = _MODEL_CONFIG

    trip_name: str = Field(..., alias="tripName", description="여행 이름")
    start_date: date = Field(..., alias="startDate", description="여행 시작일 (YYYY-MM-DD)")
    days: list[Day] = Field(default_factory=list, alias="trip", description="순서가 의미 있는 일자 목록")

    @property
    def trip_id(self) -> str:
        """저장소에서 사용하는 문서 식별자 (`<tripName>_<startDate>`)."""
        return f"{self.trip_name}_{self.start_date.isoformat()}"

    def to_payload(self) -> dict:
        """`/saveTrip`에 보내는 저장용 dict를 만듭니다. `suggestions`는 제외됩니다."""
        return self.model_dump(
            mode="json",
            by_alias=True,
            exclude_none=True,
            exclude={"days": {"__all__": {"suggestions"}}},
        )

    @classmethod
    def empty(cls, trip_name: str, start_date: date) -> TripDocument:
        """일자가 없는 새 여행 문서를 만듭니다."""
        return cls(tripName=trip_name, startDate=start_date, trip=[])


class ClientConfigResponse(BaseModel):
    """`/config` 응답 모델."""

    model_config = ConfigDict(populate_by_name=True)

    google_maps_api_key: str = Field(default="", alias="googleMapsApiKey", description="장소 검색 위젯용 키")


class SaveTripResponse(BaseModel):
    """`/saveTrip` 응답 모델."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = Field(..., description="처리 결과 메시지")
    trip_id: str | None = Field(default=None, alias="tripId", description="저장된 문서 식별자")
