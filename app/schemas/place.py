"""외부 장소 조회 결과를 표준화한 PlaceRef 모델과 조회 API 응답 스키마."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class PlaceRef(BaseModel):
    """외부 조회(식당/명소)에서 반환하는 단순화된 장소 정보.

    Google 응답 키(`formatted_address`, `vicinity`, `place_id`)도 그대로 받아들인다.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(default="", description="장소 이름")
    address: str = Field(
        default="",
        validation_alias=AliasChoices("address", "formatted_address", "formattedAddress", "vicinity"),
        description="장소 주소",
    )
    external_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("external_id", "place_id", "externalId"),
        serialization_alias="place_id",
        description="Google Places ID",
    )
    source_label: str | None = Field(
        default=None,
        validation_alias=AliasChoices("source_label", "source", "sourceLabel"),
        serialization_alias="source",
        description="결과를 만든 출처 라벨",
    )

    @field_validator("name", "address", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return "" if value is None else value

    def to_wire(self) -> dict:
        """`{name, address, place_id?, source?}` 형태의 dict로 직렬화합니다."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SourceStatus(BaseModel):
    """식당 출처별 조회 상태."""

    source: str = Field(..., description="출처 라벨")
    status: str = Field(..., description="ok 또는 error")
    count: int | None = Field(default=None, description="반환된 결과 수")
    error: str | None = Field(default=None, description="실패 사유")


class DiningResponse(BaseModel):
    """`/getDiningSuggestions` 응답 모델."""

    data: list[PlaceRef] = Field(default_factory=list, description="중복 제거된 식당 목록")
    sources: list[SourceStatus] = Field(default_factory=list, description="출처별 조회 상태")

    def to_wire(self) -> dict:
        return {
            "data": [place.to_wire() for place in self.data],
            "sources": [source.model_dump(exclude_none=True) for source in self.sources],
        }


class SiteSuggestionsResponse(BaseModel):
    """`/getSiteSuggestions` 응답 모델."""

    results: list[PlaceRef] = Field(default_factory=list, description="명소 목록")

    def to_wire(self) -> dict:
        return {"results": [place.to_wire() for place in self.results]}


class HistoryResponse(BaseModel):
    """`/getLocationHistory` 응답 모델."""

    title: str = Field(default="", description="매칭된 문서 제목")
    extract: str = Field(default="", description="요약 본문")
