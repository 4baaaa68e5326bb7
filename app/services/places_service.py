"""Places 서비스 추상 프로토콜 정의."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence

from app.schemas.place import PlaceRef

TypesPredicate = Callable[[Sequence[str]], bool]


class PlacesServiceProtocol(ABC):
    """장소 텍스트 검색을 위한 인터페이스를 정의합니다."""

    @abstractmethod
    async def search(
        self,
        query: str,
        included_type: str | None = None,
        source_label: str | None = None,
        accept_types: TypesPredicate | None = None,
    ) -> list[PlaceRef]:
        """검색 쿼리로 장소를 검색합니다.

        Args:
            query: 검색 쿼리 (예: `restaurants near Paris`)
            included_type: Google Places 장소 유형 필터 (예: `restaurant`)
            source_label: 결과에 붙일 출처 라벨
            accept_types: 장소 유형 목록을 받아 포함 여부를 판단하는 함수

        Returns:
            검색 결과 장소 목록. 호출 실패 시 빈 목록.
        """
        raise NotImplementedError


SIGHT_TYPES = frozenset(
    {
        "tourist_attraction",
        "point_of_interest",
        "park",
        "museum",
        "winery",
        "natural_feature",
        "amusement_park",
        "zoo",
        "aquarium",
        "art_gallery",
    }
)
NON_SIGHT_TYPES = frozenset({"restaurant", "food", "cafe", "bar"})


def is_sight(types: Sequence[str]) -> bool:
    """관광 명소 유형을 하나 이상 가지면서 음식점 유형은 없는지 판단합니다."""
    type_set = set(types)
    return bool(type_set & SIGHT_TYPES) and not type_set & NON_SIGHT_TYPES
