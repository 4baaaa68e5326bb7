"""여행 문서 JSON 파일 저장소.

문서 하나는 `<TRIPS_DIR>/<tripName>_<startDate>.json` 파일 하나에 들여쓰기된 JSON으로 저장된다.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from app.core.config import get_settings
from app.core.logger import get_logger
from app.schemas.trip import TripDocument

logger = get_logger(__name__)

_FORBIDDEN_ID_PARTS = ("/", "\\", "..")


class TripNotFoundError(LookupError):
    """요청한 여행 문서 파일이 없을 때 발생하는 예외."""


def validate_trip_id(trip_id: str) -> str:
    """파일 이름으로 안전한 여행 식별자인지 검증합니다.

    Raises:
        ValueError: 비어 있거나 경로 구분자/상위 경로를 포함하는 경우.
    """
    cleaned = (trip_id or "").strip()
    if cleaned.endswith(".json"):
        cleaned = cleaned[: -len(".json")]
    if not cleaned or any(part in cleaned for part in _FORBIDDEN_ID_PARTS):
        raise ValueError(f"유효하지 않은 여행 식별자입니다: {trip_id!r}")
    return cleaned


class TripRepository:
    """디렉터리 하나를 여행 문서 저장소로 사용합니다."""

    def __init__(self, trips_dir: str | os.PathLike[str]) -> None:
        self._trips_dir = Path(trips_dir)

    @property
    def trips_dir(self) -> Path:
        return self._trips_dir

    def _path_for(self, trip_id: str) -> Path:
        return self._trips_dir / f"{validate_trip_id(trip_id)}.json"

    def list_trip_ids(self) -> list[str]:
        """저장된 여행 식별자(파일 이름에서 확장자를 뺀 값)를 이름순으로 반환합니다."""
        if not self._trips_dir.is_dir():
            return []
        return sorted(path.stem for path in self._trips_dir.glob("*.json") if path.is_file())

    def load(self, trip_id: str) -> dict[str, Any]:
        """저장된 문서를 그대로 읽어 반환합니다. 남아 있는 `suggestions`는 제거합니다."""
        path = self._path_for(trip_id)
        if not path.is_file():
            raise TripNotFoundError(trip_id)

        with path.open(encoding="utf-8") as file:
            data = json.load(file)
        if isinstance(data, dict):
            for day in data.get("trip") or []:
                if isinstance(day, dict):
                    day.pop("suggestions", None)
        return data

    def save(self, doc: TripDocument) -> str:
        """문서를 저장하고 여행 식별자를 반환합니다."""
        trip_id = validate_trip_id(doc.trip_id)
        self._trips_dir.mkdir(parents=True, exist_ok=True)
        path = self._path_for(trip_id)
        tmp_path = path.with_suffix(".json.tmp")
        with tmp_path.open("w", encoding="utf-8") as file:
            json.dump(doc.to_payload(), file, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
        logger.info("Trip saved: trip_id=%s days=%d", trip_id, len(doc.days))
        return trip_id


@lru_cache(maxsize=1)
def get_trip_repository() -> TripRepository:
    """설정된 TRIPS_DIR을 사용하는 프로세스 단위 저장소를 반환합니다."""
    return TripRepository(get_settings().TRIPS_DIR)
