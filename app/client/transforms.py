"""TripDocument 순수 변환 함수 모음.

모든 함수는 입력 문서를 건드리지 않고 새 문서를 반환한다. 대상 일자/활동이 현재 문서에 없으면
경고를 남기고 입력 문서를 그대로 돌려준다(그 사이 다른 변경으로 인덱스가 사라진 경우).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

from app.core.logger import get_logger
from app.schemas.trip import Activity, Day, Lodging, Suggestions, TripDocument

logger = get_logger(__name__)

LODGING_FIELDS: dict[str, str] = {
    "lodging.name": "name",
    "lodging.address": "address",
    "lodging.phone": "phone",
    "lodging.roomType": "room_type",
}
DAY_FIELDS: dict[str, str] = {
    "location": "location",
    "wakeUpTime": "wake_up_time",
    **LODGING_FIELDS,
}
ACTIVITY_FIELDS: frozenset[str] = frozenset({"name", "length", "location", "notes"})

ActivityRef = tuple[int, int]


def is_day_field(field_path: str) -> bool:
    return field_path in DAY_FIELDS


def is_activity_field(field_path: str) -> bool:
    return field_path in ACTIVITY_FIELDS


def _day_at(doc: TripDocument, day_index: int) -> Day | None:
    if 0 <= day_index < len(doc.days):
        return doc.days[day_index]
    logger.warning("Day index out of range: day_index=%s day_count=%d", day_index, len(doc.days))
    return None


def _with_day(doc: TripDocument, day_index: int, day: Day) -> TripDocument:
    days = list(doc.days)
    days[day_index] = day
    return doc.model_copy(update={"days": days})


def _with_days(doc: TripDocument, replacements: Mapping[int, Day]) -> TripDocument:
    days = list(doc.days)
    for index, day in replacements.items():
        days[index] = day
    return doc.model_copy(update={"days": days})


def _set_day_value(day: Day, field_path: str, value: Any) -> Day:
    if field_path in LODGING_FIELDS:
        lodging = day.lodging.model_copy(update={LODGING_FIELDS[field_path]: value})
        return day.model_copy(update={"lodging": lodging})
    return day.model_copy(update={DAY_FIELDS[field_path]: value})


def set_field(
    doc: TripDocument,
    day_index: int,
    field_path: str,
    value: Any,
    activity_index: int | None = None,
) -> TripDocument:
    """일자 또는 활동의 필드 하나를 갱신한 새 문서를 반환합니다.

    Args:
        doc: 현재 문서.
        day_index: 대상 일자 인덱스.
        field_path: 일자 필드(`location`, `wakeUpTime`, `lodging.name` 등) 또는 활동 필드.
        value: 새 값. 활동 `length`는 0 이상의 정수로 강제 변환됩니다.
        activity_index: 활동 필드일 때 대상 활동 인덱스.

    Raises:
        ValueError: 알 수 없는 필드 경로인 경우.
    """
    day = _day_at(doc, day_index)
    if day is None:
        return doc

    if activity_index is None:
        if not is_day_field(field_path):
            raise ValueError(f"알 수 없는 일자 필드입니다: {field_path}")
        return _with_day(doc, day_index, _set_day_value(day, field_path, value))

    if not is_activity_field(field_path):
        raise ValueError(f"알 수 없는 활동 필드입니다: {field_path}")
    if not 0 <= activity_index < len(day.activities):
        logger.warning("Activity index out of range: day_index=%s activity_index=%s", day_index, activity_index)
        return doc

    activities = list(day.activities)
    activities[activity_index] = Activity.model_validate(
        {**activities[activity_index].model_dump(), field_path: value}
    )
    return _with_day(doc, day_index, day.model_copy(update={"activities": activities}))


def apply_partial(
    doc: TripDocument,
    day_index: int,
    partial: Mapping[str, Any],
    activity_index: int | None = None,
) -> TripDocument:
    """`{필드 경로: 값}` 부분 갱신을 한 번에 적용합니다."""
    updated = doc
    for field_path, value in partial.items():
        updated = set_field(updated, day_index, field_path, value, activity_index)
    return updated


def attach_suggestions(doc: TripDocument, day_index: int, suggestions: Suggestions | None) -> TripDocument:
    """일자에 파생 추천 정보를 붙인 새 문서를 반환합니다."""
    day = _day_at(doc, day_index)
    if day is None:
        return doc
    return _with_day(doc, day_index, day.model_copy(update={"suggestions": suggestions}))


def place_partial(field_path: str, place: Mapping[str, Any], *, is_activity: bool = False) -> dict[str, str]:
    """장소 선택 결과에서 필드 경로별 부분 갱신을 만듭니다.

    숙소 이름은 이름/주소/전화번호를 함께 채우고, 그 외 필드는 장소 이름만 사용합니다.
    이름이 없으면 포맷된 주소로 대체합니다.
    """
    name = str(place.get("name") or "")
    address = str(place.get("formatted_address") or place.get("address") or "")
    phone = str(place.get("formatted_phone_number") or place.get("phone") or "")

    if field_path == "lodging.name" and not is_activity:
        return {"lodging.name": name, "lodging.address": address, "lodging.phone": phone}
    return {field_path: name or address}


def is_permutation(order: Sequence[int], size: int) -> bool:
    return len(order) == size and sorted(order) == list(range(size))


def reorder_activities(doc: TripDocument, day_index: int, new_order: Sequence[int]) -> TripDocument:
    """일자의 활동을 `new_order` 순서로 재배열합니다.

    새 목록은 이전 활동 목록을 원래 인덱스로 조회해 만들기 때문에 다른 필드의 미저장 편집도 유지됩니다.
    """
    day = _day_at(doc, day_index)
    if day is None:
        return doc
    if not is_permutation(new_order, len(day.activities)):
        logger.warning(
            "Reorder ignored, order is not a permutation: day_index=%s order=%s size=%d",
            day_index,
            list(new_order),
            len(day.activities),
        )
        return doc

    activities = [day.activities[index] for index in new_order]
    return _with_day(doc, day_index, day.model_copy(update={"activities": activities}))


def move_activities(doc: TripDocument, target_day_index: int, refs: Sequence[ActivityRef]) -> TripDocument:
    """다른 일자에서 끌어온 활동을 포함해 대상 일자의 활동 순서를 확정합니다.

    `refs`는 드롭 후 대상 목록의 `(원래 일자, 원래 활동 인덱스)` 순서입니다. 대상 일자의 기존 활동은 모두
    정확히 한 번씩 포함되어야 하며, 다른 일자의 활동은 원래 일자에서 제거됩니다.
    """
    target_day = _day_at(doc, target_day_index)
    if target_day is None:
        return doc

    own = [index for day_index, index in refs if day_index == target_day_index]
    foreign = [(day_index, index) for day_index, index in refs if day_index != target_day_index]
    valid_foreign = len(set(foreign)) == len(foreign) and all(
        0 <= day_index < len(doc.days) and 0 <= index < len(doc.days[day_index].activities)
        for day_index, index in foreign
    )
    if not is_permutation(own, len(target_day.activities)) or not valid_foreign:
        logger.warning("Cross-day move ignored, invalid refs: target_day=%s refs=%s", target_day_index, list(refs))
        return doc

    replacements: dict[int, Day] = {
        target_day_index: target_day.model_copy(
            update={"activities": [doc.days[day_index].activities[index] for day_index, index in refs]}
        )
    }

    removed: dict[int, set[int]] = {}
    for day_index, index in foreign:
        removed.setdefault(day_index, set()).add(index)
    for day_index, indices in removed.items():
        source_day = doc.days[day_index]
        remaining = [activity for index, activity in enumerate(source_day.activities) if index not in indices]
        replacements[day_index] = source_day.model_copy(update={"activities": remaining})

    return _with_days(doc, replacements)


def new_day() -> Day:
    """기본값으로 채운 새 일자를 만듭니다."""
    return Day(location="", wakeUpTime="08:00", lodging=Lodging(), activities=[])


def add_day(doc: TripDocument) -> TripDocument:
    return doc.model_copy(update={"days": [*doc.days, new_day()]})


def add_activity(doc: TripDocument, day_index: int) -> TripDocument:
    day = _day_at(doc, day_index)
    if day is None:
        return doc
    activities = [*day.activities, Activity(name="", length=0, location="", notes="")]
    return _with_day(doc, day_index, day.model_copy(update={"activities": activities}))


def delete_day(doc: TripDocument, day_index: int) -> TripDocument:
    if _day_at(doc, day_index) is None:
        return doc
    return doc.model_copy(update={"days": [day for index, day in enumerate(doc.days) if index != day_index]})


def delete_activity(doc: TripDocument, day_index: int, activity_index: int) -> TripDocument:
    day = _day_at(doc, day_index)
    if day is None:
        return doc
    if not 0 <= activity_index < len(day.activities):
        logger.warning("Activity index out of range: day_index=%s activity_index=%s", day_index, activity_index)
        return doc
    activities = [activity for index, activity in enumerate(day.activities) if index != activity_index]
    return _with_day(doc, day_index, day.model_copy(update={"activities": activities}))


def rename_trip(doc: TripDocument, trip_name: str) -> TripDocument:
    return doc.model_copy(update={"trip_name": trip_name})


def change_start_date(doc: TripDocument, start_date: date) -> TripDocument:
    return doc.model_copy(update={"start_date": start_date})
