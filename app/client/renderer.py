"""TripDocument → 마크업 렌더러.

같은 문서는 항상 같은 마크업을 만든다. 요소 id는 일자/활동/필드 주소로만 만들고 난수를 쓰지 않는다.
편집 가능한 모든 필드에는 `data-day-index`, `data-field`(활동 필드는 `data-activity-index` 포함)가 붙는다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlencode

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from app.core.time_derivation import compute_start_time, derive_start_times, format_display_date
from app.schemas.trip import Activity, Day, Suggestions, TripDocument

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
MAP_EMBED_URL = "https://www.google.com/maps/embed/v1/place"
SUGGESTION_LIMIT = 5

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass(frozen=True)
class FieldConfig:
    label: str
    input_type: str
    key: str
    class_name: str = ""
    placeholder: str = ""
    place_search: bool = False


@dataclass(frozen=True)
class FormField:
    """템플릿에 넘기는 입력 필드 하나."""

    label: str
    input_type: str
    dom_id: str
    value: str
    class_name: str = ""
    placeholder: str = ""
    data: dict[str, str] = field(default_factory=dict)


DAY_FIELD_CONFIGS: tuple[FieldConfig, ...] = (
    FieldConfig("Start Time", "text", "wakeUpTime", class_name="wake-up-time", placeholder="08:00"),
    FieldConfig("Location", "text", "location", placeholder="Enter location", place_search=True),
    FieldConfig("Hotel Name", "text", "lodging.name", placeholder="Hotel name", place_search=True),
    FieldConfig("Address", "text", "lodging.address", placeholder="Hotel address"),
    FieldConfig("Phone", "text", "lodging.phone", placeholder="Hotel phone"),
    FieldConfig("Room Type", "text", "lodging.roomType", placeholder="Room type"),
)

ACTIVITY_FIELD_CONFIGS: tuple[FieldConfig, ...] = (
    FieldConfig("Name", "text", "name"),
    FieldConfig("Length (min)", "number", "length", class_name="activity-length"),
    FieldConfig("Location", "text", "location", placeholder="Activity location", place_search=True),
    FieldConfig("Notes", "textarea", "notes"),
)

_DAY_VALUE_GETTERS = {
    "wakeUpTime": lambda day: day.wake_up_time,
    "location": lambda day: day.location,
    "lodging.name": lambda day: day.lodging.name,
    "lodging.address": lambda day: day.lodging.address,
    "lodging.phone": lambda day: day.lodging.phone,
    "lodging.roomType": lambda day: day.lodging.room_type,
}


def _dom_id(day_index: int, activity_index: int | None, key: str) -> str:
    scope = "day" if activity_index is None else f"a{activity_index}"
    return f"field-{day_index}-{scope}-{key.replace('.', '-')}"


def _build_field(
    config: FieldConfig,
    value: object,
    day_index: int,
    activity_index: int | None = None,
) -> FormField:
    data = {"day-index": str(day_index)}
    if activity_index is not None:
        data["activity-index"] = str(activity_index)
    data["field"] = config.key
    if config.place_search:
        data["autocomplete"] = "place"
    return FormField(
        label=config.label,
        input_type=config.input_type,
        dom_id=_dom_id(day_index, activity_index, config.key),
        value="" if value is None else str(value),
        class_name=config.class_name,
        placeholder=config.placeholder,
        data=data,
    )


def day_fields(day: Day, day_index: int) -> list[FormField]:
    return [_build_field(config, _DAY_VALUE_GETTERS[config.key](day), day_index) for config in DAY_FIELD_CONFIGS]


def activity_fields(activity: Activity, day_index: int, activity_index: int) -> list[FormField]:
    return [
        _build_field(config, getattr(activity, config.key), day_index, activity_index)
        for config in ACTIVITY_FIELD_CONFIGS
    ]


def map_embed_url(location: str, api_key: str) -> str:
    """지역 지도 임베드 URL을 만듭니다. 키나 지역이 없으면 빈 문자열입니다."""
    if not api_key or not location:
        return ""
    return f"{MAP_EMBED_URL}?{urlencode({'key': api_key, 'q': location})}"


def render_activity_card(activity: Activity, day_index: int, activity_index: int, start_time: str) -> str:
    """활동 카드 하나를 렌더링합니다."""
    return _env.get_template("trip/activity_card.html").render(
        activity=activity,
        day_index=day_index,
        activity_index=activity_index,
        start_time=start_time,
        fields=activity_fields(activity, day_index, activity_index),
    )


def render_suggestions(suggestions: Suggestions | None, location: str, api_key: str = "", day_index: int = 0) -> str:
    """식당/명소/역사 추천 블록을 렌더링합니다. 추천 정보가 없으면 빈 문자열입니다."""
    if suggestions is None:
        return ""
    return _env.get_template("trip/suggestions.html").render(
        day_index=day_index,
        location=location,
        restaurants=suggestions.restaurants[:SUGGESTION_LIMIT],
        sights=suggestions.sights[:SUGGESTION_LIMIT],
        history=suggestions.history,
        map_url=map_embed_url(location, api_key),
    )


def render_day(day: Day, day_index: int, trip_name: str, display_date: str, api_key: str = "") -> str:
    """하루치 인쇄용 요약과 편집 폼을 렌더링합니다."""
    start_times = derive_start_times(day)
    cards = [
        Markup(render_activity_card(activity, day_index, activity_index, compute_start_time(day, activity_index)))
        for activity_index, activity in enumerate(day.activities)
    ]
    return _env.get_template("trip/day.html").render(
        day=day,
        day_index=day_index,
        trip_name=trip_name,
        display_date=display_date,
        start_times=start_times,
        fields=day_fields(day, day_index),
        suggestions_html=Markup(render_suggestions(day.suggestions, day.location, api_key, day_index)),
        activity_cards=cards,
    )


def render_trip_html(doc: TripDocument | None, api_key: str = "") -> str:
    """문서 전체를 렌더링합니다. 문서가 없으면 빈 문자열입니다."""
    if doc is None:
        return ""
    return "".join(
        render_day(day, index, doc.trip_name, format_display_date(doc.start_date, index), api_key)
        for index, day in enumerate(doc.days)
    )


def render_shell(trip_names: list[str] | tuple[str, ...] = (), api_key: str = "", add_day_enabled: bool = False) -> str:
    """트립 선택기와 렌더 컨테이너를 포함한 편집기 페이지 골격을 렌더링합니다."""
    return _env.get_template("index.html").render(
        trip_names=list(trip_names),
        api_key=api_key,
        add_day_enabled=add_day_enabled,
    )
