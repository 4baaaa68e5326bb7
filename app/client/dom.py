"""렌더링 결과를 담는 뷰 호스트(Page).

렌더러가 만든 마크업을 BeautifulSoup 트리로 파싱해 보관하고, 요소 단위/문서 단위 이벤트 리스너를
관리한다. 컨테이너 내용을 교체하면 그 안의 요소에 붙은 리스너는 함께 사라지므로, 렌더링 후에는
항상 바인딩을 다시 수행해야 한다.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from bs4 import BeautifulSoup, Tag

from app.core.logger import get_logger

logger = get_logger(__name__)

TRIP_CONTAINER_ID = "trip-output"
DEFAULT_SHELL = f'<main><div id="{TRIP_CONTAINER_ID}"></div></main>'


@dataclass
class DomEvent:
    """페이지에서 발생한 이벤트."""

    type: str
    target: Tag
    detail: dict[str, Any] = field(default_factory=dict)


Listener = Callable[[DomEvent], Awaitable[None] | None]


@dataclass
class _Binding:
    element: Tag
    event_type: str
    listener: Listener


@dataclass(frozen=True)
class FieldAddress:
    """렌더링된 요소의 주소 메타데이터 (일자/활동/필드)."""

    day_index: int
    field: str | None = None
    activity_index: int | None = None

    @property
    def key(self) -> tuple[int, int | None, str | None]:
        return (self.day_index, self.activity_index, self.field)

    @property
    def is_activity(self) -> bool:
        return self.activity_index is not None


def _parse_index(raw: Any) -> int | None:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def read_address(element: Tag) -> FieldAddress | None:
    """요소의 `data-*` 속성에서 주소 메타데이터를 읽습니다. 일자 인덱스가 없으면 None입니다."""
    day_index = _parse_index(element.get("data-day-index"))
    if day_index is None:
        return None
    activity_raw = element.get("data-activity-index")
    activity_index = _parse_index(activity_raw)
    if activity_raw is not None and activity_index is None:
        return None
    field_path = element.get("data-field")
    return FieldAddress(day_index=day_index, field=field_path or None, activity_index=activity_index)


def element_value(element: Tag) -> str:
    """입력 요소의 현재 값을 반환합니다."""
    if element.name == "textarea":
        return element.get_text()
    value = element.get("value")
    return "" if value is None else str(value)


def set_element_value(element: Tag, value: str) -> None:
    """입력 요소의 값을 바꿉니다 (사용자 입력을 흉내낼 때 사용)."""
    if element.name == "textarea":
        element.string = value
    else:
        element["value"] = value


class Page:
    """마크업 트리와 이벤트 리스너를 보유하는 뷰 호스트."""

    def __init__(self, markup: str = DEFAULT_SHELL, *, places_widget_factory: Callable[[Tag], Any] | None = None):
        self.soup = BeautifulSoup(markup, "html.parser")
        self.places_widget_factory = places_widget_factory
        self._bindings: list[_Binding] = []
        self._document_listeners: list[tuple[str, Listener]] = []

    def query(self, selector: str) -> Tag | None:
        return self.soup.select_one(selector)

    def query_all(self, selector: str) -> list[Tag]:
        return list(self.soup.select(selector))

    def mount(self, markup: str, container_id: str = TRIP_CONTAINER_ID) -> bool:
        """컨테이너 내용을 새 마크업으로 교체합니다.

        기존 하위 요소에 붙은 리스너는 제거됩니다. 컨테이너가 없으면 경고만 남기고 False를 반환합니다.
        """
        container = self.soup.find(id=container_id)
        if not isinstance(container, Tag):
            logger.warning("Render container not found: #%s", container_id)
            return False

        stale = {id(node) for node in container.descendants if isinstance(node, Tag)}
        self._bindings = [binding for binding in self._bindings if id(binding.element) not in stale]

        container.clear()
        fragment = BeautifulSoup(markup, "html.parser")
        for node in list(fragment.contents):
            container.append(node.extract())
        return True

    def add_listener(self, element: Tag, event_type: str, listener: Listener) -> None:
        """요소 단위 리스너를 등록합니다. 요소가 교체되면 함께 사라집니다."""
        self._bindings.append(_Binding(element=element, event_type=event_type, listener=listener))

    def add_document_listener(self, event_type: str, listener: Listener) -> None:
        """문서 단위(캡처 단계) 리스너를 등록합니다. 재렌더링 후에도 유지됩니다."""
        self._document_listeners.append((event_type, listener))

    def listener_count(self, element: Tag | None = None) -> int:
        if element is None:
            return len(self._bindings)
        return sum(1 for binding in self._bindings if binding.element is element)

    async def dispatch(self, target: Tag, event_type: str, **detail: Any) -> DomEvent:
        """이벤트를 문서 리스너(캡처) → 대상 요소 리스너 순서로 전달합니다."""
        event = DomEvent(type=event_type, target=target, detail=detail)
        listeners = [listener for kind, listener in self._document_listeners if kind == event_type]
        listeners.extend(
            binding.listener
            for binding in self._bindings
            if binding.element is target and binding.event_type == event_type
        )
        for listener in listeners:
            result = listener(event)
            if inspect.isawaitable(result):
                await result
        return event

    def move(self, element: Tag, target_container: Tag, position: int) -> None:
        """요소를 대상 컨테이너의 `position` 위치로 옮깁니다 (드래그 앤 드롭 결과를 반영)."""
        element.extract()
        children = [child for child in target_container.children if isinstance(child, Tag)]
        if position >= len(children):
            target_container.append(element)
        else:
            children[max(0, position)].insert_before(element)
