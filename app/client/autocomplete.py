"""장소 검색 위젯 바인딩.

`data-autocomplete="place"` 입력마다 장소 검색 위젯을 붙이고, 장소가 선택되면 해당 필드(숙소 이름은
이름/주소/전화번호 묶음)를 부분 갱신한다. 선택 직후 이어지는 blur가 같은 필드를 다시 쓰지 않도록
입력 주소를 잠시 억제 목록에 넣는다.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Callable, Mapping
from typing import Any

from bs4 import Tag

from app.client.dom import FieldAddress, Page, read_address, set_element_value
from app.client.lookup import LocationLookupClient
from app.client.store import TripStore
from app.client.transforms import apply_partial, attach_suggestions, place_partial
from app.core.logger import get_logger
from app.schemas.trip import TripDocument

logger = get_logger(__name__)

PLACE_INPUT_SELECTOR = 'input[data-autocomplete="place"]'
PLACE_CHANGED = "place_changed"

AddressKey = tuple[int, int | None, str | None]


class SelectionSuppressor:
    """장소 선택 직후의 blur를 무시하기 위한 단기 억제 목록."""

    def __init__(self) -> None:
        self._keys: set[AddressKey] = set()

    def suppress(self, key: AddressKey) -> None:
        self._keys.add(key)

    def release_soon(self, key: AddressKey) -> None:
        """다음 루프 반복에서 억제를 해제합니다. 실행 중인 루프가 없으면 즉시 해제합니다."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._keys.discard(key)
            return
        loop.call_soon(self._keys.discard, key)

    def is_suppressed(self, key: AddressKey) -> bool:
        return key in self._keys


class PlaceAutocompleteWidget:
    """입력 하나에 붙는 장소 검색 위젯.

    브라우저의 장소 검색 위젯과 같은 모양(`add_listener`, `get_place`)을 가진다. `choose`로 선택을 흉내낸다.
    """

    def __init__(self, element: Tag) -> None:
        self.element = element
        self._place: dict[str, Any] | None = None
        self._listeners: list[Callable[[], Any]] = []

    def add_listener(self, event_type: str, listener: Callable[[], Any]) -> None:
        if event_type != PLACE_CHANGED:
            raise ValueError(f"지원하지 않는 위젯 이벤트입니다: {event_type}")
        self._listeners.append(listener)

    def get_place(self) -> dict[str, Any] | None:
        return self._place

    async def choose(self, place: Mapping[str, Any]) -> None:
        """장소를 선택하고 `place_changed` 리스너를 순서대로 실행합니다."""
        self._place = dict(place)
        for listener in list(self._listeners):
            result = listener()
            if inspect.isawaitable(result):
                await result


class AutocompletePlaceBinder:
    """렌더링된 장소 입력에 위젯을 붙이고 선택 결과를 TripStore로 보냅니다."""

    def __init__(self, page: Page, lookup: LocationLookupClient, suppressor: SelectionSuppressor) -> None:
        self._page = page
        self._lookup = lookup
        self._suppressor = suppressor
        self.widgets: dict[AddressKey, Any] = {}

    def bind(self, doc: TripDocument | None, store: TripStore) -> int:
        """현재 렌더링된 장소 입력마다 위젯을 하나씩 붙이고, 붙인 개수를 반환합니다."""
        self.widgets = {}
        factory = self._page.places_widget_factory
        if factory is None:
            logger.warning("Place widget factory unavailable, autocomplete disabled")
            return 0

        day_count = len(doc.days) if doc is not None else 0
        for element in self._page.query_all(PLACE_INPUT_SELECTOR):
            address = read_address(element)
            if address is None or address.field is None:
                logger.warning("Place input without address metadata: id=%s", element.get("id"))
                continue
            if address.day_index >= day_count:
                logger.warning("Place input beyond trip days: day_index=%s", address.day_index)
                continue

            widget = factory(element)
            widget.add_listener(PLACE_CHANGED, self._listener_for(widget, element, address, store))
            self.widgets[address.key] = widget
        return len(self.widgets)

    def _listener_for(self, widget: Any, element: Tag, address: FieldAddress, store: TripStore):
        async def _on_place_changed() -> None:
            await self._on_place_selected(widget, element, address, store)

        return _on_place_changed

    async def _on_place_selected(self, widget: Any, element: Tag, address: FieldAddress, store: TripStore) -> None:
        # 억제는 현재 루프 반복(선택 직후의 blur)까지만 유효하다.
        self._suppressor.suppress(address.key)
        try:
            place = widget.get_place()
            if not place:
                logger.warning("Place selection without place data: field=%s", address.field)
                return
            partial = place_partial(address.field, place, is_activity=address.is_activity)
            set_element_value(element, partial[address.field])
        finally:
            self._suppressor.release_soon(address.key)

        wants_lookup = address.field == "location" and not address.is_activity
        suggestions = await self._lookup.fetch(partial["location"]) if wants_lookup else None

        def _apply(doc: TripDocument) -> TripDocument:
            updated = apply_partial(doc, address.day_index, partial, address.activity_index)
            if wants_lookup:
                updated = attach_suggestions(updated, address.day_index, suggestions)
            return updated

        await store.update(_apply)
