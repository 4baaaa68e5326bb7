"""필드 편집(blur) 조정기.

페이지 단위로 blur 리스너 하나만 등록하므로 재렌더링 후에도 다시 바인딩할 필요가 없다.
"""

from __future__ import annotations

from app.client.autocomplete import SelectionSuppressor
from app.client.dom import DomEvent, Page, element_value, read_address
from app.client.lookup import LocationLookupClient
from app.client.store import TripStore
from app.client.transforms import attach_suggestions, is_activity_field, is_day_field, set_field
from app.core.logger import get_logger
from app.core.time_derivation import coerce_length
from app.schemas.trip import TripDocument

logger = get_logger(__name__)


class FieldEditCoordinator:
    """입력 필드에서 포커스가 빠질 때 해당 값을 문서에 반영합니다."""

    def __init__(self, page: Page, lookup: LocationLookupClient, suppressor: SelectionSuppressor) -> None:
        self._page = page
        self._lookup = lookup
        self._suppressor = suppressor
        self._bound = False

    def bind(self, store: TripStore) -> None:
        if self._bound:
            return

        async def _on_blur(event: DomEvent) -> None:
            await self.handle_blur(event, store)

        self._page.add_document_listener("blur", _on_blur)
        self._bound = True

    async def handle_blur(self, event: DomEvent, store: TripStore) -> TripDocument | None:
        """blur 이벤트 하나를 처리합니다. 갱신하지 않으면 None을 반환합니다."""
        address = read_address(event.target)
        if address is None or address.field is None:
            return None
        if self._suppressor.is_suppressed(address.key):
            logger.debug("Blur suppressed after place selection: key=%s", address.key)
            return None

        known = is_activity_field(address.field) if address.is_activity else is_day_field(address.field)
        if not known:
            logger.warning("Unknown field path ignored: %s", address.field)
            return None

        doc = store.get()
        if doc is None or not 0 <= address.day_index < len(doc.days):
            logger.warning("Blur on field outside current trip: key=%s", address.key)
            return None
        if address.is_activity and not 0 <= address.activity_index < len(doc.days[address.day_index].activities):
            logger.warning("Blur on activity outside current day: key=%s", address.key)
            return None

        value: str | int = element_value(event.target)
        if address.is_activity and address.field == "length":
            value = coerce_length(value)

        wants_lookup = address.field == "location" and not address.is_activity
        suggestions = await self._lookup.fetch(str(value)) if wants_lookup else None

        def _apply(current: TripDocument) -> TripDocument:
            updated = set_field(current, address.day_index, address.field, value, address.activity_index)
            if wants_lookup:
                updated = attach_suggestions(updated, address.day_index, suggestions)
            return updated

        return await store.update(_apply)
