"""일자/활동 추가·삭제 버튼 처리."""

from __future__ import annotations

from bs4 import Tag

from app.client import transforms
from app.client.dom import DomEvent, Page, read_address
from app.client.store import TripStore
from app.core.logger import get_logger
from app.schemas.trip import TripDocument

logger = get_logger(__name__)


async def handle_add_day(store: TripStore) -> TripDocument | None:
    """기본값 일자(`08:00`, 빈 숙소, 활동 없음)를 끝에 추가합니다."""
    return await store.update(transforms.add_day)


async def handle_add_activity(store: TripStore, day_index: int) -> TripDocument | None:
    return await store.update(lambda doc: transforms.add_activity(doc, day_index))


async def handle_delete_day(store: TripStore, day_index: int) -> TripDocument | None:
    return await store.update(lambda doc: transforms.delete_day(doc, day_index))


async def handle_delete_activity(store: TripStore, day_index: int, activity_index: int) -> TripDocument | None:
    return await store.update(lambda doc: transforms.delete_activity(doc, day_index, activity_index))


class ButtonCoordinator:
    """렌더링된 일자별 버튼에 click 리스너를 붙입니다."""

    def __init__(self, page: Page) -> None:
        self._page = page

    def bind(self, doc: TripDocument | None, store: TripStore) -> int:
        count = 0
        for button in self._page.query_all(".add-activity-button"):
            count += self._bind_one(button, store, self._add_activity)
        for button in self._page.query_all(".delete-day-button"):
            count += self._bind_one(button, store, self._delete_day)
        for button in self._page.query_all(".delete-activity-button"):
            count += self._bind_one(button, store, self._delete_activity)
        return count

    def _bind_one(self, button: Tag, store: TripStore, handler) -> int:
        address = read_address(button)
        if address is None:
            logger.warning("Button without day index ignored: class=%s", button.get("class"))
            return 0

        async def _on_click(event: DomEvent) -> None:
            await handler(store, address.day_index, address.activity_index)

        self._page.add_listener(button, "click", _on_click)
        return 1

    @staticmethod
    async def _add_activity(store: TripStore, day_index: int, activity_index: int | None) -> None:
        await handle_add_activity(store, day_index)

    @staticmethod
    async def _delete_day(store: TripStore, day_index: int, activity_index: int | None) -> None:
        await handle_delete_day(store, day_index)

    @staticmethod
    async def _delete_activity(store: TripStore, day_index: int, activity_index: int | None) -> None:
        if activity_index is None:
            logger.warning("Delete activity button without activity index: day_index=%s", day_index)
            return
        await handle_delete_activity(store, day_index, activity_index)
