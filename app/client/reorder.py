"""드래그 앤 드롭 재정렬 조정기."""

from __future__ import annotations

from bs4 import Tag

from app.client.dom import DomEvent, Page, read_address
from app.client.store import TripStore
from app.client.transforms import ActivityRef, move_activities, reorder_activities
from app.core.logger import get_logger
from app.schemas.trip import TripDocument

logger = get_logger(__name__)

ACTIVITY_LIST_SELECTOR = ".activity-list"


def read_drop_order(container: Tag) -> list[ActivityRef] | None:
    """컨테이너의 현재 자식 순서를 `(원래 일자, 원래 활동 인덱스)` 목록으로 읽습니다."""
    refs: list[ActivityRef] = []
    for child in container.find_all(class_="activity", recursive=False):
        address = read_address(child)
        if address is None or address.activity_index is None:
            return None
        refs.append((address.day_index, address.activity_index))
    return refs


class ReorderCoordinator:
    """활동 목록마다 drop 리스너를 붙입니다. 렌더링 후마다 다시 바인딩해야 합니다."""

    def __init__(self, page: Page) -> None:
        self._page = page

    def bind(self, doc: TripDocument | None, store: TripStore) -> int:
        containers = self._page.query_all(ACTIVITY_LIST_SELECTOR)
        for container in containers:

            async def _on_drop(event: DomEvent, container: Tag = container) -> None:
                await self.handle_drop(container, store)

            self._page.add_listener(container, "drop", _on_drop)
        return len(containers)

    async def handle_drop(self, container: Tag, store: TripStore) -> TripDocument | None:
        """드롭 후 컨테이너 순서를 문서에 반영합니다."""
        target = read_address(container)
        refs = read_drop_order(container)
        if target is None or refs is None:
            logger.warning("Drop ignored, list without address metadata: id=%s", container.get("id"))
            return None

        day_index = target.day_index
        if all(ref_day == day_index for ref_day, _ in refs):
            new_order = [index for _, index in refs]
            return await store.update(lambda doc: reorder_activities(doc, day_index, new_order))

        logger.info("Cross-day activity move: target_day=%s refs=%s", day_index, refs)
        return await store.update(lambda doc: move_activities(doc, day_index, refs))
