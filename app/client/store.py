"""편집 세션의 단일 진실 공급원(TripStore).

모든 변경은 `update(transform)`을 거친다. 갱신은 FIFO 락으로 직렬화되어, 나중에 요청된 변환은 항상
앞선 변환이 만든 문서를 입력으로 받는다. 한 번의 갱신은 다음 순서로 진행된다.

1. 변환 실행 (조회 결과를 기다리는 비동기 변환 가능)
2. 현재 문서 교체
3. 렌더 콜백 호출 (렌더링 + 바인딩 재부착)
4. 이 변환이 만든 문서를 저장

저장은 별도의 FIFO 락으로 순서가 보장되며, 실패해도 상태를 되돌리지 않는다.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from app.core.logger import get_logger
from app.schemas.trip import TripDocument

logger = get_logger(__name__)

RenderCallback = Callable[[TripDocument], None]
PersistCallback = Callable[[TripDocument], Awaitable[bool]]
Transform = Callable[[TripDocument], "TripDocument | Awaitable[TripDocument]"]


class TripStore:
    """현재 TripDocument를 보유하고 변경을 직렬화합니다."""

    def __init__(
        self,
        render: RenderCallback | None = None,
        persist: PersistCallback | None = None,
        initial: TripDocument | None = None,
    ) -> None:
        self._current = initial
        self._render = render
        self._persist = persist
        self._mutation_lock = asyncio.Lock()
        self._persist_lock = asyncio.Lock()
        self.last_save_ok: bool | None = None

    def get(self) -> TripDocument | None:
        """현재 문서를 반환합니다. 반환값은 불변이며 수정하려면 `update`를 사용해야 합니다."""
        return self._current

    def set(self, doc: TripDocument | None) -> None:
        """문서를 교체합니다. 렌더링이나 저장은 일어나지 않습니다 (트립 로드 시 사용)."""
        self._current = doc

    def update(self, transform: Transform) -> asyncio.Task[TripDocument | None]:
        """변환을 예약하고, 새 문서로 완료되는 태스크를 반환합니다.

        Raises:
            TypeError: transform이 호출 가능한 객체가 아닌 경우 (즉시 발생).
        """
        if not callable(transform):
            raise TypeError(f"transform must be callable, got {type(transform).__name__}")
        return asyncio.create_task(self._run_update(transform))

    async def _run_update(self, transform: Transform) -> TripDocument | None:
        async with self._mutation_lock:
            previous = self._current
            if previous is None:
                logger.warning("Update skipped: no trip loaded")
                return None

            result: Any = transform(previous)
            if inspect.isawaitable(result):
                result = await result
            if not isinstance(result, TripDocument):
                raise TypeError(f"transform must return TripDocument, got {type(result).__name__}")

            self._current = result
            if self._render is not None:
                try:
                    self._render(result)
                except Exception:
                    logger.exception("Render failed after update: trip_id=%s", result.trip_id)

            # 락을 놓기 전에 저장 태스크를 만들어 저장 순서를 갱신 순서와 맞춘다.
            save_task = asyncio.create_task(self._persist_in_order(result))

        await save_task
        return result

    async def _persist_in_order(self, doc: TripDocument) -> None:
        if self._persist is None:
            return
        async with self._persist_lock:
            try:
                ok = bool(await self._persist(doc))
            except Exception as exc:
                logger.error("Trip save raised: trip_id=%s error=%s", doc.trip_id, exc)
                ok = False
            self.last_save_ok = ok
            if not ok:
                logger.warning("Trip save failed, keeping local state: trip_id=%s", doc.trip_id)
