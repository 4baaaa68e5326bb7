"""편집 세션 부트스트랩.

TripStore 하나와 조정기들을 묶어 한 번의 편집 세션을 구성한다. 렌더 콜백은 `#trip-output`에 마크업을
다시 올리고 요소 단위 바인딩(장소 검색, 드롭, 버튼)을 전부 다시 붙인다. blur 처리는 페이지 단위 리스너
하나로 세션 시작 시 한 번만 붙인다.
"""

from __future__ import annotations

from datetime import date

from app.client import transforms
from app.client.autocomplete import AutocompletePlaceBinder, PlaceAutocompleteWidget, SelectionSuppressor
from app.client.buttons import ButtonCoordinator, handle_add_day
from app.client.dom import DomEvent, Page
from app.client.field_edit import FieldEditCoordinator
from app.client.lookup import LocationLookupClient
from app.client.renderer import render_trip_html
from app.client.reorder import ReorderCoordinator
from app.client.service_client import TripServiceClient, TripServiceError
from app.client.store import TripStore
from app.core.config import get_settings
from app.core.logger import get_logger
from app.core.timeout_policy import get_timeout_policy
from app.schemas.trip import TripDocument

logger = get_logger(__name__)

NEW_TRIP_OPTION = "new"


def _parse_start_date(value: date | str | None) -> date:
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise ValueError("여행 시작일이 필요합니다.")
    return date.fromisoformat(str(value).strip())


class EditingSession:
    """한 페이지에서 진행되는 여행 편집 세션."""

    def __init__(
        self,
        page: Page,
        client: TripServiceClient,
        lookup: LocationLookupClient | None = None,
    ) -> None:
        if page.places_widget_factory is None:
            page.places_widget_factory = PlaceAutocompleteWidget
        self.page = page
        self.client = client
        if lookup is None:
            lookup = LocationLookupClient(client, get_timeout_policy(get_settings()).lookup_timeout_seconds)
        self.lookup = lookup
        self.suppressor = SelectionSuppressor()
        self.store = TripStore(render=self.render, persist=client.save_trip)
        self.autocomplete = AutocompletePlaceBinder(page, lookup, self.suppressor)
        self.reorder = ReorderCoordinator(page)
        self.buttons = ButtonCoordinator(page)
        self.field_edit = FieldEditCoordinator(page, lookup, self.suppressor)
        self.api_key = ""
        self.trip_ids: list[str] = []
        self._started = False

    async def start(self) -> None:
        """설정과 여행 목록을 불러오고 페이지 단위 리스너를 붙입니다."""
        if self._started:
            return
        try:
            config = await self.client.fetch_config()
            self.api_key = str(config.get("googleMapsApiKey") or "")
            self.trip_ids = await self.client.fetch_trip_list()
        except TripServiceError as exc:
            logger.error("Editing session initialization failed: %s", exc)

        self._populate_selector()
        self._wire_page_controls()
        self.field_edit.bind(self.store)
        self._started = True

    def render(self, doc: TripDocument | None) -> None:
        """문서를 렌더링하고 요소 단위 바인딩을 다시 붙입니다."""
        if not self.page.mount(render_trip_html(doc, self.api_key)):
            return
        self.autocomplete.bind(doc, self.store)
        self.reorder.bind(doc, self.store)
        self.buttons.bind(doc, self.store)

    async def select_trip(self, trip_id: str) -> TripDocument | None:
        """저장된 여행을 불러와 현재 문서로 삼습니다."""
        if not trip_id or trip_id == NEW_TRIP_OPTION:
            return None
        try:
            doc = await self.client.fetch_trip(trip_id)
        except TripServiceError as exc:
            logger.error("Trip load failed: trip_id=%s error=%s", trip_id, exc)
            return None

        self.store.set(doc)
        self.render(doc)
        return doc

    async def create_trip(self, trip_name: str, start_date: date | str | None) -> TripDocument:
        """빈 여행을 만들어 저장하고 목록을 갱신합니다.

        Raises:
            ValueError: 이름이나 시작일이 비어 있거나 날짜 형식이 잘못된 경우.
        """
        name = (trip_name or "").strip()
        if not name:
            raise ValueError("여행 이름이 필요합니다.")
        doc = TripDocument.empty(name, _parse_start_date(start_date))

        self.store.set(doc)
        self.store.last_save_ok = await self.client.save_trip(doc)
        try:
            self.trip_ids = await self.client.fetch_trip_list()
        except TripServiceError as exc:
            logger.warning("Trip list refresh failed: %s", exc)
        self._populate_selector()
        self.render(doc)
        return doc

    async def rename_trip(self, trip_name: str) -> TripDocument | None:
        name = (trip_name or "").strip()
        if not name:
            raise ValueError("여행 이름이 필요합니다.")
        return await self.store.update(lambda doc: transforms.rename_trip(doc, name))

    async def change_start_date(self, start_date: date | str) -> TripDocument | None:
        parsed = _parse_start_date(start_date)
        return await self.store.update(lambda doc: transforms.change_start_date(doc, parsed))

    def _populate_selector(self) -> None:
        selector = self.page.query("#trip-selector")
        if selector is None:
            logger.warning("Trip selector not found")
            return
        selector.clear()
        options = [("", "Select a trip"), (NEW_TRIP_OPTION, "New Trip")]
        options.extend((trip_id, trip_id) for trip_id in self.trip_ids)
        for value, label in options:
            option = self.page.soup.new_tag("option", attrs={"value": value})
            option.string = label
            selector.append(option)

    def _wire_page_controls(self) -> None:
        add_day_button = self.page.query("#add-day-button")
        if add_day_button is None:
            logger.warning("Add day button not found")
        else:
            if "disabled" in add_day_button.attrs:
                del add_day_button["disabled"]
            self.page.add_listener(add_day_button, "click", self._on_add_day)

        selector = self.page.query("#trip-selector")
        if selector is not None:
            self.page.add_listener(selector, "change", self._on_trip_selected)

        create_button = self.page.query("#create-trip-button")
        if create_button is not None:
            self.page.add_listener(create_button, "click", self._on_create_trip)

    async def _on_add_day(self, event: DomEvent) -> None:
        await handle_add_day(self.store)

    async def _on_trip_selected(self, event: DomEvent) -> None:
        trip_id = str(event.detail.get("value") or "")
        if trip_id == NEW_TRIP_OPTION:
            self.store.set(None)
            self.render(None)
            return
        await self.select_trip(trip_id)

    async def _on_create_trip(self, event: DomEvent) -> None:
        name_input = self.page.query("#trip-name")
        date_input = self.page.query("#trip-start-date")
        name = str(name_input.get("value") or "") if name_input is not None else ""
        start = str(date_input.get("value") or "") if date_input is not None else ""
        try:
            await self.create_trip(name, start)
        except ValueError as exc:
            logger.warning("New trip rejected: %s", exc)
