"""여행 문서 렌더러 테스트."""

from __future__ import annotations

from bs4 import BeautifulSoup

from app.client.renderer import map_embed_url, render_shell, render_trip_html
from app.client.transforms import attach_suggestions, set_field
from app.schemas.place import PlaceRef
from app.schemas.trip import Suggestions
from tests.mocks.sample_trip import make_trip


def _soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def test_render_is_deterministic() -> None:
    doc = make_trip()

    assert render_trip_html(doc) == render_trip_html(make_trip())


def test_render_none_returns_empty_markup() -> None:
    assert render_trip_html(None) == ""


def test_every_editable_field_carries_address_metadata() -> None:
    soup = _soup(render_trip_html(make_trip()))

    fields = soup.select("[data-field]")
    assert fields
    for element in fields:
        assert element.has_attr("data-day-index")

    activity_names = soup.select('[data-activity-index][data-field="name"]')
    assert [element["value"] for element in activity_names] == ["Louvre", "Lunch", "Seine walk"]
    assert [element["data-activity-index"] for element in activity_names] == ["0", "1", "2"]

    notes = soup.select_one('textarea[data-day-index="0"][data-activity-index="1"][data-field="notes"]')
    assert notes.get_text() == "book ahead"

    room = soup.select_one('input[data-day-index="0"][data-field="lodging.roomType"]')
    assert room["value"] == "Double"
    assert not room.has_attr("data-activity-index")


def test_element_ids_are_unique_and_derived_from_address() -> None:
    soup = _soup(render_trip_html(make_trip()))

    ids = [element["id"] for element in soup.select("[data-field]")]
    assert len(ids) == len(set(ids))
    assert "field-0-a2-name" in ids
    assert "field-1-day-lodging-name" in ids


def test_activity_headings_show_derived_start_times() -> None:
    soup = _soup(render_trip_html(make_trip()))

    headings = [element.get_text(strip=True) for element in soup.select(".activity-heading")]
    assert headings == ["8:00 AM Louvre", "9:00 AM Lunch", "10:30 AM Seine walk"]


def test_day_headings_use_trip_start_date() -> None:
    soup = _soup(render_trip_html(make_trip()))

    headings = [element.get_text(strip=True) for element in soup.select(".day-entry.card h3")]
    assert headings == ["Sunday, June 1st 2025", "Monday, June 2nd 2025"]
    assert soup.select_one(".trip-header").get_text(strip=True) == "Paris Trip"


def test_place_search_inputs_are_marked() -> None:
    soup = _soup(render_trip_html(make_trip()))

    marked = soup.select('input[data-autocomplete="place"]')
    assert len(marked) == 7
    assert {element["data-field"] for element in marked} == {"location", "lodging.name"}


def test_user_text_is_escaped() -> None:
    doc = set_field(make_trip(), 0, "name", "<script>alert(1)</script>", activity_index=0)

    soup = _soup(render_trip_html(doc))

    assert soup.find("script") is None
    assert "<script>alert(1)</script>" in soup.select_one(".activity-heading").get_text()


def test_suggestions_block_is_rendered_only_when_present() -> None:
    doc = make_trip()
    assert _soup(render_trip_html(doc)).select(".suggestions") == []

    doc = attach_suggestions(
        doc,
        0,
        Suggestions(
            restaurants=[PlaceRef(name="Septime", address="80 Rue de Charonne")],
            sights=[],
            history="Paris was founded on the Île de la Cité.",
        ),
    )
    soup = _soup(render_trip_html(doc, api_key="test-key"))

    block = soup.select_one('.suggestions[data-day-index="0"]')
    assert "Septime - 80 Rue de Charonne" in block.select_one(".restaurant-suggestions").get_text()
    assert "No sight suggestions." in block.select_one(".sight-suggestions").get_text()
    assert block.select_one(".location-history").get_text() == "Paris was founded on the Île de la Cité."
    assert block.select_one("iframe")["src"] == map_embed_url("Paris", "test-key")


def test_map_embed_url_requires_key_and_location() -> None:
    assert map_embed_url("Paris", "") == ""
    assert map_embed_url("", "key") == ""
    assert map_embed_url("New York, NY", "key").endswith("key=key&q=New+York%2C+NY")


def test_render_shell_lists_trips_and_disables_add_day() -> None:
    soup = _soup(render_shell(["Paris Trip_2025-06-01"]))

    options = [option["value"] for option in soup.select("#trip-selector option")]
    assert options == ["", "new", "Paris Trip_2025-06-01"]
    assert soup.select_one("#add-day-button").has_attr("disabled")
    assert soup.select_one("#trip-output") is not None
