"""Google Places 텍스트 검색 서비스 테스트."""

from __future__ import annotations

import asyncio

import pytest
import requests

from app.services.google_places_service import GooglePlacesError, GooglePlacesService
from app.services.places_service import is_sight


class _Response:
    def __init__(self, status_code: int, body: dict | None = None) -> None:
        self.status_code = status_code
        self._body = body or {}
        self.text = ""

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"status {self.status_code}", response=self)

    def json(self) -> dict:
        return self._body


def _patch_post(monkeypatch, response: _Response, captured: dict) -> None:
    def _fake_post(self, url, json=None, headers=None, timeout=None):
        captured.update(url=url, json=json, headers=headers)
        return response

    monkeypatch.setattr("app.services.google_places_service.requests.Session.post", _fake_post)


def test_missing_api_key_raises() -> None:
    with pytest.raises(GooglePlacesError):
        GooglePlacesService(api_key="")


def test_search_maps_places_and_sends_field_mask(monkeypatch) -> None:
    captured: dict = {}
    body = {
        "places": [
            {"id": "p-1", "displayName": {"text": "Septime"}, "formattedAddress": "80 Rue de Charonne"},
            {"id": "p-2", "displayName": {}, "formattedAddress": "nameless"},
        ]
    }
    _patch_post(monkeypatch, _Response(200, body), captured)

    service = GooglePlacesService(api_key="test-key", page_size=5)
    places = asyncio.run(service.search("restaurants near Paris", "restaurant", "GooglePlaces"))

    assert [(place.name, place.external_id, place.source_label) for place in places] == [
        ("Septime", "p-1", "GooglePlaces")
    ]
    assert captured["url"] == "https://places.googleapis.com/v1/places:searchText"
    assert captured["json"] == {
        "textQuery": "restaurants near Paris",
        "pageSize": 5,
        "languageCode": "en",
        "includedType": "restaurant",
    }
    assert captured["headers"]["X-Goog-Api-Key"] == "test-key"
    assert "places.types" in captured["headers"]["X-Goog-FieldMask"]


def test_search_filters_by_place_types(monkeypatch) -> None:
    body = {
        "places": [
            {"id": "s-1", "displayName": {"text": "Louvre"}, "types": ["museum", "point_of_interest"]},
            {"id": "s-2", "displayName": {"text": "Café de Flore"}, "types": ["cafe", "point_of_interest"]},
        ]
    }
    _patch_post(monkeypatch, _Response(200, body), {})

    places = asyncio.run(GooglePlacesService(api_key="k").search("points of interest near Paris", accept_types=is_sight))

    assert [place.name for place in places] == ["Louvre"]


def test_http_error_returns_empty_list(monkeypatch) -> None:
    _patch_post(monkeypatch, _Response(403), {})

    assert asyncio.run(GooglePlacesService(api_key="k").search("restaurants near Paris")) == []


def test_blank_query_skips_request(monkeypatch) -> None:
    captured: dict = {}
    _patch_post(monkeypatch, _Response(200), captured)

    assert asyncio.run(GooglePlacesService(api_key="k").search("   ")) == []
    assert captured == {}
