"""여행 서비스 클라이언트 테스트 (저장 재시도 포함)."""

from __future__ import annotations

import asyncio

import pytest
import requests

from app.client.service_client import TripServiceClient, TripServiceError
from app.core.config import get_settings
from app.schemas.trip import Suggestions
from tests.mocks.sample_trip import make_trip


def _set_required_env(monkeypatch, **overrides: str) -> None:
    monkeypatch.setenv("TRIP_SERVICE_URL", "http://trips.test")
    for key, value in overrides.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()


class _Response:
    def __init__(self, status_code: int = 200, body: object = None) -> None:
        self.status_code = status_code
        self._body = body

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            response = requests.Response()
            response.status_code = self.status_code
            raise requests.HTTPError(f"status {self.status_code}", response=response)

    def json(self) -> object:
        if self._body is None:
            raise ValueError("no json body")
        return self._body


def test_save_trip_succeeds_after_retries(monkeypatch) -> None:
    _set_required_env(
        monkeypatch,
        SAVE_MAX_RETRIES="2",
        SAVE_BACKOFF_BASE_SECONDS="0.5",
        SAVE_BACKOFF_MAX_SECONDS="5",
    )

    calls: list[tuple] = []
    sleep_delays: list[float] = []

    def _fake_request(method, url, **kwargs):
        calls.append((method, url, kwargs["json"]))
        if len(calls) < 3:
            raise requests.ConnectionError("temporary network issue")
        return _Response(200)

    async def _fake_sleep(delay: float) -> None:
        sleep_delays.append(delay)

    monkeypatch.setattr("app.client.service_client.requests.request", _fake_request)
    monkeypatch.setattr("app.client.service_client.asyncio.sleep", _fake_sleep)

    result = asyncio.run(TripServiceClient.from_settings().save_trip(make_trip()))

    assert result is True
    assert len(calls) == 3
    assert calls[0][:2] == ("POST", "http://trips.test/saveTrip")
    assert calls[0][2]["tripName"] == "Paris Trip"
    assert sleep_delays == pytest.approx([0.5, 1.0])


def test_save_trip_retries_server_errors_then_gives_up(monkeypatch) -> None:
    _set_required_env(monkeypatch, SAVE_MAX_RETRIES="1")

    call_count = {"value": 0}

    def _fake_request(method, url, **kwargs):
        call_count["value"] += 1
        return _Response(503)

    async def _fake_sleep(delay: float) -> None:
        return None

    monkeypatch.setattr("app.client.service_client.requests.request", _fake_request)
    monkeypatch.setattr("app.client.service_client.asyncio.sleep", _fake_sleep)

    assert asyncio.run(TripServiceClient.from_settings().save_trip(make_trip())) is False
    assert call_count["value"] == 2


def test_save_trip_does_not_retry_non_retryable_4xx(monkeypatch) -> None:
    _set_required_env(monkeypatch, SAVE_MAX_RETRIES="3")

    call_count = {"value": 0}
    sleep_delays: list[float] = []

    def _fake_request(method, url, **kwargs):
        call_count["value"] += 1
        return _Response(400)

    async def _fake_sleep(delay: float) -> None:
        sleep_delays.append(delay)

    monkeypatch.setattr("app.client.service_client.requests.request", _fake_request)
    monkeypatch.setattr("app.client.service_client.asyncio.sleep", _fake_sleep)

    result = asyncio.run(TripServiceClient.from_settings().save_trip(make_trip()))

    assert result is False
    assert call_count["value"] == 1
    assert sleep_delays == []


def test_save_trip_accepts_non_json_success_body(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    monkeypatch.setattr("app.client.service_client.requests.request", lambda *args, **kwargs: _Response(200))

    assert asyncio.run(TripServiceClient.from_settings().save_trip(make_trip())) is True


def test_save_payload_excludes_suggestions(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    payloads: list[dict] = []

    def _fake_request(method, url, **kwargs):
        payloads.append(kwargs["json"])
        return _Response(200)

    monkeypatch.setattr("app.client.service_client.requests.request", _fake_request)
    doc = make_trip()
    with_suggestions = doc.model_copy(
        update={"days": [doc.days[0].model_copy(update={"suggestions": Suggestions(history="old")}), doc.days[1]]}
    )

    asyncio.run(TripServiceClient.from_settings().save_trip(with_suggestions))

    assert all("suggestions" not in day for day in payloads[0]["trip"])


def test_fetch_trip_parses_document(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    seen: dict = {}

    def _fake_request(method, url, **kwargs):
        seen.update(method=method, url=url, params=kwargs["params"])
        return _Response(200, make_trip().to_payload())

    monkeypatch.setattr("app.client.service_client.requests.request", _fake_request)

    doc = asyncio.run(TripServiceClient.from_settings().fetch_trip("Paris Trip_2025-06-01"))

    assert seen == {"method": "GET", "url": "http://trips.test/getTrip", "params": {"tripName": "Paris Trip_2025-06-01"}}
    assert doc == make_trip()


def test_fetch_errors_raise_trip_service_error(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    monkeypatch.setattr("app.client.service_client.requests.request", lambda *args, **kwargs: _Response(404))

    with pytest.raises(TripServiceError) as exc_info:
        asyncio.run(TripServiceClient.from_settings().fetch_trip("missing"))

    assert exc_info.value.status_code == 404


def test_lookup_helpers_read_response_envelopes(monkeypatch) -> None:
    _set_required_env(monkeypatch)
    bodies = {
        "/getDiningSuggestions": {"data": [{"name": "Septime", "address": "80 Rue", "source": "Michelin"}]},
        "/getSiteSuggestions": {"results": [{"name": "Louvre Museum"}]},
        "/getLocationHistory": {"title": "Paris", "extract": "Paris is the capital of France."},
    }

    def _fake_request(method, url, **kwargs):
        return _Response(200, bodies[url.removeprefix("http://trips.test")])

    monkeypatch.setattr("app.client.service_client.requests.request", _fake_request)
    client = TripServiceClient.from_settings()

    dining = asyncio.run(client.get_dining_suggestions("Paris"))
    sights = asyncio.run(client.get_site_suggestions("Paris"))
    history = asyncio.run(client.get_location_history("Paris"))

    assert [(place.name, place.source_label) for place in dining] == [("Septime", "Michelin")]
    assert [place.name for place in sights] == ["Louvre Museum"]
    assert history == "Paris is the capital of France."
