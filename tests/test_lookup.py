"""지역 조회 클라이언트 테스트."""

from __future__ import annotations

import asyncio

from app.client.lookup import LocationLookupClient
from app.schemas.trip import Suggestions
from tests.mocks.sample_trip import FakeLookupBackend


def test_empty_location_skips_network() -> None:
    backend = FakeLookupBackend()
    client = LocationLookupClient(backend)

    assert asyncio.run(client.fetch("")) == Suggestions(restaurants=[], sights=[], history="")
    assert asyncio.run(client.fetch("   ")) == Suggestions.empty()
    assert asyncio.run(client.fetch(None)) == Suggestions.empty()
    assert backend.calls == []


def test_fetch_combines_three_lookups() -> None:
    backend = FakeLookupBackend()
    client = LocationLookupClient(backend)

    result = asyncio.run(client.fetch("Lyon"))

    assert [place.name for place in result.restaurants] == ["Bistro Lyon"]
    assert [place.name for place in result.sights] == ["Lyon Museum"]
    assert result.history == "Lyon has a long history."
    assert sorted(kind for kind, _ in backend.calls) == ["dining", "history", "sights"]


def test_results_are_memoized_per_location() -> None:
    async def _run(client: LocationLookupClient) -> None:
        await asyncio.gather(client.fetch("Lyon"), client.fetch("Lyon"))
        await client.fetch("Lyon")
        await client.fetch("lyon")

    backend = FakeLookupBackend(delay=0.01)
    asyncio.run(_run(LocationLookupClient(backend)))

    assert len(backend.calls) == 6
    assert {location for _, location in backend.calls} == {"Lyon", "lyon"}


def test_clear_forgets_memoized_results() -> None:
    async def _run() -> FakeLookupBackend:
        backend = FakeLookupBackend()
        client = LocationLookupClient(backend)
        await client.fetch("Nice")
        client.clear()
        await client.fetch("Nice")
        return backend

    assert len(asyncio.run(_run()).calls) == 6


def test_failed_lookup_degrades_only_its_field() -> None:
    backend = FakeLookupBackend(fail={"sights"})

    result = asyncio.run(LocationLookupClient(backend).fetch("Lyon"))

    assert result.sights == []
    assert result.restaurants
    assert result.history == "Lyon has a long history."


def test_slow_lookups_time_out_to_empty_fields() -> None:
    backend = FakeLookupBackend(delay=0.5)

    result = asyncio.run(LocationLookupClient(backend, timeout_seconds=0.05).fetch("Lyon"))

    assert result == Suggestions.empty()
