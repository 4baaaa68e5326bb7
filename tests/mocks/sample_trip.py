"""테스트용 여행 문서와 조회 백엔드."""

from __future__ import annotations

import asyncio

from app.schemas.place import PlaceRef
from app.schemas.trip import TripDocument


def make_trip(days: list[dict] | None = None, trip_name: str = "Paris Trip", start_date: str = "2025-06-01") -> TripDocument:
    if days is None:
        days = [
            {
                "location": "Paris",
                "wakeUpTime": "08:00",
                "lodging": {"name": "Hotel Lutetia", "roomType": "Double"},
                "activities": [
                    {"name": "Louvre", "length": 60, "location": "Rue de Rivoli", "notes": ""},
                    {"name": "Lunch", "length": 90, "location": "Le Comptoir", "notes": "book ahead"},
                    {"name": "Seine walk", "length": 45, "location": "Quai", "notes": ""},
                ],
            },
            {"location": "Versailles", "wakeUpTime": "07:30", "lodging": {}, "activities": []},
        ]
    return TripDocument.model_validate({"tripName": trip_name, "startDate": start_date, "trip": days})


class FakeLookupBackend:
    """조회 호출 횟수를 기록하는 가짜 서비스 백엔드."""

    def __init__(self, *, fail: set[str] | None = None, delay: float = 0.0) -> None:
        self.fail = fail or set()
        self.delay = delay
        self.calls: list[tuple[str, str]] = []

    async def _call(self, kind: str, location: str) -> None:
        self.calls.append((kind, location))
        if self.delay:
            await asyncio.sleep(self.delay)
        if kind in self.fail:
            raise RuntimeError(f"{kind} failed")

    async def get_dining_suggestions(self, location: str) -> list[PlaceRef]:
        await self._call("dining", location)
        return [PlaceRef(name=f"Bistro {location}", address=f"1 Main St, {location}", source_label="GooglePlaces")]

    async def get_site_suggestions(self, location: str) -> list[PlaceRef]:
        await self._call("sights", location)
        return [PlaceRef(name=f"{location} Museum", address=location)]

    async def get_location_history(self, location: str) -> str:
        await self._call("history", location)
        return f"{location} has a long history."
