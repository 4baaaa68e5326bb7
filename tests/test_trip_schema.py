"""여행 문서 스키마 테스트."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from app.client.transforms import add_day, attach_suggestions
from app.schemas.place import PlaceRef
from app.schemas.trip import Suggestions, TripDocument
from tests.mocks.sample_trip import make_trip


def test_new_day_payload_matches_wire_format() -> None:
    doc = add_day(TripDocument.empty("Paris Trip", date(2025, 6, 1)))

    assert doc.to_payload() == {
        "tripName": "Paris Trip",
        "startDate": "2025-06-01",
        "trip": [{"location": "", "wakeUpTime": "08:00", "lodging": {}, "activities": []}],
    }


def test_payload_excludes_suggestions() -> None:
    doc = attach_suggestions(
        make_trip(),
        0,
        Suggestions(restaurants=[PlaceRef(name="Septime", address="80 Rue de Charonne")], history="Old city"),
    )

    payload = doc.to_payload()

    assert doc.days[0].suggestions is not None
    assert all("suggestions" not in day for day in payload["trip"])
    assert payload["trip"][0]["lodging"] == {"name": "Hotel Lutetia", "roomType": "Double"}


def test_documents_are_immutable() -> None:
    doc = make_trip()

    with pytest.raises(ValidationError):
        doc.trip_name = "Other"
    with pytest.raises(ValidationError):
        doc.days[0].activities[0].length = 5


def test_loading_tolerates_unknown_keys_and_bad_values() -> None:
    doc = TripDocument.model_validate(
        {
            "tripName": "Rome",
            "startDate": "2025-07-01",
            "owner": "someone",
            "trip": [
                {
                    "location": None,
                    "lodging": None,
                    "activities": [{"name": "Forum", "length": "abc", "startTime": "9:00 AM"}],
                    "suggestions": {"restaurants": [], "sights": [], "history": "x"},
                }
            ],
        }
    )

    day = doc.days[0]
    assert day.location == ""
    assert day.wake_up_time == "08:00"
    assert day.activities[0].length == 0
    assert "startTime" not in doc.to_payload()["trip"][0]["activities"][0]
    assert doc.trip_id == "Rome_2025-07-01"


def test_place_ref_accepts_google_keys() -> None:
    place = PlaceRef.model_validate({"name": "Louvre", "formatted_address": "Rue de Rivoli", "place_id": "abc"})

    assert place.address == "Rue de Rivoli"
    assert place.to_wire() == {"name": "Louvre", "address": "Rue de Rivoli", "place_id": "abc"}
