"""TripDocument 순수 변환 함수 테스트."""

from __future__ import annotations

import pytest

from app.client import transforms
from app.core.time_derivation import derive_start_times
from tests.mocks.sample_trip import make_trip


def _names(doc, day_index: int = 0) -> list[str]:
    return [activity.name for activity in doc.days[day_index].activities]


def test_delete_activity_keeps_other_activities_untouched() -> None:
    doc = make_trip()
    before = list(doc.days[0].activities)

    updated = transforms.delete_activity(doc, 0, 1)

    assert len(updated.days[0].activities) == len(before) - 1
    assert updated.days[0].activities == [before[0], before[2]]
    assert doc.days[0].activities == before


def test_reorder_activities_rederives_start_times() -> None:
    updated = transforms.reorder_activities(make_trip(), 0, [2, 0, 1])

    assert _names(updated) == ["Seine walk", "Louvre", "Lunch"]
    assert derive_start_times(updated.days[0]) == ["8:00 AM", "8:45 AM", "9:45 AM"]


def test_reorder_rejects_non_permutation() -> None:
    doc = make_trip()

    assert transforms.reorder_activities(doc, 0, [0, 0, 1]) is doc
    assert transforms.reorder_activities(doc, 0, [0, 1]) is doc


def test_set_lodging_field_keeps_other_lodging_fields() -> None:
    updated = transforms.set_field(make_trip(), 0, "lodging.phone", "+33 1 49 54 46 00")

    lodging = updated.days[0].lodging
    assert lodging.phone == "+33 1 49 54 46 00"
    assert lodging.name == "Hotel Lutetia"
    assert lodging.room_type == "Double"


def test_set_activity_length_is_coerced() -> None:
    updated = transforms.set_field(make_trip(), 0, "length", "abc", activity_index=0)

    assert updated.days[0].activities[0].length == 0
    assert derive_start_times(updated.days[0])[1] == "8:00 AM"


def test_set_unknown_field_raises() -> None:
    with pytest.raises(ValueError):
        transforms.set_field(make_trip(), 0, "lodging.stars", "5")
    with pytest.raises(ValueError):
        transforms.set_field(make_trip(), 0, "wakeUpTime", "09:00", activity_index=0)


def test_out_of_range_indices_leave_document_unchanged() -> None:
    doc = make_trip()

    assert transforms.set_field(doc, 5, "location", "Nice") is doc
    assert transforms.delete_day(doc, 9) is doc
    assert transforms.delete_activity(doc, 0, 3) is doc
    assert transforms.add_activity(doc, -1) is doc


def test_move_activity_between_days() -> None:
    updated = transforms.move_activities(make_trip(), 1, [(0, 1)])

    assert _names(updated, 0) == ["Louvre", "Seine walk"]
    assert _names(updated, 1) == ["Lunch"]


def test_move_activities_requires_every_target_activity() -> None:
    doc = transforms.move_activities(make_trip(), 1, [(0, 0)])
    assert _names(doc, 1) == ["Louvre"]

    assert transforms.move_activities(doc, 1, [(0, 0)]) is doc
    assert transforms.move_activities(doc, 1, [(1, 0), (0, 7)]) is doc


def test_place_partial_for_lodging_fills_contact_fields() -> None:
    place = {"name": "Le Bristol", "formatted_address": "112 Rue du Faubourg", "formatted_phone_number": "+33 1"}

    assert transforms.place_partial("lodging.name", place) == {
        "lodging.name": "Le Bristol",
        "lodging.address": "112 Rue du Faubourg",
        "lodging.phone": "+33 1",
    }
    assert transforms.place_partial("location", place, is_activity=True) == {"location": "Le Bristol"}
    assert transforms.place_partial("location", {"formatted_address": "Lyon, France"}) == {"location": "Lyon, France"}


def test_add_and_delete_days() -> None:
    doc = transforms.add_day(make_trip())
    assert len(doc.days) == 3
    assert doc.days[2].wake_up_time == "08:00"

    doc = transforms.delete_day(doc, 0)
    assert [day.location for day in doc.days] == ["Versailles", ""]


def test_add_activity_appends_blank_activity() -> None:
    doc = transforms.add_activity(make_trip(), 1)

    activity = doc.days[1].activities[0]
    assert (activity.name, activity.length, activity.location, activity.notes) == ("", 0, "", "")
