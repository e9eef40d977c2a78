"""Tests for stop coordinate resolution."""

from typing import Any

import pytest
from pydantic import TypeAdapter

from backend.app.itinerary.resolver import finite_pair, resolve_day, resolve_stop
from backend.app.models.common import StopKind
from backend.app.models.itinerary import Day
from backend.app.models.stops import CustomStop, HotelStop, LocationStop, RawCoordinates, Stop

stop_adapter: TypeAdapter[Any] = TypeAdapter(Stop)


def place(name: str, lat: Any, lng: Any) -> dict[str, Any]:
    return {"_id": f"{name}-id", "name": name, "coordinates": {"latitude": lat, "longitude": lng}}


def test_location_beats_every_other_source() -> None:
    """All four sources populated: the location reference wins."""
    stop = stop_adapter.validate_python(
        {
            "type": "location",
            "locationId": place("Museum", 1.0, 2.0),
            "hotelId": place("Hotel", 3.0, 4.0),
            "customCoordinates": {"latitude": 5.0, "longitude": 6.0},
            "coordinates": {"lat": 7.0, "lng": 8.0},
        }
    )

    resolved = resolve_stop(stop)

    assert resolved is not None
    assert resolved.as_pair() == (1.0, 2.0)
    assert resolved.name == "Museum"
    assert resolved.category == StopKind.location


def test_hotel_beats_custom_and_legacy() -> None:
    stop = HotelStop(
        hotel=place("Hotel", 3.0, 4.0),
        custom_coordinates=RawCoordinates(lat=5.0, lng=6.0),
        coordinates=RawCoordinates(lat=7.0, lng=8.0),
    )

    resolved = resolve_stop(stop)

    assert resolved is not None
    assert resolved.as_pair() == (3.0, 4.0)
    assert resolved.category == StopKind.hotel


def test_custom_beats_legacy() -> None:
    stop = CustomStop(
        custom_name="Viewpoint",
        custom_coordinates=RawCoordinates(lat=5.0, lng=6.0),
        coordinates=RawCoordinates(lat=7.0, lng=8.0),
    )

    resolved = resolve_stop(stop)

    assert resolved is not None
    assert resolved.as_pair() == (5.0, 6.0)
    assert resolved.name == "Viewpoint"
    assert resolved.category == StopKind.custom


def test_legacy_point_used_last() -> None:
    stop = stop_adapter.validate_python(
        {"type": "location", "name": "Old Pin", "coordinates": {"lat": "7.5", "lng": "8.5"}}
    )

    resolved = resolve_stop(stop)

    assert resolved is not None
    assert resolved.as_pair() == (7.5, 8.5)
    assert resolved.name == "Old Pin"
    assert resolved.category == StopKind.location


def test_unpopulated_reference_falls_through() -> None:
    """A bare id string carries no coordinates, so the next source is used."""
    stop = LocationStop(
        location="loc-123",
        custom_coordinates=RawCoordinates(lat=5.0, lng=6.0),
    )

    resolved = resolve_stop(stop)

    assert resolved is not None
    assert resolved.category == StopKind.custom


def test_reference_without_coordinates_falls_through() -> None:
    stop = stop_adapter.validate_python(
        {
            "type": "location",
            "locationId": {"_id": "loc-1", "name": "Nowhere"},
            "hotelId": place("Hotel", 3.0, 4.0),
        }
    )

    resolved = resolve_stop(stop)

    assert resolved is not None
    assert resolved.category == StopKind.hotel


def test_unresolvable_stop_returns_none() -> None:
    stop = CustomStop(custom_name="Somewhere", notes="no pin yet")

    assert resolve_stop(stop) is None


def test_custom_stop_defaults() -> None:
    stop = CustomStop(custom_coordinates=RawCoordinates(lat=1, lng=1), notes="Bring water")

    resolved = resolve_stop(stop)

    assert resolved is not None
    assert resolved.name == "Custom Stop"
    assert resolved.description == "Bring water"


@pytest.mark.parametrize(
    "lat,lng",
    [
        (None, 1.0),
        ("abc", 1.0),
        (float("nan"), 1.0),
        (1.0, float("inf")),
        (91.0, 0.0),
        (0.0, -181.0),
    ],
)
def test_finite_pair_rejects_unusable_values(lat: Any, lng: Any) -> None:
    assert finite_pair(RawCoordinates(lat=lat, lng=lng)) is None


def test_untyped_stop_gets_tag_from_reference() -> None:
    day = Day.model_validate(
        {
            "stops": [
                {"hotelId": place("Inn", 10.0, 20.0)},
                {"customName": "Market", "customCoordinates": {"latitude": 11, "longitude": 21}},
            ]
        }
    )

    assert isinstance(day.stops[0], HotelStop)
    assert isinstance(day.stops[1], CustomStop)


def test_resolve_day_skips_unresolvable_but_keeps_indexes() -> None:
    day = Day.model_validate(
        {
            "stops": [
                {"type": "custom", "customCoordinates": {"latitude": 1, "longitude": 1}},
                {"type": "custom", "customName": "No pin"},
                {"type": "custom", "customCoordinates": {"latitude": 2, "longitude": 2}},
            ]
        }
    )

    indexes = [index for index, _ in resolve_day(day)]

    assert indexes == [0, 2]
