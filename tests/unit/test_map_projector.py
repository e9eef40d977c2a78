"""Tests for the map projector."""

from typing import Any

from backend.app.config import Settings
from backend.app.itinerary.map_projector import (
    ACTIVE_DAY_COLOR,
    CATEGORY_COLORS,
    DAY_COLOR,
    END_COLOR,
    START_COLOR,
    project_map,
)
from backend.app.models.common import StopKind
from backend.app.models.itinerary import Day
from backend.app.models.map import MarkerKind
from backend.app.models.stops import CustomStop, HotelStop, RawCoordinates


def custom(lat: float, lng: float, name: str = "Spot") -> dict[str, Any]:
    return {"type": "custom", "customName": name, "customCoordinates": {"latitude": lat, "longitude": lng}}


def make_days(*stop_lists: list[dict[str, Any]]) -> list[Day]:
    return [Day.model_validate({"stops": stops}) for stops in stop_lists]


def test_hotel_then_custom_yields_two_vertex_route_in_order() -> None:
    days = make_days(
        [
            {
                "type": "hotel",
                "hotelId": {"_id": "h1", "name": "Harbor", "coordinates": {"latitude": 40.0, "longitude": -74.0}},
            },
            custom(40.1, -74.1, "Pier"),
        ]
    )

    projection = project_map(days=days)

    assert projection.mode == "days"
    assert projection.route.positions == [(40.0, -74.0), (40.1, -74.1)]
    assert projection.route.drawable
    assert [m.icon.kind for m in projection.markers] == [MarkerKind.start, MarkerKind.end]
    assert projection.markers[0].icon.color == START_COLOR
    assert projection.markers[1].icon.color == END_COLOR


def test_interior_markers_carry_day_ordinal_and_active_emphasis() -> None:
    days = make_days(
        [custom(1, 1), custom(1.1, 1.1)],
        [custom(2, 2), custom(2.1, 2.1)],
    )

    projection = project_map(days=days, active_day=1)

    kinds = [m.icon.kind for m in projection.markers]
    assert kinds == [MarkerKind.start, MarkerKind.day, MarkerKind.day, MarkerKind.end]

    day_one_marker, day_two_marker = projection.markers[1], projection.markers[2]
    assert day_one_marker.icon.label == "1"
    assert day_one_marker.icon.color == DAY_COLOR
    assert not day_one_marker.icon.emphasized
    assert day_two_marker.icon.label == "2"
    assert day_two_marker.icon.color == ACTIVE_DAY_COLOR
    assert day_two_marker.icon.emphasized
    assert day_two_marker.icon.size > day_one_marker.icon.size


def test_unresolvable_stops_are_skipped_without_breaking_route() -> None:
    days = make_days(
        [custom(1, 1), {"type": "custom", "customName": "No pin"}],
        [],
        [custom(3, 3)],
    )

    projection = project_map(days=days)

    assert projection.route.positions == [(1.0, 1.0), (3.0, 3.0)]
    assert projection.markers[1].selection == (2, 0)


def test_single_marker_is_start() -> None:
    projection = project_map(days=make_days([custom(1, 1)]))

    assert len(projection.markers) == 1
    assert projection.markers[0].icon.kind == MarkerKind.start
    assert not projection.route.drawable


def test_flat_mode_tags_markers_by_category() -> None:
    stops = [
        HotelStop(coordinates=RawCoordinates(lat=1, lng=1), name="Inn"),
        CustomStop(custom_coordinates=RawCoordinates(lat=2, lng=2)),
    ]

    projection = project_map(stops=stops)

    assert projection.mode == "flat"
    assert [m.icon.kind for m in projection.markers] == [MarkerKind.category, MarkerKind.category]
    assert projection.markers[0].icon.color == CATEGORY_COLORS[StopKind.hotel]
    assert projection.markers[1].icon.color == CATEGORY_COLORS[StopKind.custom]
    assert projection.markers[1].selection == (None, 1)


def test_days_take_precedence_over_flat_stops() -> None:
    projection = project_map(
        days=make_days([custom(1, 1)]),
        stops=[CustomStop(custom_coordinates=RawCoordinates(lat=9, lng=9))],
    )

    assert projection.mode == "days"
    assert projection.route.positions == [(1.0, 1.0)]


def test_days_without_stops_fall_back_to_flat_list() -> None:
    projection = project_map(
        days=make_days([], []),
        stops=[CustomStop(custom_coordinates=RawCoordinates(lat=9, lng=9))],
    )

    assert projection.mode == "flat"
    assert len(projection.markers) == 1


def test_nothing_resolvable_is_empty_not_error() -> None:
    projection = project_map(days=make_days([{"type": "custom", "customName": "No pin"}]))

    assert projection.empty
    assert projection.fit_bounds is None
    assert projection.route.positions == []


def test_fit_bounds_uses_settings() -> None:
    settings = Settings(map_fit_padding_px=20, map_max_zoom=10)

    projection = project_map(days=make_days([custom(1, 2), custom(3, 4)]), settings=settings)

    assert projection.fit_bounds is not None
    assert projection.fit_bounds.padding == (20, 20)
    assert projection.fit_bounds.max_zoom == 10
    assert projection.fit_bounds.bbox == (1.0, 2.0, 3.0, 4.0)


def test_popup_content_describes_stop() -> None:
    days = [
        Day.model_validate(
            {
                "date": "2025-06-01",
                "stops": [
                    {**custom(1, 1, "Cafe"), "timeOfDay": "08:30", "notes": "Try the pastries"},
                ],
            }
        )
    ]

    marker = project_map(days=days).marker_at(0, 0)

    assert marker is not None
    assert marker.popup_content.title == "Cafe"
    assert marker.popup_content.day_label == "Day 1"
    assert marker.popup_content.time_of_day == "08:30"
    assert marker.popup_content.notes == "Try the pastries"
    assert marker.popup_content.date is not None


def test_marker_serializes_for_map_substrate() -> None:
    projection = project_map(days=make_days([custom(1, 1), custom(2, 2)]))

    data = projection.model_dump(mode="json", by_alias=True)

    assert data["markers"][0]["position"] == [1.0, 1.0]
    assert "popupContent" in data["markers"][0]
    assert data["route"]["dashArray"] == "10, 10"
    assert data["fit_bounds"]["maxZoom"] == 13
