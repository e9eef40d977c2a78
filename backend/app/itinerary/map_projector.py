"""Map projector: turns itinerary stops into markers, a route, and bounds.

Two modes, exactly one per call:

- day-grouped, when at least one day has stops: first marker is ``start``,
  last is ``end``, interior markers carry their day ordinal and are
  emphasized on the active day;
- flat-legacy otherwise: markers carry their stop category, no start/end.

Unresolvable stops produce neither a marker nor a route vertex.
"""

from collections.abc import Sequence

from backend.app.config import Settings, get_settings
from backend.app.itinerary.resolver import resolve_day, resolve_stop
from backend.app.models.common import StopKind
from backend.app.models.itinerary import Day
from backend.app.models.map import (
    FitBounds,
    LatLng,
    MapMarker,
    MapProjection,
    MarkerIcon,
    MarkerKind,
    PopupContent,
    RoutePolyline,
)
from backend.app.models.stops import ResolvedStop, StopBase

START_COLOR = "#10B981"
END_COLOR = "#EF4444"
ACTIVE_DAY_COLOR = "#3B82F6"
DAY_COLOR = "#8B5CF6"

ENDPOINT_SIZE = 40
ACTIVE_DAY_SIZE = 40
DAY_SIZE = 35
CATEGORY_SIZE = 30

CATEGORY_COLORS: dict[StopKind, str] = {
    StopKind.location: "#3b82f6",
    StopKind.hotel: "#10b981",
    StopKind.transport: "#f59e0b",
    StopKind.custom: "#8b5cf6",
}


def start_icon() -> MarkerIcon:
    """Icon for the first stop of the journey."""
    return MarkerIcon(kind=MarkerKind.start, color=START_COLOR, size=ENDPOINT_SIZE)


def end_icon() -> MarkerIcon:
    """Icon for the last stop of the journey."""
    return MarkerIcon(kind=MarkerKind.end, color=END_COLOR, size=ENDPOINT_SIZE)


def day_icon(day_number: int, active: bool) -> MarkerIcon:
    """Icon labelled with the day ordinal, larger and blue when active."""
    return MarkerIcon(
        kind=MarkerKind.day,
        label=str(day_number),
        color=ACTIVE_DAY_COLOR if active else DAY_COLOR,
        size=ACTIVE_DAY_SIZE if active else DAY_SIZE,
        emphasized=active,
    )


def category_icon(category: StopKind) -> MarkerIcon:
    """Icon coloured by stop category (flat mode)."""
    return MarkerIcon(
        kind=MarkerKind.category,
        label=category.value,
        color=CATEGORY_COLORS.get(category, CATEGORY_COLORS[StopKind.custom]),
        size=CATEGORY_SIZE,
    )


def _popup(
    resolved: ResolvedStop, stop: StopBase, day: Day | None, day_number: int | None
) -> PopupContent:
    return PopupContent(
        title=resolved.name,
        category=resolved.category,
        day_label=f"Day {day_number}" if day_number is not None else None,
        description=resolved.description,
        date=day.date if day is not None else None,
        time_of_day=stop.time_of_day,
        notes=stop.notes,
        estimated_cost=stop.estimated_cost,
    )


def _has_stops(days: Sequence[Day]) -> bool:
    return any(day.stops for day in days)


def _finish(
    mode: str, markers: list[MapMarker], settings: Settings
) -> MapProjection:
    positions: list[LatLng] = [m.position for m in markers]
    fit_bounds = None
    if positions:
        padding = settings.map_fit_padding_px
        fit_bounds = FitBounds(
            positions=positions,
            padding=(padding, padding),
            max_zoom=settings.map_max_zoom,
        )
    return MapProjection(
        mode=mode,
        markers=markers,
        route=RoutePolyline(positions=positions),
        fit_bounds=fit_bounds,
    )


def project_days(
    days: Sequence[Day],
    active_day: int | None = None,
    settings: Settings | None = None,
) -> MapProjection:
    """Project day-grouped stops.

    Args:
        days: Itinerary days in order
        active_day: 0-based index of the day to emphasize
        settings: Optional settings override

    Returns:
        MapProjection in ``days`` mode
    """
    settings = settings or get_settings()

    # Collect first so start/end can be assigned across all days
    collected: list[tuple[int, int, Day, StopBase, ResolvedStop]] = []
    for day_index, day in enumerate(days):
        for stop_index, resolved in resolve_day(day):
            collected.append((day_index, stop_index, day, day.stops[stop_index], resolved))

    markers: list[MapMarker] = []
    last = len(collected) - 1
    for position, (day_index, stop_index, day, stop, resolved) in enumerate(collected):
        day_number = day_index + 1
        if position == 0:
            icon = start_icon()
        elif position == last:
            icon = end_icon()
        else:
            icon = day_icon(day_number, active=active_day == day_index)

        markers.append(
            MapMarker(
                position=resolved.as_pair(),
                icon=icon,
                popup_content=_popup(resolved, stop, day, day_number),
                category=resolved.category,
                stop_index=stop_index,
                day_index=day_index,
                day_number=day_number,
            )
        )

    return _finish("days", markers, settings)


def project_stops(stops: Sequence[StopBase], settings: Settings | None = None) -> MapProjection:
    """Project a flat legacy stop list; markers are tagged by category."""
    settings = settings or get_settings()

    markers: list[MapMarker] = []
    for stop_index, stop in enumerate(stops):
        resolved = resolve_stop(stop)
        if resolved is None:
            continue
        markers.append(
            MapMarker(
                position=resolved.as_pair(),
                icon=category_icon(resolved.category),
                popup_content=_popup(resolved, stop, None, None),
                category=resolved.category,
                stop_index=stop_index,
            )
        )

    return _finish("flat", markers, settings)


def project_map(
    *,
    days: Sequence[Day] | None = None,
    stops: Sequence[StopBase] | None = None,
    active_day: int | None = None,
    settings: Settings | None = None,
) -> MapProjection:
    """Project an itinerary onto the map, choosing the mode.

    Day-grouped mode wins whenever at least one day has stops; otherwise the
    flat stop list is used.
    """
    if days is not None and _has_stops(days):
        return project_days(days, active_day=active_day, settings=settings)
    return project_stops(stops or [], settings=settings)
