"""Stop coordinate resolver: normalizes any stop into a ResolvedStop.

Sources are tried in strict priority order and the first one that yields a
finite coordinate pair wins:

1. referenced location document
2. referenced hotel document
3. custom inline coordinates
4. legacy flat ``{lat, lng}`` point

A stop with no usable source resolves to ``None``. Callers skip such stops;
nothing here raises on bad data.
"""

import math
from collections.abc import Callable, Iterator
from typing import Any

from backend.app.models.common import StopKind
from backend.app.models.itinerary import Day
from backend.app.models.stops import PlaceRef, RawCoordinates, ResolvedStop, StopBase

UNNAMED_STOP = "Unnamed Stop"
CUSTOM_STOP = "Custom Stop"


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def finite_pair(coords: RawCoordinates | None) -> tuple[float, float] | None:
    """Return (lat, lng) when both parts are finite and in WGS84 range."""
    if coords is None:
        return None
    lat = _to_float(coords.lat)
    lng = _to_float(coords.lng)
    if lat is None or lng is None:
        return None
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return (lat, lng)


def _from_reference(
    ref: str | PlaceRef | None, category: StopKind, stop: StopBase
) -> ResolvedStop | None:
    # Bare ids have not been populated yet, so they carry no coordinates
    if not isinstance(ref, PlaceRef):
        return None
    pair = finite_pair(ref.coordinates)
    if pair is None:
        return None
    return ResolvedStop(
        lat=pair[0],
        lng=pair[1],
        name=ref.name or stop.name or UNNAMED_STOP,
        description=ref.description,
        category=category,
    )


def resolve_from_location(stop: StopBase) -> ResolvedStop | None:
    """Resolve via the referenced location document."""
    return _from_reference(stop.location, StopKind.location, stop)


def resolve_from_hotel(stop: StopBase) -> ResolvedStop | None:
    """Resolve via the referenced hotel document."""
    return _from_reference(stop.hotel, StopKind.hotel, stop)


def resolve_from_custom(stop: StopBase) -> ResolvedStop | None:
    """Resolve via inline custom coordinates."""
    pair = finite_pair(stop.custom_coordinates)
    if pair is None:
        return None
    return ResolvedStop(
        lat=pair[0],
        lng=pair[1],
        name=stop.custom_name or CUSTOM_STOP,
        description=stop.custom_description or stop.notes,
        category=StopKind.custom,
    )


def resolve_from_legacy(stop: StopBase) -> ResolvedStop | None:
    """Resolve via the legacy flat point written by older planner pages."""
    pair = finite_pair(stop.coordinates)
    if pair is None:
        return None
    name = stop.name or stop.custom_name
    if not name:
        for ref in (stop.location, stop.hotel, stop.transport):
            if isinstance(ref, PlaceRef) and ref.name:
                name = ref.name
                break
    return ResolvedStop(
        lat=pair[0],
        lng=pair[1],
        name=name or UNNAMED_STOP,
        description=stop.custom_description or stop.notes,
        category=StopKind(getattr(stop, "type", StopKind.custom)),
    )


SOURCE_RESOLVERS: tuple[Callable[[StopBase], ResolvedStop | None], ...] = (
    resolve_from_location,
    resolve_from_hotel,
    resolve_from_custom,
    resolve_from_legacy,
)


def resolve_stop(stop: StopBase) -> ResolvedStop | None:
    """Resolve a stop to coordinates and display fields.

    Args:
        stop: Any stop variant

    Returns:
        ResolvedStop from the highest-priority usable source, or None
    """
    for resolver in SOURCE_RESOLVERS:
        resolved = resolver(stop)
        if resolved is not None:
            return resolved
    return None


def resolve_day(day: Day) -> Iterator[tuple[int, ResolvedStop]]:
    """Yield (stop_index, resolved) for each resolvable stop of a day, in order."""
    for stop_index, stop in enumerate(day.stops):
        resolved = resolve_stop(stop)
        if resolved is not None:
            yield stop_index, resolved
