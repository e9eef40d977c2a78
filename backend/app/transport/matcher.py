"""Transport matcher: route search against the external route finder.

GPS search is preferred whenever both endpoints carry coordinates; otherwise
the search falls back to place names. The two query shapes return different
payloads and are normalized into one ranked list, direct matches first.
"""

import logging
import time
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from backend.app.client.api import ItineraryApiClient
from backend.app.errors import InputValidationError, RemoteServiceError
from backend.app.itinerary.resolver import resolve_day
from backend.app.models.common import Geo
from backend.app.models.itinerary import Day
from backend.app.models.transport import (
    BookingChannel,
    Endpoint,
    MatchType,
    SearchMode,
    SearchState,
    TransportOption,
    TransportSearchResult,
)
from backend.app.utils.metrics import PrometheusEngineMetrics

logger = logging.getLogger(__name__)


def validate_endpoints(origin: Endpoint, destination: Endpoint) -> SearchMode:
    """Check both endpoints and pick the query shape.

    Raises:
        InputValidationError: If an endpoint is missing, or a name search
            lacks a name on either side
    """
    if origin.is_empty or destination.is_empty:
        raise InputValidationError("From and To locations are required")

    if origin.geo is not None and destination.geo is not None:
        return SearchMode.coordinates

    if not (origin.name and origin.name.strip()) or not (
        destination.name and destination.name.strip()
    ):
        raise InputValidationError("From and To names are required without coordinates")
    return SearchMode.names


def coordinate_query(origin: Geo, destination: Geo) -> dict[str, Any]:
    """GPS query parameters for ``GET /transportation/find-routes``."""
    return {
        "fromLat": origin.lat,
        "fromLng": origin.lng,
        "toLat": destination.lat,
        "toLng": destination.lng,
    }


def name_query(origin: Endpoint, destination: Endpoint) -> dict[str, Any]:
    """Place-name query parameters, names trimmed."""
    return {"fromName": (origin.name or "").strip(), "toName": (destination.name or "").strip()}


def build_query(origin: Endpoint, destination: Endpoint) -> tuple[SearchMode, dict[str, Any]]:
    """Validate the endpoints and build the finder query for them.

    Raises:
        InputValidationError: As for ``validate_endpoints``
    """
    mode = validate_endpoints(origin, destination)
    if origin.geo is not None and destination.geo is not None:
        return mode, coordinate_query(origin.geo, destination.geo)
    return mode, name_query(origin, destination)


def _parse_bucket(entries: Any, match_type: MatchType) -> list[TransportOption]:
    if not isinstance(entries, list):
        return []

    options: list[TransportOption] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        try:
            options.append(
                TransportOption.model_validate({**entry, "matchType": match_type.value})
            )
        except ValidationError as e:
            logger.warning(
                "Skipping malformed transport option",
                extra={"structured": {"id": entry.get("_id"), "errors": e.error_count()}},
            )

    # Keep the finder's order unless every entry was scored
    if options and all(o.match_score is not None for o in options):
        options.sort(key=lambda o: o.match_score or 0.0)
    return options


def _dedupe(options: Iterable[TransportOption]) -> list[TransportOption]:
    seen: set[str] = set()
    unique: list[TransportOption] = []
    for option in options:
        if option.id in seen:
            continue
        seen.add(option.id)
        unique.append(option)
    return unique


def normalize_route_payload(payload: Any) -> list[TransportOption]:
    """Flatten either response shape into one list.

    ``{directRoutes, nearbyRoutes}`` yields direct matches then nearby ones;
    a bare list is treated as all direct. A route listed in both buckets
    stays direct.
    """
    if isinstance(payload, dict) and ("directRoutes" in payload or "nearbyRoutes" in payload):
        direct = _parse_bucket(payload.get("directRoutes"), MatchType.direct)
        nearby = _parse_bucket(payload.get("nearbyRoutes"), MatchType.nearby_stops)
        return _dedupe([*direct, *nearby])

    if isinstance(payload, list):
        return _dedupe(_parse_bucket(payload, MatchType.direct))

    if payload is not None:
        logger.warning(
            "Unrecognized route finder payload",
            extra={"structured": {"type": type(payload).__name__}},
        )
    return []


def day_transport_segment(day: Day) -> tuple[Endpoint, Endpoint] | None:
    """Origin and destination of a day: its first and last resolvable stops.

    Returns None when fewer than two stops resolve.
    """
    resolved = [stop for _, stop in resolve_day(day)]
    if len(resolved) < 2:
        return None

    first, last = resolved[0], resolved[-1]
    return (
        Endpoint(name=first.name, geo=Geo(lat=first.lat, lng=first.lng)),
        Endpoint(name=last.name, geo=Geo(lat=last.lat, lng=last.lng)),
    )


class TransportMatcher:
    """Searches transport options and records bookings."""

    def __init__(
        self,
        api: ItineraryApiClient,
        metrics: PrometheusEngineMetrics | None = None,
    ) -> None:
        self.api = api
        self.metrics = metrics or PrometheusEngineMetrics()

    async def find_routes(self, origin: Endpoint, destination: Endpoint) -> TransportSearchResult:
        """Search transport between two endpoints.

        Args:
            origin: Start of the segment
            destination: End of the segment

        Returns:
            TransportSearchResult; an empty option list is a valid outcome

        Raises:
            InputValidationError: If endpoints are missing (no request is sent)
            RemoteServiceError: If the route finder call fails
        """
        mode, params = build_query(origin, destination)

        start = time.perf_counter()
        try:
            payload = await self.api.find_routes(params)
        except RemoteServiceError:
            latency_ms = (time.perf_counter() - start) * 1000
            self.metrics.record_search(mode.value, "error", latency_ms)
            raise

        result = TransportSearchResult(mode=mode, options=normalize_route_payload(payload))
        latency_ms = (time.perf_counter() - start) * 1000
        self.metrics.record_search(mode.value, "empty" if result.is_empty else "success", latency_ms)
        self.metrics.inc_options(MatchType.direct.value, len(result.direct))
        self.metrics.inc_options(MatchType.nearby_stops.value, len(result.nearby))

        logger.info(
            result.summary(),
            extra={
                "structured": {
                    "mode": mode.value,
                    "direct": len(result.direct),
                    "nearby": len(result.nearby),
                }
            },
        )
        return result

    async def suggest_for_day(self, day: Day) -> TransportSearchResult | None:
        """Search transport for a day's first-to-last segment, if it has one."""
        segment = day_transport_segment(day)
        if segment is None:
            return None
        return await self.find_routes(*segment)

    async def record_booking(self, option: TransportOption) -> BookingChannel:
        """Notify the backend of a booking, best effort.

        Failure is logged and counted but never raised; the booking channel
        is returned either way so the caller can navigate to it.
        """
        try:
            await self.api.book_transport(option.id)
        except RemoteServiceError as e:
            reason = f"http_{e.status_code}" if e.status_code else "network"
            self.metrics.inc_booking_failure(reason)
            logger.warning(
                "Failed to track booking",
                extra={"structured": {"transport_id": option.id, "reason": reason}},
            )
        return option.booking


class TransportSearch:
    """Caller-side state of one search widget.

    Tracks ``not_searched`` / ``searching`` / ``searched`` / ``failed`` and
    drops results that arrive after a newer search started or after close().
    """

    def __init__(self, matcher: TransportMatcher) -> None:
        self.matcher = matcher
        self.state = SearchState.not_searched
        self.result: TransportSearchResult | None = None
        self.error: str | None = None
        self._generation = 0
        self._closed = False

    @property
    def options(self) -> list[TransportOption]:
        """Options of the last applied search; empty before or after failure."""
        return self.result.options if self.result else []

    async def run(self, origin: Endpoint, destination: Endpoint) -> TransportSearchResult | None:
        """Run a search and apply its outcome unless it went stale.

        Returns:
            The applied result, or None if rejected, failed, or discarded
        """
        try:
            validate_endpoints(origin, destination)
        except InputValidationError as e:
            self.error = str(e)
            return None

        self._generation += 1
        generation = self._generation
        self.state = SearchState.searching
        self.error = None

        try:
            result = await self.matcher.find_routes(origin, destination)
        except RemoteServiceError as e:
            if self._is_stale(generation):
                return None
            self.state = SearchState.failed
            self.result = None
            self.error = str(e) or "Failed to search transport"
            return None

        if self._is_stale(generation):
            return None
        self.state = SearchState.searched
        self.result = result
        return result

    def _is_stale(self, generation: int) -> bool:
        return self._closed or generation != self._generation

    def close(self) -> None:
        """Stop applying results; in-flight requests finish unobserved."""
        self._closed = True
