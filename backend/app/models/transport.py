"""Transport option models - results of the external route finder."""

from enum import Enum

from pydantic import BaseModel, Field

from backend.app.models.common import Amount, Geo, WireModel


class MatchType(str, Enum):
    """How a transport option matched the requested corridor."""

    direct = "direct"
    nearby_stops = "nearby-stops"


class SearchMode(str, Enum):
    """Query shape sent to the route finder."""

    coordinates = "coordinates"
    names = "names"


class SearchState(str, Enum):
    """Lifecycle of a transport search as seen by the caller."""

    not_searched = "not_searched"
    searching = "searching"
    searched = "searched"
    failed = "failed"


class Operator(WireModel):
    """Transport operator."""

    name: str | None = None


class Pricing(WireModel):
    """Ticket price."""

    amount: Amount | None = None
    currency: str | None = None


class Schedule(WireModel):
    """Departure times, in service order."""

    departures: list[str] = Field(default_factory=list)


class BookingChannel(WireModel):
    """Where the traveler books: an online URL and/or phone numbers."""

    online_url: str | None = Field(None, alias="onlineUrl")
    phone_numbers: list[str] = Field(default_factory=list, alias="phoneNumbers")

    @property
    def phone_link(self) -> str | None:
        """``tel:`` link for the first phone number, if any."""
        if not self.phone_numbers:
            return None
        return f"tel:{self.phone_numbers[0]}"

    @property
    def target(self) -> str | None:
        """Preferred navigation target: online URL, else phone link."""
        return self.online_url or self.phone_link


class ServicedStop(WireModel):
    """Stop on a transport route nearest to a requested endpoint."""

    name: str | None = None


class TransportOption(WireModel):
    """A single transport option for a requested origin/destination."""

    id: str = Field(..., alias="_id")
    name: str | None = None
    type: str | None = None
    operator: Operator | None = None
    pricing: Pricing | None = None
    schedule: Schedule = Field(default_factory=Schedule)
    booking: BookingChannel = Field(default_factory=BookingChannel)
    match_type: MatchType = Field(MatchType.direct, alias="matchType")
    # Walking distances in km, present for nearby-stop matches
    distance_from_origin: float | None = Field(None, alias="distanceFromOrigin")
    distance_from_destination: float | None = Field(None, alias="distanceFromDestination")
    nearest_origin_stop: ServicedStop | None = Field(None, alias="nearestOriginStop")
    nearest_destination_stop: ServicedStop | None = Field(None, alias="nearestDestinationStop")
    is_reversed: bool = Field(False, alias="isReversed")
    original_route: str | None = Field(None, alias="originalRoute")
    match_score: float | None = Field(None, alias="matchScore")

    @property
    def operator_name(self) -> str | None:
        """Operator name, falling back to the transport type."""
        if self.operator and self.operator.name:
            return self.operator.name
        return self.type

    @property
    def origin_stop_name(self) -> str | None:
        """Serviced stop nearest the true origin."""
        return self.nearest_origin_stop.name if self.nearest_origin_stop else None

    @property
    def destination_stop_name(self) -> str | None:
        """Serviced stop nearest the true destination."""
        return self.nearest_destination_stop.name if self.nearest_destination_stop else None


class Endpoint(BaseModel):
    """Origin or destination of a transport search."""

    name: str | None = None
    geo: Geo | None = None

    @property
    def is_empty(self) -> bool:
        """True when neither a name nor coordinates are known."""
        return not (self.name and self.name.strip()) and self.geo is None


class TransportSearchResult(BaseModel):
    """Normalized, ranked option list for one search."""

    mode: SearchMode
    options: list[TransportOption] = Field(default_factory=list)

    @property
    def direct(self) -> list[TransportOption]:
        """Direct matches."""
        return [o for o in self.options if o.match_type == MatchType.direct]

    @property
    def nearby(self) -> list[TransportOption]:
        """Nearby-stop matches."""
        return [o for o in self.options if o.match_type == MatchType.nearby_stops]

    @property
    def is_empty(self) -> bool:
        """True when the search found nothing for this route."""
        return not self.options

    def summary(self) -> str:
        """One-line notice describing the outcome."""
        if self.is_empty:
            return "No transport found for this route"
        direct_count = len(self.direct)
        nearby_count = len(self.nearby)
        if self.mode == SearchMode.coordinates and direct_count > 0:
            extra = f" and {nearby_count} nearby option(s)" if nearby_count else ""
            return f"Found {direct_count} direct route(s){extra}"
        return f"Found {len(self.options)} transport option(s)"
