"""Stop models - tagged union over the four stop variants."""

from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, Field

from backend.app.models.common import Amount, StopKind, WireModel


class RawCoordinates(WireModel):
    """Unvalidated coordinate pair as stored upstream.

    Referenced places and custom stops use ``{latitude, longitude}``; the
    legacy flat point uses ``{lat, lng}``. Both spellings are accepted and
    values may arrive as numbers or numeric strings.
    """

    lat: float | str | None = Field(
        None, validation_alias=AliasChoices("lat", "latitude"), serialization_alias="latitude"
    )
    lng: float | str | None = Field(
        None, validation_alias=AliasChoices("lng", "longitude"), serialization_alias="longitude"
    )


class PlaceRef(WireModel):
    """Populated location/hotel/transport document referenced by a stop."""

    id: str | None = Field(None, alias="_id")
    name: str | None = None
    description: str | None = None
    coordinates: RawCoordinates | None = None


# A reference is either a bare id (not yet populated) or the populated document.
Reference = str | PlaceRef


class StopBase(WireModel):
    """Fields shared by every stop variant."""

    order: int | None = None
    time_of_day: str | None = Field(
        None,
        validation_alias=AliasChoices("timeOfDay", "time", "time_of_day"),
        serialization_alias="timeOfDay",
    )
    notes: str | None = None
    estimated_cost: Amount | None = Field(None, alias="estimatedCost")

    location: Reference | None = Field(None, alias="locationId")
    hotel: Reference | None = Field(None, alias="hotelId")
    transport: Reference | None = Field(None, alias="transportId")

    custom_name: str | None = Field(None, alias="customName")
    custom_description: str | None = Field(None, alias="customDescription")
    custom_coordinates: RawCoordinates | None = Field(None, alias="customCoordinates")

    # Legacy flat point and display name written by older planner pages
    coordinates: RawCoordinates | None = None
    name: str | None = None


class LocationStop(StopBase):
    """Stop at a curated location."""

    type: Literal["location"] = "location"


class HotelStop(StopBase):
    """Stop at a hotel."""

    type: Literal["hotel"] = "hotel"


class TransportStop(StopBase):
    """Stop at a transport service."""

    type: Literal["transport"] = "transport"


class CustomStop(StopBase):
    """Ad-hoc stop with inline name and coordinates."""

    type: Literal["custom"] = "custom"


Stop = Annotated[
    LocationStop | HotelStop | TransportStop | CustomStop,
    Field(discriminator="type"),
]


def infer_stop_type(raw: dict[str, Any]) -> str:
    """Infer the variant tag of an untagged stop from its references."""
    for key, kind in (
        ("locationId", StopKind.location),
        ("hotelId", StopKind.hotel),
        ("transportId", StopKind.transport),
    ):
        if raw.get(key) or raw.get(kind.value):
            return kind.value
    return StopKind.custom.value


def tag_stop_payloads(value: Any) -> Any:
    """Fill in ``type`` on raw stop dicts so the discriminated union can dispatch."""
    if not isinstance(value, list):
        return value
    tagged = []
    for item in value:
        if isinstance(item, dict) and not item.get("type"):
            item = {**item, "type": infer_stop_type(item)}
        tagged.append(item)
    return tagged


class ResolvedStop(BaseModel):
    """A stop normalized to one coordinate/display model."""

    lat: float
    lng: float
    name: str
    description: str | None = None
    category: StopKind

    def as_pair(self) -> tuple[float, float]:
        """Return (lat, lng)."""
        return (self.lat, self.lng)
