"""Common types and enums shared across all models."""

from decimal import Decimal
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Money values stay Decimal in Python and travel as JSON numbers.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class WireModel(BaseModel):
    """Base for payloads exchanged with the external itinerary API.

    Fields are declared snake_case with camelCase aliases; both spellings
    are accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Geo(BaseModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

    def as_pair(self) -> tuple[float, float]:
        """Return (lat, lng) as the map substrate expects."""
        return (self.lat, self.lng)


class StopKind(str, Enum):
    """Stop variant."""

    location = "location"
    hotel = "hotel"
    transport = "transport"
    custom = "custom"


class ItineraryStatus(str, Enum):
    """Trip lifecycle status."""

    planning = "planning"
    active = "active"
    completed = "completed"


class ExpenseCategory(str, Enum):
    """Expense category."""

    accommodation = "accommodation"
    transport = "transport"
    food = "food"
    activities = "activities"
    shopping = "shopping"
    other = "other"

    @property
    def label(self) -> str:
        """Display label, also the default expense description."""
        return self.value.capitalize()


class Permission(str, Enum):
    """Collaborator permission as stored on the itinerary."""

    view = "view"
    edit = "edit"
    comment = "comment"
    suggest = "suggest"


def ref_id(value: Any) -> str | None:
    """Extract an id from a bare reference or an expanded document.

    The external API returns references either as id strings or as populated
    objects carrying ``_id``/``id``.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value or None
    if isinstance(value, BaseModel):
        value = getattr(value, "id", None)
        return str(value) if value else None
    if isinstance(value, dict):
        raw = value.get("_id") or value.get("id")
        return str(raw) if raw else None
    return str(value)


def parse_wire_date(value: Any) -> Any:
    """Trim ISO datetimes (``2025-06-01T00:00:00.000Z``) down to the date part."""
    if isinstance(value, str) and len(value) > 10 and value[10] in ("T", " "):
        return value[:10]
    return value
