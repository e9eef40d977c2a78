"""Map projection models - declarative descriptors for a map substrate.

Nothing here builds HTML; a renderer turns ``MarkerIcon`` into whatever
visual it uses.
"""

import datetime as dt
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

from backend.app.models.common import Amount, StopKind

LatLng = tuple[float, float]


class MarkerKind(str, Enum):
    """Marker iconography."""

    start = "start"
    end = "end"
    day = "day"
    category = "category"


class MarkerIcon(BaseModel):
    """Icon descriptor."""

    kind: MarkerKind
    color: str
    size: int
    label: str | None = None
    emphasized: bool = False


class PopupContent(BaseModel):
    """Structured popup body for a marker."""

    title: str
    category: StopKind
    day_label: str | None = None
    description: str | None = None
    date: dt.date | None = None
    time_of_day: str | None = None
    notes: str | None = None
    estimated_cost: Amount | None = None


class MapMarker(BaseModel):
    """One marker on the map."""

    position: LatLng
    icon: MarkerIcon
    popup_content: PopupContent = Field(..., serialization_alias="popupContent")
    category: StopKind
    stop_index: int
    day_index: int | None = None
    day_number: int | None = None

    @property
    def selection(self) -> tuple[int | None, int]:
        """What a click on this marker selects: (day_index, stop_index)."""
        return (self.day_index, self.stop_index)


class RoutePolyline(BaseModel):
    """Route line through resolved stops in traversal order."""

    positions: list[LatLng] = Field(default_factory=list)
    color: str = "#3B82F6"
    weight: int = 3
    opacity: float = 0.7
    dash_array: str = Field("10, 10", serialization_alias="dashArray")

    @property
    def drawable(self) -> bool:
        """A line needs at least two vertices."""
        return len(self.positions) > 1


class FitBounds(BaseModel):
    """Request to fit the viewport to a set of positions."""

    positions: list[LatLng]
    padding: tuple[int, int] = (50, 50)
    max_zoom: int | None = Field(None, serialization_alias="maxZoom")

    @property
    def bbox(self) -> tuple[float, float, float, float]:
        """(south, west, north, east) of all positions."""
        lats = [p[0] for p in self.positions]
        lngs = [p[1] for p in self.positions]
        return (min(lats), min(lngs), max(lats), max(lngs))


class MapProjection(BaseModel):
    """Everything a map substrate needs to draw an itinerary."""

    mode: Literal["days", "flat"]
    markers: list[MapMarker] = Field(default_factory=list)
    route: RoutePolyline = Field(default_factory=RoutePolyline)
    fit_bounds: FitBounds | None = None

    @property
    def empty(self) -> bool:
        """No stop resolved; the consumer shows a placeholder."""
        return not self.markers

    def marker_at(self, day_index: int | None, stop_index: int) -> MapMarker | None:
        """Find the marker for a stop, if it resolved."""
        for marker in self.markers:
            if marker.selection == (day_index, stop_index):
                return marker
        return None

