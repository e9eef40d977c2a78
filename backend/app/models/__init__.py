"""Models package - re-exports for convenience."""

from backend.app.models.budget import (
    Budget,
    BudgetStatus,
    BudgetSummary,
    CategoryBreakdown,
    DayBreakdown,
    Expense,
    ExpenseDraft,
    UserRef,
)
from backend.app.models.common import (
    ExpenseCategory,
    Geo,
    ItineraryStatus,
    Permission,
    StopKind,
)
from backend.app.models.itinerary import Collaborator, Day, Itinerary
from backend.app.models.map import (
    FitBounds,
    MapMarker,
    MapProjection,
    MarkerIcon,
    MarkerKind,
    PopupContent,
    RoutePolyline,
)
from backend.app.models.stops import (
    CustomStop,
    HotelStop,
    LocationStop,
    PlaceRef,
    RawCoordinates,
    ResolvedStop,
    Stop,
    TransportStop,
)
from backend.app.models.transport import (
    BookingChannel,
    Endpoint,
    MatchType,
    SearchMode,
    SearchState,
    TransportOption,
    TransportSearchResult,
)

__all__ = [
    # Common
    "Geo",
    "StopKind",
    "ItineraryStatus",
    "ExpenseCategory",
    "Permission",
    # Stops
    "Stop",
    "LocationStop",
    "HotelStop",
    "TransportStop",
    "CustomStop",
    "PlaceRef",
    "RawCoordinates",
    "ResolvedStop",
    # Itinerary
    "Itinerary",
    "Day",
    "Collaborator",
    # Budget
    "Budget",
    "Expense",
    "ExpenseDraft",
    "UserRef",
    "BudgetStatus",
    "BudgetSummary",
    "CategoryBreakdown",
    "DayBreakdown",
    # Map
    "MapProjection",
    "MapMarker",
    "MarkerIcon",
    "MarkerKind",
    "PopupContent",
    "RoutePolyline",
    "FitBounds",
    # Transport
    "TransportOption",
    "TransportSearchResult",
    "BookingChannel",
    "Endpoint",
    "MatchType",
    "SearchMode",
    "SearchState",
]
