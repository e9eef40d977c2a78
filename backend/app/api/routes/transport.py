"""Transport endpoints - GET /transport/routes, POST /transport/book."""

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from backend.app.api.auth import get_current_session
from backend.app.client.api import ItineraryApiClient
from backend.app.models.common import Geo
from backend.app.models.transport import (
    BookingChannel,
    Endpoint,
    SearchMode,
    SearchState,
    TransportOption,
)
from backend.app.session import SessionContext
from backend.app.transport.matcher import TransportMatcher

router = APIRouter(prefix="/transport", tags=["transport"])


class TransportRoutesResponse(BaseModel):
    """Response for GET /transport/routes."""

    mode: SearchMode
    state: SearchState
    summary: str
    options: list[TransportOption]


class BookingResponse(BaseModel):
    """Response for POST /transport/book."""

    booking: BookingChannel
    target: str | None


async def get_transport_matcher(
    session: Annotated[SessionContext | None, Depends(get_current_session)],
) -> AsyncIterator[TransportMatcher]:
    """Matcher bound to a per-request API client."""
    async with ItineraryApiClient(session=session) as api:
        yield TransportMatcher(api)


def _endpoint(name: str | None, lat: float | None, lng: float | None) -> Endpoint:
    geo = Geo(lat=lat, lng=lng) if lat is not None and lng is not None else None
    return Endpoint(name=name, geo=geo)


@router.get("/routes", response_model=TransportRoutesResponse)
async def find_routes(
    matcher: Annotated[TransportMatcher, Depends(get_transport_matcher)],
    from_name: Annotated[str | None, Query(alias="fromName")] = None,
    to_name: Annotated[str | None, Query(alias="toName")] = None,
    from_lat: Annotated[float | None, Query(alias="fromLat", ge=-90, le=90)] = None,
    from_lng: Annotated[float | None, Query(alias="fromLng", ge=-180, le=180)] = None,
    to_lat: Annotated[float | None, Query(alias="toLat", ge=-90, le=90)] = None,
    to_lng: Annotated[float | None, Query(alias="toLng", ge=-180, le=180)] = None,
) -> TransportRoutesResponse:
    """Search transport options, GPS first, falling back to names.

    Raises:
        InputValidationError: If either endpoint is missing (422)
        RemoteServiceError: If the route finder fails (502)
    """
    result = await matcher.find_routes(
        _endpoint(from_name, from_lat, from_lng),
        _endpoint(to_name, to_lat, to_lng),
    )
    return TransportRoutesResponse(
        mode=result.mode,
        state=SearchState.searched,
        summary=result.summary(),
        options=result.options,
    )


@router.post("/book", response_model=BookingResponse)
async def book(
    option: TransportOption,
    matcher: Annotated[TransportMatcher, Depends(get_transport_matcher)],
) -> BookingResponse:
    """Record a booking (best effort) and return where to book."""
    booking = await matcher.record_booking(option)
    return BookingResponse(booking=booking, target=booking.target)
