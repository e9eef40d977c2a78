"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable
from typing import Any

import httpx
import pytest

from backend.app.client.api import ItineraryApiClient
from backend.app.config import Settings
from backend.app.session import SessionContext

BASE_URL = "http://itinerary.test/api"

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a fake upstream."""
    return Settings(api_base_url=BASE_URL)


@pytest.fixture
def session() -> SessionContext:
    """Session for the itinerary owner."""
    return SessionContext(user_id="owner-1", token="owner-1")


@pytest.fixture
def make_api(
    settings: Settings, session: SessionContext
) -> Callable[[Handler], ItineraryApiClient]:
    """Build an API client whose requests go to an in-process handler.

    Usage:
        api = make_api(lambda request: httpx.Response(200, json={...}))
    """

    def _make(handler: Handler, as_session: SessionContext | None = session) -> ItineraryApiClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ItineraryApiClient(session=as_session, settings=settings, client=client)

    return _make


@pytest.fixture
def itinerary_payload() -> dict[str, Any]:
    """Itinerary as returned by ``GET /itineraries/:id``."""
    return {
        "_id": "itin-1",
        "title": "East Coast Weekend",
        "ownerId": {"_id": "owner-1", "username": "olivia"},
        "isPublic": False,
        "status": "planning",
        "startDate": "2025-06-01T00:00:00.000Z",
        "endDate": "2025-06-02T00:00:00.000Z",
        "completeness": 62.5,
        "collaborators": [
            {"userId": {"_id": "editor-1", "username": "ed"}, "permission": "edit"},
            {"userId": "viewer-1", "permission": "view"},
        ],
        "days": [
            {
                "dayNumber": 1,
                "date": "2025-06-01T00:00:00.000Z",
                "stops": [
                    {
                        "type": "hotel",
                        "hotelId": {
                            "_id": "hotel-1",
                            "name": "Harbor Hotel",
                            "coordinates": {"latitude": 40.0, "longitude": -74.0},
                        },
                        "timeOfDay": "09:00",
                    },
                    {
                        "type": "custom",
                        "customName": "Pier Walk",
                        "customCoordinates": {"latitude": 40.1, "longitude": -74.1},
                        "notes": "Sunset",
                    },
                ],
            },
            {"dayNumber": 2, "date": "2025-06-02T00:00:00.000Z", "stops": []},
        ],
        "budget": {
            "total": 1000,
            "currency": "USD",
            "expenses": [
                {"_id": "exp-1", "category": "food", "amount": 150, "dayNumber": 1},
            ],
        },
    }
