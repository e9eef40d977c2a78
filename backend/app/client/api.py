"""Async client for the external itinerary REST API."""

import logging
import time
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from backend.app.config import Settings, get_settings
from backend.app.errors import RemoteServiceError
from backend.app.models.itinerary import Itinerary
from backend.app.session import SessionContext
from backend.app.utils.logging import StructuredEngineLogger

logger = logging.getLogger(__name__)


def unwrap_envelope(payload: Any) -> Any:
    """Strip the optional ``{success, data}`` envelope.

    Raises:
        RemoteServiceError: If the envelope reports ``success: false``
    """
    if isinstance(payload, dict) and "success" in payload:
        if not payload["success"]:
            message = payload.get("message") or payload.get("error") or "request failed"
            raise RemoteServiceError(str(message))
        return payload.get("data")
    return payload


def itinerary_payload(itinerary: Itinerary) -> dict[str, Any]:
    """Serialize an itinerary the way the external API stores it."""
    return itinerary.model_dump(mode="json", by_alias=True, exclude_none=True)


class ItineraryApiClient:
    """Thin async wrapper over the itinerary, collaborator and transport endpoints.

    An ``httpx.AsyncClient`` may be injected (tests pass one built on
    ``httpx.MockTransport``); otherwise one is created and owned here.
    """

    def __init__(
        self,
        session: SessionContext | None = None,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.session = session
        self.base_url = self.settings.api_base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=self.settings.api_timeout_s)
        self._log = StructuredEngineLogger()

    async def __aenter__(self) -> "ItineraryApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        itinerary_id: str | None = None,
    ) -> Any:
        headers = self.session.auth_header() if self.session else {}
        start = time.perf_counter()

        try:
            response = await self._client.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                headers=headers,
            )
            response.raise_for_status()
            data = response.json() if response.content else None
        except httpx.HTTPStatusError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            status_code = e.response.status_code
            self._log.log_call(
                operation, "error", latency_ms, itinerary_id, error_reason=f"http_{status_code}"
            )
            raise RemoteServiceError(
                f"{operation} failed with status {status_code}", status_code=status_code
            ) from e
        except httpx.HTTPError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            self._log.log_call(
                operation, "error", latency_ms, itinerary_id, error_reason=type(e).__name__
            )
            raise RemoteServiceError(f"{operation} failed: {type(e).__name__}") from e
        except ValueError as e:
            latency_ms = (time.perf_counter() - start) * 1000
            self._log.log_call(
                operation, "error", latency_ms, itinerary_id, error_reason="invalid_json"
            )
            raise RemoteServiceError(f"{operation} returned invalid JSON") from e

        latency_ms = (time.perf_counter() - start) * 1000
        self._log.log_call(operation, "success", latency_ms, itinerary_id)
        return unwrap_envelope(data)

    def _parse_itinerary(self, data: Any, operation: str) -> Itinerary:
        try:
            return Itinerary.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "Malformed itinerary document",
                extra={"structured": {"operation": operation, "errors": e.error_count()}},
            )
            raise RemoteServiceError(f"{operation} returned a malformed itinerary") from e

    # Itineraries

    async def get_itinerary(self, itinerary_id: str) -> Itinerary:
        """``GET /itineraries/:id`` with nested days, collaborators and budget."""
        data = await self._request(
            "GET", f"/itineraries/{itinerary_id}", "get_itinerary", itinerary_id=itinerary_id
        )
        return self._parse_itinerary(data, "get_itinerary")

    async def list_my_itineraries(self) -> list[Itinerary]:
        """``GET /itineraries/my``."""
        data = await self._request("GET", "/itineraries/my", "list_my_itineraries")
        return [self._parse_itinerary(item, "list_my_itineraries") for item in data or []]

    async def list_public_itineraries(self) -> list[Itinerary]:
        """``GET /itineraries/public``."""
        data = await self._request("GET", "/itineraries/public", "list_public_itineraries")
        return [self._parse_itinerary(item, "list_public_itineraries") for item in data or []]

    async def create_itinerary(self, itinerary: Itinerary) -> Itinerary:
        """``POST /itineraries``; returns the stored document."""
        data = await self._request(
            "POST", "/itineraries", "create_itinerary", json=itinerary_payload(itinerary)
        )
        return self._parse_itinerary(data, "create_itinerary")

    async def update_itinerary(self, itinerary_id: str, changes: dict[str, Any]) -> Any:
        """``PUT /itineraries/:id`` with a partial or complete document."""
        return await self._request(
            "PUT",
            f"/itineraries/{itinerary_id}",
            "update_itinerary",
            json=changes,
            itinerary_id=itinerary_id,
        )

    async def delete_itinerary(self, itinerary_id: str) -> None:
        """``DELETE /itineraries/:id``."""
        await self._request(
            "DELETE", f"/itineraries/{itinerary_id}", "delete_itinerary", itinerary_id=itinerary_id
        )

    async def add_collaborator(
        self, itinerary_id: str, user_id: str, permission: str = "view"
    ) -> None:
        """``POST /itineraries/:id/collaborators`` (owner only upstream)."""
        await self._request(
            "POST",
            f"/itineraries/{itinerary_id}/collaborators",
            "add_collaborator",
            json={"userId": user_id, "permission": permission},
            itinerary_id=itinerary_id,
        )

    async def remove_collaborator(self, itinerary_id: str, user_id: str) -> None:
        """``DELETE /itineraries/:id/collaborators/:userId``."""
        await self._request(
            "DELETE",
            f"/itineraries/{itinerary_id}/collaborators/{user_id}",
            "remove_collaborator",
            itinerary_id=itinerary_id,
        )

    # Transportation

    async def find_routes(self, params: dict[str, Any]) -> Any:
        """``GET /transportation/find-routes``; returns the unwrapped raw payload."""
        return await self._request(
            "GET", "/transportation/find-routes", "find_routes", params=params
        )

    async def book_transport(self, transport_id: str) -> None:
        """``POST /transportation/:id/book`` booking telemetry."""
        await self._request("POST", f"/transportation/{transport_id}/book", "book_transport")
