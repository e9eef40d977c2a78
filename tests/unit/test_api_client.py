"""Tests for the external itinerary API client."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from backend.app.client.api import ItineraryApiClient, unwrap_envelope
from backend.app.errors import RemoteServiceError

BASE_URL = "http://itinerary.test/api"

MakeApi = Callable[..., ItineraryApiClient]


def test_unwrap_envelope() -> None:
    assert unwrap_envelope({"success": True, "data": [1]}) == [1]
    assert unwrap_envelope([1]) == [1]
    assert unwrap_envelope({"directRoutes": []}) == {"directRoutes": []}

    with pytest.raises(RemoteServiceError):
        unwrap_envelope({"success": False, "message": "nope"})


@pytest.mark.asyncio
async def test_get_itinerary_parses_nested_document(
    make_api: MakeApi, itinerary_payload: dict[str, Any]
) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": itinerary_payload})

    api = make_api(handler)
    itinerary = await api.get_itinerary("itin-1")

    assert str(seen[0].url) == f"{BASE_URL}/itineraries/itin-1"
    assert seen[0].headers["Authorization"] == "Bearer owner-1"
    assert itinerary.owner_id == "owner-1"
    assert itinerary.completeness == 62.5
    assert len(itinerary.days) == 2
    assert itinerary.budget is not None
    assert itinerary.collaborators[0].user_id == "editor-1"


@pytest.mark.asyncio
async def test_anonymous_requests_send_no_authorization(make_api: MakeApi) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"_id": "a", "title": "Public trip"}])

    api = make_api(handler, as_session=None)
    itineraries = await api.list_public_itineraries()

    assert "Authorization" not in seen[0].headers
    assert [i.title for i in itineraries] == ["Public trip"]


@pytest.mark.asyncio
async def test_update_sends_json_body(make_api: MakeApi) -> None:
    bodies: list[Any] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PUT"
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "data": {"_id": "itin-1"}})

    api = make_api(handler)
    await api.update_itinerary("itin-1", {"budget": {"total": 10}})

    assert bodies == [{"budget": {"total": 10}}]


@pytest.mark.asyncio
async def test_remove_collaborator_path(make_api: MakeApi) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(204)

    api = make_api(handler)
    await api.remove_collaborator("itin-1", "u2")

    assert seen[0].method == "DELETE"
    assert seen[0].url.path == "/api/itineraries/itin-1/collaborators/u2"


@pytest.mark.asyncio
async def test_add_collaborator_posts_user_and_permission(make_api: MakeApi) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": {}})

    api = make_api(handler)
    await api.add_collaborator("itin-1", "u2", "edit")

    assert seen[0].method == "POST"
    assert seen[0].url.path == "/api/itineraries/itin-1/collaborators"
    assert json.loads(seen[0].content) == {"userId": "u2", "permission": "edit"}


@pytest.mark.asyncio
async def test_malformed_itinerary_becomes_remote_error(make_api: MakeApi) -> None:
    api = make_api(
        lambda request: httpx.Response(200, json={"success": True, "data": {"days": "nope"}})
    )

    with pytest.raises(RemoteServiceError):
        await api.get_itinerary("itin-1")


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 403, 404, 500])
async def test_http_errors_become_remote_errors(make_api: MakeApi, status_code: int) -> None:
    api = make_api(lambda request: httpx.Response(status_code, json={"message": "fail"}))

    with pytest.raises(RemoteServiceError) as exc_info:
        await api.get_itinerary("itin-1")

    assert exc_info.value.status_code == status_code


@pytest.mark.asyncio
async def test_network_errors_become_remote_errors(make_api: MakeApi) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    api = make_api(handler)

    with pytest.raises(RemoteServiceError) as exc_info:
        await api.delete_itinerary("itin-1")

    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_invalid_json_becomes_remote_error(make_api: MakeApi) -> None:
    api = make_api(lambda request: httpx.Response(200, content=b"<html>"))

    with pytest.raises(RemoteServiceError):
        await api.list_my_itineraries()


@pytest.mark.asyncio
async def test_injected_client_is_not_closed(make_api: MakeApi) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    api = make_api(handler)

    async with api:
        await api.list_my_itineraries()

    assert not api._client.is_closed
    await api._client.aclose()
