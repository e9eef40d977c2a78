"""Tests for collaborator permission resolution."""

from typing import Any

import pytest

from backend.app.errors import PermissionDeniedError
from backend.app.models.itinerary import Itinerary
from backend.app.permissions.resolver import (
    Action,
    Role,
    can,
    collaborator_badges,
    require,
    resolve_role,
)


def make_itinerary(collaborators: list[dict[str, Any]], is_public: bool = False) -> Itinerary:
    return Itinerary.model_validate(
        {
            "_id": "itin-1",
            "title": "Trip",
            "ownerId": {"_id": "owner-1", "username": "olivia"},
            "isPublic": is_public,
            "collaborators": collaborators,
        }
    )


def test_owner_wins_even_when_listed_as_collaborator() -> None:
    itinerary = make_itinerary([{"userId": "owner-1", "permission": "view"}])

    assert resolve_role("owner-1", itinerary) == Role.owner


def test_edit_row_resolves_to_edit() -> None:
    itinerary = make_itinerary([{"userId": {"_id": "u2"}, "permission": "edit"}])

    assert resolve_role("u2", itinerary) == Role.edit


def test_edit_beats_view_for_same_user() -> None:
    itinerary = make_itinerary(
        [{"userId": "u2", "permission": "view"}, {"userId": "u2", "permission": "edit"}]
    )

    assert resolve_role("u2", itinerary) == Role.edit


@pytest.mark.parametrize("permission", ["view", "comment", "suggest"])
def test_read_only_rows_resolve_to_view(permission: str) -> None:
    itinerary = make_itinerary([{"userId": "u3", "permission": permission}])

    assert resolve_role("u3", itinerary) == Role.view


def test_public_itinerary_is_viewable_by_anyone() -> None:
    itinerary = make_itinerary([], is_public=True)

    assert resolve_role("stranger", itinerary) == Role.view
    assert resolve_role(None, itinerary) == Role.view


def test_unrelated_user_on_private_itinerary_has_no_role() -> None:
    itinerary = make_itinerary([{"userId": "u2", "permission": "edit"}])

    assert resolve_role("stranger", itinerary) == Role.none
    assert resolve_role(None, itinerary) == Role.none


def test_action_matrix() -> None:
    assert all(can(Role.owner, action) for action in Action)
    assert can(Role.edit, Action.modify)
    assert not can(Role.edit, Action.delete_itinerary)
    assert not can(Role.edit, Action.remove_collaborator)
    assert can(Role.view, Action.read)
    assert not can(Role.view, Action.modify)
    assert not any(can(Role.none, action) for action in Action)


def test_require_raises_for_disallowed_action() -> None:
    with pytest.raises(PermissionDeniedError) as exc_info:
        require(Role.view, Action.modify)

    assert exc_info.value.role == "view"
    assert exc_info.value.action == "modify"

    require(Role.owner, Action.delete_itinerary)


def test_collaborator_badges_flag_owner() -> None:
    itinerary = make_itinerary(
        [{"userId": "owner-1", "permission": "edit"}, {"userId": "u2", "permission": "view"}]
    )

    badges = collaborator_badges(itinerary)

    assert [(b.user_id, b.is_owner) for b in badges] == [("owner-1", True), ("u2", False)]


def test_deleted_collaborator_rows_are_skipped() -> None:
    itinerary = make_itinerary(
        [{"userId": None, "permission": "edit"}, {"userId": "u2", "permission": "view"}]
    )

    assert resolve_role("u2", itinerary) == Role.view
    assert resolve_role(None, itinerary) == Role.none
    assert [b.user_id for b in collaborator_badges(itinerary)] == ["u2"]


def test_only_owner_may_add_collaborators() -> None:
    assert can(Role.owner, Action.add_collaborator)
    assert not can(Role.edit, Action.add_collaborator)
