"""Collaborator permission resolution and action gating."""

from enum import Enum

from pydantic import BaseModel

from backend.app.errors import PermissionDeniedError
from backend.app.models.common import Permission
from backend.app.models.itinerary import Itinerary


class Role(str, Enum):
    """Effective role of a user on one itinerary."""

    owner = "owner"
    edit = "edit"
    view = "view"
    none = "none"


class Action(str, Enum):
    """Gated entry points."""

    read = "read"
    modify = "modify"
    delete_itinerary = "delete_itinerary"
    add_collaborator = "add_collaborator"
    remove_collaborator = "remove_collaborator"


ROLE_ACTIONS: dict[Role, frozenset[Action]] = {
    Role.owner: frozenset(Action),
    Role.edit: frozenset({Action.read, Action.modify}),
    Role.view: frozenset({Action.read}),
    Role.none: frozenset(),
}

# Stored permissions that only grant read access
READ_ONLY_PERMISSIONS = frozenset({Permission.view, Permission.comment, Permission.suggest})


class CollaboratorBadge(BaseModel):
    """Display row for the collaborator list."""

    user_id: str
    permission: Permission
    is_owner: bool


def resolve_role(user_id: str | None, itinerary: Itinerary) -> Role:
    """Resolve the current user's role on an itinerary.

    Ownership always wins, even if the owner also appears as a collaborator.
    An edit row beats a view row; public itineraries are viewable by anyone.

    Args:
        user_id: Current user id, or None when anonymous
        itinerary: Itinerary with owner and collaborators

    Returns:
        Effective Role
    """
    if user_id and user_id == itinerary.owner_id:
        return Role.owner

    permissions = {
        c.permission for c in itinerary.collaborators if user_id and c.user_id == user_id
    }

    if Permission.edit in permissions:
        return Role.edit
    if permissions & READ_ONLY_PERMISSIONS or itinerary.is_public:
        return Role.view
    return Role.none


def can(role: Role, action: Action) -> bool:
    """Whether a role may perform an action."""
    return action in ROLE_ACTIONS[role]


def require(role: Role, action: Action) -> None:
    """Refuse an action the role does not allow.

    Raises:
        PermissionDeniedError: If ``role`` lacks ``action``
    """
    if not can(role, action):
        raise PermissionDeniedError(role.value, action.value)


def collaborator_badges(itinerary: Itinerary) -> list[CollaboratorBadge]:
    """Collaborators with an owner flag for badge display."""
    owner_id = itinerary.owner_id
    badges = []
    for collaborator in itinerary.collaborators:
        user_id = collaborator.user_id
        if user_id is None:
            continue
        badges.append(
            CollaboratorBadge(
                user_id=user_id,
                permission=collaborator.permission,
                is_owner=user_id == owner_id,
            )
        )
    return badges
