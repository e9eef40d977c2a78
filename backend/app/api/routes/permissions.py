"""Permission endpoint - POST /permissions/resolve."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from backend.app.api.auth import get_current_session
from backend.app.models.itinerary import Itinerary
from backend.app.permissions.resolver import (
    Action,
    CollaboratorBadge,
    Role,
    can,
    collaborator_badges,
    resolve_role,
)
from backend.app.session import SessionContext

router = APIRouter(prefix="/permissions", tags=["permissions"])


class PermissionResponse(BaseModel):
    """Response for POST /permissions/resolve."""

    role: Role
    allowed_actions: list[Action]
    collaborators: list[CollaboratorBadge]


@router.post("/resolve", response_model=PermissionResponse)
async def resolve_permissions(
    itinerary: Itinerary,
    session: Annotated[SessionContext | None, Depends(get_current_session)],
) -> PermissionResponse:
    """Resolve the caller's role on the posted itinerary."""
    role = resolve_role(session.user_id if session else None, itinerary)
    return PermissionResponse(
        role=role,
        allowed_actions=[action for action in Action if can(role, action)],
        collaborators=collaborator_badges(itinerary),
    )
