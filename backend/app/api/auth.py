"""Minimal auth dependency.

Stub implementation: the bearer token is the user id. Verifying tokens is
the identity backend's job, not this service's.
"""

from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.app.session import SessionContext


async def get_current_session(
    authorization: Annotated[str | None, Header()] = None,
) -> SessionContext | None:
    """Extract the session from the authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer <user_id>")

    Returns:
        SessionContext, or None for anonymous requests

    Raises:
        HTTPException: If the header is malformed
    """
    if not authorization:
        return None

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:].strip()  # Strip "Bearer "
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Empty bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return SessionContext(user_id=token, token=token)
