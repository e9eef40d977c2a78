"""Session context for calls to the external itinerary API.

The session is created explicitly at start-up from a persisted token and
passed down to whatever talks to the API. Logging out clears the store and
closes the API client.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from backend.app.config import Settings, get_settings

if TYPE_CHECKING:
    from backend.app.client.api import ItineraryApiClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    """Authenticated identity of the current user.

    Used to gate mutations locally and to authorize outbound API calls.
    """

    user_id: str
    token: str

    def auth_header(self) -> dict[str, str]:
        """Authorization header for the external API."""
        return {"Authorization": f"Bearer {self.token}"}


class TokenStore:
    """File-backed persistence of the session between runs."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> SessionContext | None:
        """Read a persisted session; missing or corrupt files yield None."""
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            return SessionContext(user_id=str(data["user_id"]), token=str(data["token"]))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(
                "Ignoring unreadable session file",
                extra={"structured": {"path": str(self.path), "error": type(e).__name__}},
            )
            return None

    def save(self, session: SessionContext) -> None:
        """Persist a session, replacing any previous one."""
        self.path.write_text(
            json.dumps({"user_id": session.user_id, "token": session.token}),
            encoding="utf-8",
        )

    def clear(self) -> None:
        """Forget the persisted session."""
        self.path.unlink(missing_ok=True)


def start_session(
    settings: Settings | None = None, store: TokenStore | None = None
) -> SessionContext | None:
    """Restore the session persisted by a previous run, if any."""
    settings = settings or get_settings()
    store = store or TokenStore(settings.token_store_path)
    return store.load()


def login(session: SessionContext, store: TokenStore) -> SessionContext:
    """Persist a freshly issued session and return it."""
    store.save(session)
    logger.info("Session started", extra={"structured": {"user_id": session.user_id}})
    return session


async def logout(store: TokenStore, api: "ItineraryApiClient | None" = None) -> None:
    """Tear down the session: forget the token and close the API client."""
    store.clear()
    if api is not None:
        await api.aclose()
    logger.info("Session cleared")
