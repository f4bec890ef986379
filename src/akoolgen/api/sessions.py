"""In-memory session store for the backend API.

Each browser session is identified by an opaque random id carried in a
cookie and owns one :class:`~akoolgen.core.auth.AuthGateway`.  Credential
material therefore never leaves the server.  Sessions live for the
lifetime of the process; there is no persistence across restarts.
"""

from __future__ import annotations

import logging
import secrets

from akoolgen.core.auth import AuthGateway

logger = logging.getLogger(__name__)


class SessionStore:
    """Maps session ids to auth gateways."""

    def __init__(self) -> None:
        self._sessions: dict[str, AuthGateway] = {}

    def get(self, session_id: str | None) -> AuthGateway | None:
        if not session_id:
            return None
        return self._sessions.get(session_id)

    def create(self, gateway: AuthGateway) -> str:
        """Store *gateway* under a new random session id and return the id."""
        session_id = secrets.token_urlsafe(32)
        self._sessions[session_id] = gateway
        logger.debug(f"Created session ({len(self._sessions)} active)")
        return session_id

    def drop(self, session_id: str | None) -> bool:
        """Forget a session, logging its gateway out.  Returns whether it existed."""
        gateway = self._sessions.pop(session_id, None) if session_id else None
        if gateway is None:
            return False
        gateway.logout()
        return True

    def __len__(self) -> int:
        return len(self._sessions)
