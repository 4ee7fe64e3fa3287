"""Session value objects.

A SyncSession carries the caller's credentials into a session request;
the SessionDescriptor is what the backend hands back.
"""

import time
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SyncSession:
    """Credentials binding for one pairing attempt.

    Attributes:
        auth_key: Caller's authentication key (issued elsewhere).
        auth_id: Caller identity bound to the session.
        requested_at: Unix timestamp when the session was created.
    """

    auth_key: str
    auth_id: str
    requested_at: float = field(default_factory=time.time)

    def is_complete(self) -> bool:
        """Both credentials are present and non-empty."""
        return bool(self.auth_key) and bool(self.auth_id)

    def to_payload(self) -> dict:
        """Request body for the session endpoint."""
        return {"auth_key": self.auth_key, "id": self.auth_id}

    def __repr__(self) -> str:
        # Keep the key out of logs
        return f"SyncSession(auth_id={self.auth_id!r}, requested_at={self.requested_at})"


@dataclass(frozen=True)
class SessionDescriptor:
    """Single-use connection credential returned by the session endpoint."""

    channel_url: str
