"""Protocols and enums for pairsync."""

from enum import Enum
from typing import Any, Optional, Protocol

from pairsync.errors import PairSyncError


class ProtocolState(Enum):
    """State of a pairing session."""

    IDLE = "idle"
    REQUESTING = "requesting"
    CONNECTED = "connected"
    PAUSED = "paused"
    COMPLETE = "complete"
    DISCONNECTED = "disconnected"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """COMPLETE and FAILED end a session."""
        return self in (ProtocolState.COMPLETE, ProtocolState.FAILED)

    @property
    def is_active(self) -> bool:
        """A session is in flight and start() must be rejected."""
        return self in (
            ProtocolState.REQUESTING,
            ProtocolState.CONNECTED,
            ProtocolState.PAUSED,
        )


class StateChangeListener(Protocol):
    """UI collaborator notified on every state or code change.

    Usage:
        def on_state_change(state, code, error):
            if state is ProtocolState.CONNECTED:
                render_qr(code)

        controller = SyncController(requester, on_state_change=on_state_change)

    Listeners may be plain functions or coroutine functions.
    """

    def __call__(
        self,
        state: ProtocolState,
        code: Optional[str],
        error: Optional[PairSyncError],
    ) -> Any:
        ...
