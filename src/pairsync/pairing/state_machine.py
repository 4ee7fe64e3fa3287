"""Pairing protocol state machine.

transition() is a pure function of (state, event). PairingStateMachine
wraps it with the single mutable cell holding the current state and the
current pairing code.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from pairsync.pairing.frames import Acknowledged, CodeUpdate, PairingFrame, Paused
from pairsync.protocols import ProtocolState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Opened:
    """Channel connection established."""


@dataclass(frozen=True)
class FrameReceived:
    """Channel delivered a frame."""

    frame: PairingFrame


@dataclass(frozen=True)
class Closed:
    """Channel closed, gracefully or not."""


@dataclass(frozen=True)
class Errored:
    """Channel reported an error."""


ChannelEvent = Union[Opened, FrameReceived, Closed, Errored]

# States that swallow every channel event
_ABSORBING = frozenset(
    {ProtocolState.COMPLETE, ProtocolState.DISCONNECTED, ProtocolState.FAILED}
)


def transition(current: ProtocolState, event: ChannelEvent) -> ProtocolState:
    """Compute the next state for a channel event.

    Args:
        current: Current protocol state.
        event: Channel event.

    Returns:
        Next state. Pairs without a rule leave the state unchanged.
    """
    if current in _ABSORBING:
        return current

    if isinstance(event, (Closed, Errored)):
        return ProtocolState.DISCONNECTED

    if isinstance(event, Opened):
        if current in (ProtocolState.IDLE, ProtocolState.REQUESTING):
            return ProtocolState.CONNECTED
        return current

    if isinstance(event, FrameReceived):
        frame = event.frame
        if isinstance(frame, Acknowledged):
            if current in (ProtocolState.CONNECTED, ProtocolState.PAUSED):
                return ProtocolState.COMPLETE
        elif isinstance(frame, Paused):
            if current == ProtocolState.CONNECTED:
                return ProtocolState.PAUSED
        elif isinstance(frame, CodeUpdate):
            if current in (ProtocolState.CONNECTED, ProtocolState.PAUSED):
                return ProtocolState.CONNECTED

    return current


class PairingStateMachine:
    """Holds the current protocol state and pairing code.

    Attributes:
        state: Current protocol state.
        code: Latest pairing code, or None before the first CodeUpdate.
    """

    def __init__(self) -> None:
        self.state = ProtocolState.IDLE
        self.code: Optional[str] = None

    def apply(self, event: ChannelEvent) -> bool:
        """Apply a channel event.

        Args:
            event: Channel event.

        Returns:
            True if the state or the pairing code changed.
        """
        previous = (self.state, self.code)
        next_state = transition(self.state, event)

        if (
            isinstance(event, FrameReceived)
            and isinstance(event.frame, CodeUpdate)
            and next_state == ProtocolState.CONNECTED
        ):
            self.code = event.frame.code

        if next_state != self.state:
            logger.debug(f"Pairing state: {self.state.value} -> {next_state.value}")
        self.state = next_state
        return (self.state, self.code) != previous

    def reset(self) -> None:
        """Return to IDLE with no pairing code."""
        self.state = ProtocolState.IDLE
        self.code = None

    def begin_request(self) -> None:
        """IDLE -> REQUESTING.

        Raises:
            ValueError: If not IDLE.
        """
        if self.state != ProtocolState.IDLE:
            raise ValueError(f"Invalid transition: {self.state} -> REQUESTING")
        self.state = ProtocolState.REQUESTING

    def fail(self) -> None:
        """REQUESTING -> FAILED.

        Raises:
            ValueError: If not REQUESTING.
        """
        if self.state != ProtocolState.REQUESTING:
            raise ValueError(f"Invalid transition: {self.state} -> FAILED")
        self.state = ProtocolState.FAILED

    def force_disconnect(self) -> bool:
        """Force DISCONNECTED from an active state.

        Returns:
            True if the state changed.
        """
        if not self.state.is_active:
            return False
        self.state = ProtocolState.DISCONNECTED
        return True
