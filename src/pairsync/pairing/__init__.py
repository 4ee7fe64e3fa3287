"""Pairing module for pairsync.

Provides the device pairing protocol:
- Session request over HTTP
- Pairing channel over WebSocket
- Pairing state machine
- Sync controller tying them together
"""

from .channel import PairingChannel
from .controller import SyncController
from .frames import Acknowledged, CodeUpdate, PairingFrame, Paused, decode_frame
from .requester import SessionRequester
from .session import SessionDescriptor, SyncSession
from .state_machine import (
    Closed,
    Errored,
    FrameReceived,
    Opened,
    PairingStateMachine,
    transition,
)

__all__ = [
    "Acknowledged",
    "Closed",
    "CodeUpdate",
    "Errored",
    "FrameReceived",
    "Opened",
    "PairingChannel",
    "PairingFrame",
    "PairingStateMachine",
    "Paused",
    "SessionDescriptor",
    "SessionRequester",
    "SyncController",
    "SyncSession",
    "decode_frame",
    "transition",
]
