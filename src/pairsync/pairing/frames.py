"""Inbound pairing frames.

The pairing backend pushes plain text frames over the channel:

- "200- ack" or "200- acked"    -> Acknowledged (pairing completed)
- "201- pause" or "201- Paused" -> Paused (remote device scanned the code)
- anything else -> CodeUpdate carrying a fresh pairing code

Decoding is total in the default mode. Strict mode rejects empty and
binary payloads with ProtocolViolation.
"""

from dataclasses import dataclass
from typing import Union

from pairsync.errors import ProtocolViolation

__all__ = [
    "ACK_MARKER",
    "ACK_MARKERS",
    "PAUSE_MARKER",
    "PAUSE_MARKERS",
    "Acknowledged",
    "CodeUpdate",
    "PairingFrame",
    "Paused",
    "decode_frame",
]

ACK_MARKER = "200- ack"
PAUSE_MARKER = "201- pause"

# Both backend flavors (sync page and profile page) are accepted
ACK_MARKERS = frozenset({ACK_MARKER, "200- acked"})
PAUSE_MARKERS = frozenset({PAUSE_MARKER, "201- Paused"})


@dataclass(frozen=True)
class Acknowledged:
    """Pairing completed successfully."""


@dataclass(frozen=True)
class Paused:
    """Remote device scanned the code; rotation halts until it confirms."""


@dataclass(frozen=True)
class CodeUpdate:
    """Fresh pairing code to display, superseding any previous one."""

    code: str


PairingFrame = Union[Acknowledged, Paused, CodeUpdate]


def decode_frame(data: Union[str, bytes], strict: bool = False) -> PairingFrame:
    """Map a raw inbound message to a pairing frame.

    Args:
        data: Text or binary frame payload.
        strict: Reject empty and binary payloads instead of treating
            them as pairing codes.

    Returns:
        The decoded frame.

    Raises:
        ProtocolViolation: In strict mode, for empty or binary payloads.
    """
    if isinstance(data, (bytes, bytearray)):
        if strict:
            raise ProtocolViolation("Binary frame on a text-only channel")
        data = bytes(data).decode("utf-8", errors="replace")

    if data in ACK_MARKERS:
        return Acknowledged()
    if data in PAUSE_MARKERS:
        return Paused()
    if strict and not data:
        raise ProtocolViolation("Empty frame")
    return CodeUpdate(code=data)
