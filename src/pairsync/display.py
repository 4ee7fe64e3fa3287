"""Terminal display for pairing sessions.

Prints a status line per state change and renders each new pairing code
as a QR code using Unicode block characters.
"""

import io
from typing import Callable, Optional

import click
import qrcode

from pairsync.errors import (
    InvalidSession,
    NetworkUnavailable,
    PairSyncError,
    RequestRejected,
)
from pairsync.protocols import ProtocolState


STATUS_MESSAGES = {
    ProtocolState.REQUESTING: "Requesting sync session...",
    ProtocolState.CONNECTED: "Sync started. Scan the code with your other device.",
    ProtocolState.PAUSED: "Code scanned. Waiting for confirmation...",
    ProtocolState.COMPLETE: "Sync complete.",
    ProtocolState.DISCONNECTED: "Sync closed.",
}


def request_failure_hint(error: PairSyncError) -> str:
    """Guidance for a failed session request."""
    if isinstance(error, InvalidSession):
        return "Missing credentials. Sign in again and retry."
    if isinstance(error, RequestRejected):
        if error.status in (401, 403):
            return f"Session rejected ({error.status}). Sign in again and retry."
        return f"Session rejected ({error.status}). Try again later."
    if isinstance(error, NetworkUnavailable):
        return "Sync server unreachable. Check your network connection."
    return "Something went wrong. Please try again."


def render_qr(code: str, invert: bool = True) -> str:
    """Render a pairing code as terminal QR art.

    Args:
        code: Pairing code to encode.
        invert: Invert colors (light modules on dark terminals).

    Returns:
        String with the QR code drawn in block characters.
    """
    qr = qrcode.QRCode(
        version=None,  # Auto-size
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(code)
    qr.make(fit=True)

    output = io.StringIO()
    qr.print_ascii(out=output, invert=invert)
    return output.getvalue()


class TerminalDisplay:
    """State change listener writing to the terminal."""

    def __init__(
        self,
        show_qr: bool = True,
        invert: bool = True,
        echo: Callable[..., None] = click.echo,
    ):
        """Initialize display.

        Args:
            show_qr: Render codes as QR art; otherwise print them as text.
            invert: Invert QR colors.
            echo: Output function (for testing).
        """
        self._show_qr = show_qr
        self._invert = invert
        self._echo = echo
        self._last_state: Optional[ProtocolState] = None
        self._last_code: Optional[str] = None

    def __call__(
        self,
        state: ProtocolState,
        code: Optional[str],
        error: Optional[PairSyncError],
    ) -> None:
        if state != self._last_state:
            self._last_state = state
            self._show_status(state, error)

        if state == ProtocolState.IDLE:
            self._last_code = None
        elif state == ProtocolState.CONNECTED and code and code != self._last_code:
            self._last_code = code
            self._show_code(code)

    def _show_status(
        self, state: ProtocolState, error: Optional[PairSyncError]
    ) -> None:
        if state == ProtocolState.FAILED:
            self._echo(f"Sync failed: {request_failure_hint(error)}", err=True)
        elif state == ProtocolState.DISCONNECTED and error is not None:
            self._echo(f"Sync error: {error}", err=True)
        elif state in STATUS_MESSAGES:
            self._echo(STATUS_MESSAGES[state])

    def _show_code(self, code: str) -> None:
        if self._show_qr:
            self._echo(render_qr(code, invert=self._invert))
        else:
            self._echo(f"Pairing code: {code}")
