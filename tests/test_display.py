"""Tests for the terminal display."""

import pytest

from pairsync.display import TerminalDisplay, render_qr, request_failure_hint
from pairsync.errors import (
    ChannelError,
    InternalFault,
    InvalidSession,
    NetworkUnavailable,
    RequestRejected,
)
from pairsync.protocols import ProtocolState


class Output:
    """Collects echo calls."""

    def __init__(self):
        self.lines = []
        self.errors = []

    def __call__(self, message="", err=False):
        (self.errors if err else self.lines).append(message)


class TestRequestFailureHint:
    """Tests for request failure guidance."""

    def test_kinds_get_distinct_guidance(self):
        """Each failure kind maps to its own hint."""
        hints = {
            request_failure_hint(InvalidSession()),
            request_failure_hint(RequestRejected(500)),
            request_failure_hint(NetworkUnavailable()),
            request_failure_hint(InternalFault()),
        }

        assert len(hints) == 4

    def test_auth_rejection_asks_to_sign_in(self):
        """401/403 rejections ask the user to re-authenticate."""
        assert "Sign in" in request_failure_hint(RequestRejected(401))
        assert "403" in request_failure_hint(RequestRejected(403))

    def test_network_hint(self):
        """Network failures point at connectivity."""
        assert "network" in request_failure_hint(NetworkUnavailable())


class TestRenderQr:
    """Tests for QR rendering."""

    def test_renders_multiline_art(self):
        """Output is multi-line block art."""
        art = render_qr("https://example.com/p/abc")

        assert len(art.splitlines()) > 10

    def test_different_codes_render_differently(self):
        """Distinct codes produce distinct art."""
        assert render_qr("code-one") != render_qr("code-two")


class TestTerminalDisplay:
    """Tests for the state change listener."""

    def test_status_lines(self):
        """Each new state prints its status once."""
        out = Output()
        display = TerminalDisplay(show_qr=False, echo=out)

        display(ProtocolState.REQUESTING, None, None)
        display(ProtocolState.CONNECTED, None, None)
        display(ProtocolState.PAUSED, None, None)
        display(ProtocolState.COMPLETE, None, None)

        assert out.lines == [
            "Requesting sync session...",
            "Sync started. Scan the code with your other device.",
            "Code scanned. Waiting for confirmation...",
            "Sync complete.",
        ]

    def test_new_codes_are_shown_once(self):
        """Only changed codes are printed."""
        out = Output()
        display = TerminalDisplay(show_qr=False, echo=out)

        display(ProtocolState.CONNECTED, "abc", None)
        display(ProtocolState.CONNECTED, "xyz", None)
        display(ProtocolState.PAUSED, "xyz", None)
        display(ProtocolState.CONNECTED, "xyz", None)

        codes = [line for line in out.lines if line.startswith("Pairing code")]
        assert codes == ["Pairing code: abc", "Pairing code: xyz"]

    def test_qr_mode_renders_art(self):
        """With QR enabled, codes are drawn as QR art."""
        out = Output()
        display = TerminalDisplay(show_qr=True, echo=out)

        display(ProtocolState.CONNECTED, "abc", None)

        assert out.lines[-1] == render_qr("abc")

    def test_failure_goes_to_stderr(self):
        """Request failures print guidance on stderr."""
        out = Output()
        display = TerminalDisplay(echo=out)

        display(ProtocolState.FAILED, None, NetworkUnavailable())

        assert out.errors and "network" in out.errors[0]

    @pytest.mark.parametrize(
        "error,stream",
        [(None, "lines"), (ChannelError("reset"), "errors")],
    )
    def test_disconnect_reporting(self, error, stream):
        """Error-driven disconnects go to stderr, plain closes to stdout."""
        out = Output()
        display = TerminalDisplay(echo=out)

        display(ProtocolState.DISCONNECTED, None, error)

        assert len(getattr(out, stream)) == 1

    def test_idle_forgets_last_code(self):
        """After a reset the same code is shown again."""
        out = Output()
        display = TerminalDisplay(show_qr=False, echo=out)

        display(ProtocolState.CONNECTED, "abc", None)
        display(ProtocolState.IDLE, None, None)
        display(ProtocolState.CONNECTED, "abc", None)

        codes = [line for line in out.lines if line.startswith("Pairing code")]
        assert codes == ["Pairing code: abc", "Pairing code: abc"]
