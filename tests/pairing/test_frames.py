"""Tests for pairing frame decoding."""

import pytest

from pairsync.errors import ProtocolViolation
from pairsync.pairing.frames import (
    ACK_MARKER,
    PAUSE_MARKER,
    Acknowledged,
    CodeUpdate,
    Paused,
    decode_frame,
)


class TestDecodeFrame:
    """Tests for decode_frame in the default mode."""

    def test_ack_marker(self):
        """The acknowledgment marker decodes to Acknowledged."""
        assert decode_frame("200- ack") == Acknowledged()

    def test_pause_marker(self):
        """The pause marker decodes to Paused."""
        assert decode_frame("201- pause") == Paused()

    def test_acked_variant(self):
        """The profile backend's "200- acked" also decodes to Acknowledged."""
        assert decode_frame("200- acked") == Acknowledged()

    def test_capitalized_pause_variant(self):
        """The profile backend's "201- Paused" also decodes to Paused."""
        assert decode_frame("201- Paused") == Paused()

    def test_variants_in_strict_mode(self):
        """Strict decoding accepts both marker sets."""
        assert decode_frame("200- acked", strict=True) == Acknowledged()
        assert decode_frame("201- Paused", strict=True) == Paused()

    def test_other_text_is_code_update(self):
        """Any other text is a new pairing code."""
        assert decode_frame("https://example.com/p/xyz") == CodeUpdate(
            code="https://example.com/p/xyz"
        )

    def test_markers_match_exactly(self):
        """Near-miss markers are pairing codes, not control frames."""
        assert decode_frame("200-ack") == CodeUpdate(code="200-ack")
        assert decode_frame(" 201- pause") == CodeUpdate(code=" 201- pause")

    def test_empty_text_is_code_update(self):
        """Decoding is total: empty text still yields a frame."""
        assert decode_frame("") == CodeUpdate(code="")

    def test_binary_is_decoded_as_text(self):
        """Binary payloads are decoded as UTF-8."""
        assert decode_frame(ACK_MARKER.encode()) == Acknowledged()
        assert decode_frame(b"code-1") == CodeUpdate(code="code-1")


class TestDecodeFrameStrict:
    """Tests for strict decoding."""

    def test_markers_still_decode(self):
        """Known markers decode normally."""
        assert decode_frame(ACK_MARKER, strict=True) == Acknowledged()
        assert decode_frame(PAUSE_MARKER, strict=True) == Paused()

    def test_rejects_empty(self):
        """Empty payloads are protocol violations."""
        with pytest.raises(ProtocolViolation):
            decode_frame("", strict=True)

    def test_rejects_binary(self):
        """Binary payloads are protocol violations."""
        with pytest.raises(ProtocolViolation):
            decode_frame(b"code", strict=True)

    def test_accepts_codes(self):
        """Non-empty text is still a pairing code."""
        assert decode_frame("abc", strict=True) == CodeUpdate(code="abc")
