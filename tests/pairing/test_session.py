"""Tests for session value objects."""

import dataclasses
import time

import pytest

from pairsync.pairing.session import SessionDescriptor, SyncSession


class TestSyncSession:
    """Tests for SyncSession."""

    def test_requested_at_defaults_to_now(self):
        """requested_at is set at creation time."""
        before = time.time()
        session = SyncSession(auth_key="key", auth_id="user-1")
        after = time.time()

        assert before <= session.requested_at <= after

    def test_is_immutable(self):
        """Sessions cannot be modified after creation."""
        session = SyncSession(auth_key="key", auth_id="user-1")

        with pytest.raises(dataclasses.FrozenInstanceError):
            session.auth_key = "other"

    @pytest.mark.parametrize(
        "auth_key,auth_id,expected",
        [
            ("key", "user-1", True),
            ("", "user-1", False),
            ("key", "", False),
            (None, "user-1", False),
        ],
    )
    def test_is_complete(self, auth_key, auth_id, expected):
        """Both credentials must be non-empty."""
        assert SyncSession(auth_key=auth_key, auth_id=auth_id).is_complete() is expected

    def test_payload_shape(self):
        """Request body carries auth_key and id."""
        session = SyncSession(auth_key="key", auth_id="user-1")

        assert session.to_payload() == {"auth_key": "key", "id": "user-1"}

    def test_repr_hides_auth_key(self):
        """The auth key never appears in repr (and therefore logs)."""
        session = SyncSession(auth_key="secret-key", auth_id="user-1")

        assert "secret-key" not in repr(session)
        assert "user-1" in repr(session)


class TestSessionDescriptor:
    """Tests for SessionDescriptor."""

    def test_holds_channel_url(self):
        """Descriptor exposes the channel URL."""
        descriptor = SessionDescriptor(channel_url="wss://example.com/s/1")

        assert descriptor.channel_url == "wss://example.com/s/1"
