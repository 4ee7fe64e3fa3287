"""Base exceptions for pairsync."""


class PairSyncError(Exception):
    """Base exception for all pairsync errors."""

    pass


class RequestError(PairSyncError):
    """Session request failed."""

    pass


class InvalidSession(RequestError):
    """Session is missing its auth key or auth id."""

    pass


class RequestRejected(RequestError):
    """Session endpoint answered with an error status."""

    def __init__(self, status: int, message: str = ""):
        self.status = status
        super().__init__(message or f"Session request rejected with status {status}")


class NetworkUnavailable(RequestError):
    """Session endpoint could not be reached."""

    pass


class InternalFault(RequestError):
    """Local fault while building the request or reading the response."""

    pass


class ChannelError(PairSyncError):
    """Pairing channel reported an error (informational)."""

    pass


class ProtocolViolation(ChannelError):
    """Inbound frame rejected by strict decoding."""

    pass


class SessionAlreadyActive(PairSyncError):
    """start() called while a session is still in progress."""

    pass
