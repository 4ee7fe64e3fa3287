"""Requests pairing sessions from the backend."""

import asyncio
import json
import logging
from typing import Optional

import aiohttp

from pairsync.errors import (
    InternalFault,
    InvalidSession,
    NetworkUnavailable,
    RequestRejected,
)
from pairsync.pairing.session import SessionDescriptor, SyncSession

logger = logging.getLogger(__name__)


class SessionRequester:
    """Obtains a SessionDescriptor from the session endpoint.

    Features:
    - Single attempt, no retry
    - Distinct failure kinds for rejection, unreachable network and local faults
    - Context manager for session lifecycle
    """

    # Request timeout
    REQUEST_TIMEOUT = 10.0  # seconds

    def __init__(
        self,
        endpoint: str,
        url_field: str = "syncURL",
        timeout: float = REQUEST_TIMEOUT,
        http_session: Optional[aiohttp.ClientSession] = None,
    ):
        """Initialize requester.

        Args:
            endpoint: Session endpoint URL.
            url_field: Name of the connection URL field in the response body.
            timeout: Total request timeout in seconds.
            http_session: Optional aiohttp session (for testing).
        """
        self._endpoint = endpoint
        self._url_field = url_field
        self._timeout = timeout
        self._session = http_session
        self._owns_session = http_session is None

    async def __aenter__(self):
        """Enter async context, creating session if needed."""
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self

    async def __aexit__(self, *args):
        """Exit async context, closing owned session."""
        await self.close()

    @property
    def endpoint(self) -> str:
        """The session endpoint URL."""
        return self._endpoint

    async def request(self, session: SyncSession) -> SessionDescriptor:
        """Request a session descriptor.

        Args:
            session: Caller credentials.

        Returns:
            Descriptor holding the channel URL.

        Raises:
            InvalidSession: auth_key or auth_id missing (no request is made).
            RequestRejected: Endpoint answered with a non-2xx status.
            NetworkUnavailable: No response (unreachable, timeout).
            InternalFault: Any other local fault.
        """
        if session is None or not session.is_complete():
            raise InvalidSession("Session requires both auth_key and auth_id")

        if self._session is None:
            self._session = aiohttp.ClientSession()

        logger.info(f"Requesting sync session for {session.auth_id}")

        try:
            async with self._session.post(
                self._endpoint,
                json=session.to_payload(),
                timeout=aiohttp.ClientTimeout(total=self._timeout),
            ) as resp:
                if not 200 <= resp.status < 300:
                    text = await self._read_error_text(resp)
                    logger.warning(f"Session endpoint returned {resp.status}: {text[:100]}")
                    raise RequestRejected(resp.status)
                body = await resp.json(content_type=None)
        except aiohttp.InvalidURL as e:
            raise InternalFault(f"Invalid session endpoint: {e}") from e
        except aiohttp.ClientConnectionError as e:
            logger.warning(f"Session endpoint unreachable: {e}")
            raise NetworkUnavailable(str(e) or "Session endpoint unreachable") from e
        except asyncio.TimeoutError as e:
            logger.warning("Session request timed out")
            raise NetworkUnavailable("Session request timed out") from e
        except (aiohttp.ClientError, json.JSONDecodeError, ValueError, TypeError) as e:
            raise InternalFault(f"Session request failed: {e}") from e

        return self._parse_descriptor(body)

    async def _read_error_text(self, resp: aiohttp.ClientResponse) -> str:
        """Best-effort body of an error response, for logging only."""
        try:
            return await resp.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError, UnicodeDecodeError, LookupError) as e:
            logger.debug(f"Could not read error body: {e}")
            return ""

    def _parse_descriptor(self, body) -> SessionDescriptor:
        """Extract the channel URL from a response body.

        Raises:
            InternalFault: If the body has no usable URL field.
        """
        if not isinstance(body, dict):
            raise InternalFault("Session response is not a JSON object")

        url = body.get(self._url_field)
        if not isinstance(url, str) or not url:
            raise InternalFault(f"Session response has no '{self._url_field}' field")

        logger.debug("Session descriptor received")
        return SessionDescriptor(channel_url=url)

    async def close(self) -> None:
        """Close the HTTP session if owned."""
        if self._owns_session and self._session:
            await self._session.close()
            self._session = None
