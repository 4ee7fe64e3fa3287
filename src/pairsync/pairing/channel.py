"""Pairing channel over a WebSocket connection."""

import asyncio
import logging
from typing import Any, Callable, Optional

import aiohttp

from pairsync.errors import ChannelError, ProtocolViolation
from pairsync.pairing.frames import PairingFrame, decode_frame

logger = logging.getLogger(__name__)


class PairingChannel:
    """Receive-only WebSocket connection delivering pairing frames.

    Lifecycle hooks are registered before open() and may be sync or async:

        channel = PairingChannel()
        channel.on_open(handle_open)
        channel.on_frame(handle_frame)
        channel.on_error(handle_error)
        channel.on_close(handle_close)
        await channel.open(descriptor.channel_url)

    One instance owns at most one connection. on_close fires exactly once,
    whether the remote closed, the transport failed or close() was called.
    on_error fires just before on_close on abnormal termination. The channel
    never reconnects.
    """

    def __init__(
        self,
        http_session: Optional[aiohttp.ClientSession] = None,
        strict: bool = False,
    ):
        """Initialize channel.

        Args:
            http_session: Optional aiohttp session (for testing).
            strict: Reject empty and binary frames as protocol violations.
        """
        self._session = http_session
        self._owns_session = http_session is None
        self._strict = strict
        self._ws: Any = None
        self._receive_task: Optional[asyncio.Task] = None
        self._opened = False
        self._closed = False
        self._close_event = asyncio.Event()

        self._open_handler: Optional[Callable[[], Any]] = None
        self._frame_handler: Optional[Callable[[PairingFrame], Any]] = None
        self._close_handler: Optional[Callable[[], Any]] = None
        self._error_handler: Optional[Callable[[ChannelError], Any]] = None

    # =========================================================================
    # Hooks
    # =========================================================================

    def on_open(self, handler: Callable[[], Any]) -> None:
        """Set handler called once the connection is established."""
        self._open_handler = handler

    def on_frame(self, handler: Callable[[PairingFrame], Any]) -> None:
        """Set handler called for every decoded frame."""
        self._frame_handler = handler

    def on_close(self, handler: Callable[[], Any]) -> None:
        """Set handler called when the channel closes."""
        self._close_handler = handler

    def on_error(self, handler: Callable[[ChannelError], Any]) -> None:
        """Set handler called before close on abnormal termination."""
        self._error_handler = handler

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_open(self) -> bool:
        """Connection established and not yet closed."""
        return self._ws is not None and not self._closed

    @property
    def closed(self) -> bool:
        """Channel has closed."""
        return self._closed

    async def open(self, url: str) -> "PairingChannel":
        """Connect to the channel URL and start receiving frames.

        Connection failures are reported through on_error and on_close,
        not raised.

        Args:
            url: Channel URL from the session descriptor.

        Returns:
            This channel.

        Raises:
            ChannelError: If this channel was already opened.
        """
        if self._opened:
            raise ChannelError("Channel already opened")
        self._opened = True

        if self._session is None:
            self._session = aiohttp.ClientSession()

        logger.info("Opening pairing channel")
        try:
            ws = await self._session.ws_connect(url)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.warning(f"Pairing channel connect failed: {e}")
            await self._do_close(ChannelError(f"Connection failed: {e}"))
            return self

        self._ws = ws
        if self._closed:
            # close() was called while connecting
            await ws.close()
            return self

        logger.info("Pairing channel open")
        await self._dispatch(self._open_handler)
        if not self._closed:
            self._receive_task = asyncio.create_task(self._receive_loop())
        return self

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        await self._do_close()

    async def wait_closed(self) -> None:
        """Wait for the channel to close."""
        await self._close_event.wait()

    # =========================================================================
    # Internal methods
    # =========================================================================

    async def _dispatch(self, handler: Optional[Callable[..., Any]], *args: Any) -> None:
        """Call a hook, awaiting it if it returns a coroutine."""
        if handler is None:
            return
        try:
            result = handler(*args)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(f"Error in channel handler: {e}")

    async def _do_close(self, error: Optional[ChannelError] = None) -> None:
        """Internal close implementation."""
        if self._closed:
            return
        self._closed = True

        if error is not None:
            await self._dispatch(self._error_handler, error)

        if self._receive_task and self._receive_task is not asyncio.current_task():
            self._receive_task.cancel()
            try:
                await self._receive_task
            except asyncio.CancelledError:
                pass
        self._receive_task = None

        if self._ws is not None and not self._ws.closed:
            try:
                await self._ws.close()
            except Exception as e:
                logger.debug(f"Error closing WebSocket: {e}")

        if self._owns_session and self._session:
            await self._session.close()
            self._session = None

        await self._dispatch(self._close_handler)
        self._close_event.set()
        logger.info("Pairing channel closed")

    async def _receive_loop(self) -> None:
        """Background task decoding inbound messages until the socket ends.

        A close frame from the server ends the channel normally. The socket
        reporting CLOSED without one means the connection was lost.
        """
        logger.debug("Pairing channel receive loop started")
        error: Optional[ChannelError] = None

        try:
            while not self._closed:
                msg = await self._ws.receive()

                if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                    try:
                        frame = decode_frame(msg.data, strict=self._strict)
                    except ProtocolViolation as e:
                        logger.warning(f"Rejected pairing frame: {e}")
                        error = e
                        break
                    await self._dispatch(self._frame_handler, frame)

                elif msg.type == aiohttp.WSMsgType.ERROR:
                    exc = self._ws.exception() or msg.data
                    error = ChannelError(f"WebSocket error: {exc}")
                    break

                elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSING):
                    logger.debug(f"Pairing channel closed by server ({msg.data})")
                    break

                elif msg.type == aiohttp.WSMsgType.CLOSED:
                    if not self._closed:
                        exc = self._ws.exception()
                        error = ChannelError(
                            f"Connection lost: {exc}" if exc else "Connection lost"
                        )
                    break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Receive loop error: {e}")
            error = ChannelError(str(e))
        finally:
            logger.debug("Pairing channel receive loop ended")

        await self._do_close(error)
