"""Sync controller orchestrates a pairing session.

Coordinates the session request, the pairing channel and the state
machine, and notifies the UI collaborator of every change.
"""

import asyncio
import logging
from typing import Callable, Optional

from pairsync.errors import (
    InternalFault,
    PairSyncError,
    RequestError,
    SessionAlreadyActive,
)
from pairsync.pairing.channel import PairingChannel
from pairsync.pairing.requester import SessionRequester
from pairsync.pairing.session import SyncSession
from pairsync.pairing.state_machine import (
    ChannelEvent,
    Closed,
    Errored,
    FrameReceived,
    Opened,
    PairingStateMachine,
)
from pairsync.protocols import ProtocolState, StateChangeListener

logger = logging.getLogger(__name__)


class SyncController:
    """Public entry point for running a pairing session.

    One session at a time: start() while a session is in flight raises
    SessionAlreadyActive. Every exit path (completion, request failure,
    channel close, cancel, timeout) releases the channel.

    Channel events are tagged with the generation of the session that
    opened the channel; events from a cancelled or superseded session are
    dropped.
    """

    def __init__(
        self,
        requester: SessionRequester,
        on_state_change: Optional[StateChangeListener] = None,
        channel_factory: Optional[Callable[[], PairingChannel]] = None,
        session_timeout: Optional[float] = None,
    ):
        """Initialize controller.

        Args:
            requester: Obtains session descriptors.
            on_state_change: UI collaborator notified on state or code changes.
            channel_factory: Builds a fresh PairingChannel per session.
            session_timeout: Seconds before an unfinished session is cancelled.
                None waits indefinitely.
        """
        self._requester = requester
        self._listener = on_state_change
        self._channel_factory = channel_factory or PairingChannel
        self._session_timeout = session_timeout

        self._machine = PairingStateMachine()
        self._channel: Optional[PairingChannel] = None
        self._request_task: Optional[asyncio.Task] = None
        self._timeout_task: Optional[asyncio.Task] = None
        self._generation = 0
        self._finished = asyncio.Event()

        self.last_error: Optional[PairSyncError] = None

    @property
    def state(self) -> ProtocolState:
        """Current protocol state."""
        return self._machine.state

    @property
    def code(self) -> Optional[str]:
        """Current pairing code."""
        return self._machine.code

    @property
    def channel(self) -> Optional[PairingChannel]:
        """Channel of the running session, if any."""
        return self._channel

    async def start(self, session: SyncSession) -> None:
        """Start a new pairing session.

        Returns once the channel is open, or once it failed to open (the
        state is then DISCONNECTED).

        Args:
            session: Caller credentials.

        Raises:
            SessionAlreadyActive: A session is still in flight.
            RequestError: The session request failed; state is FAILED.
        """
        if self._machine.state.is_active:
            raise SessionAlreadyActive(
                f"Pairing session already {self._machine.state.value}"
            )

        self._generation += 1
        generation = self._generation
        self._finished.clear()
        self.last_error = None

        if self._machine.state != ProtocolState.IDLE:
            self._machine.reset()
            await self._notify()
        self._machine.begin_request()
        await self._notify()

        if self._session_timeout is not None:
            self._timeout_task = asyncio.create_task(self._expire(generation))

        self._request_task = asyncio.create_task(self._requester.request(session))
        try:
            descriptor = await self._request_task
        except asyncio.CancelledError:
            if generation == self._generation:
                # start() itself was cancelled
                await self.cancel()
                raise
            logger.info("Session request aborted")
            return
        except Exception as e:
            if generation != self._generation:
                logger.debug(f"Discarding result of aborted request: {e}")
                return
            self._request_task = None
            error = e if isinstance(e, RequestError) else InternalFault(str(e))
            logger.warning(f"Session request failed: {type(error).__name__}: {error}")
            self._machine.fail()
            self.last_error = error
            await self._notify(error)
            await self._finish()
            if error is e:
                raise
            raise error from e

        if generation != self._generation:
            logger.debug("Discarding descriptor of aborted request")
            return
        self._request_task = None

        channel = self._channel_factory()
        self._channel = channel
        self._wire(channel, generation)
        await channel.open(descriptor.channel_url)

    async def cancel(self) -> None:
        """Cancel the running session.

        Aborts an in-flight request, closes the channel and forces
        DISCONNECTED. No-op unless a session is in flight.
        """
        if not self._machine.state.is_active:
            logger.debug(f"cancel() ignored in state {self._machine.state.value}")
            return

        logger.info(f"Cancelling pairing session ({self._machine.state.value})")
        self._generation += 1

        if self._request_task is not None and not self._request_task.done():
            self._request_task.cancel()
        self._request_task = None

        self._machine.force_disconnect()
        await self._notify()
        await self._finish()

    async def wait_finished(self, timeout: Optional[float] = None) -> ProtocolState:
        """Wait until the session is COMPLETE, DISCONNECTED or FAILED.

        Args:
            timeout: Seconds to wait. None waits indefinitely.

        Returns:
            The final state.

        Raises:
            asyncio.TimeoutError: If the timeout expires first.
        """
        if self._machine.state.is_active:
            await asyncio.wait_for(self._finished.wait(), timeout)
        return self._machine.state

    # =========================================================================
    # Internal methods
    # =========================================================================

    def _wire(self, channel: PairingChannel, generation: int) -> None:
        """Route channel hooks into the state machine."""

        async def handle(event: ChannelEvent, error: Optional[PairSyncError] = None):
            if generation != self._generation:
                logger.debug(f"Dropping stale channel event: {type(event).__name__}")
                return
            await self._apply(event, error)

        channel.on_open(lambda: handle(Opened()))
        channel.on_frame(lambda frame: handle(FrameReceived(frame)))
        channel.on_error(lambda error: handle(Errored(), error))
        channel.on_close(lambda: handle(Closed()))

    async def _apply(
        self, event: ChannelEvent, error: Optional[PairSyncError] = None
    ) -> None:
        """Apply a channel event and notify on change."""
        before = self._machine.state
        if not self._machine.apply(event):
            return

        caused_disconnect = (
            error is not None
            and before != ProtocolState.DISCONNECTED
            and self._machine.state == ProtocolState.DISCONNECTED
        )
        if caused_disconnect:
            self.last_error = error
        await self._notify(error if caused_disconnect else None)

        if not self._machine.state.is_active:
            await self._finish()

    async def _notify(self, error: Optional[PairSyncError] = None) -> None:
        """Notify the UI collaborator of the current state and code."""
        state = self._machine.state
        logger.info(f"Sync status: {state.value}")
        if self._listener is None:
            return
        try:
            result = self._listener(state, self._machine.code, error)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(f"Error in state change listener: {e}")

    async def _finish(self) -> None:
        """Release session resources and wake wait_finished()."""
        self._finished.set()

        timeout_task = self._timeout_task
        self._timeout_task = None
        if timeout_task is not None and timeout_task is not asyncio.current_task():
            timeout_task.cancel()

        channel = self._channel
        self._channel = None
        if channel is not None:
            await channel.close()

    async def _expire(self, generation: int) -> None:
        """Cancel the session once the session timeout elapses."""
        await asyncio.sleep(self._session_timeout)
        if generation == self._generation and self._machine.state.is_active:
            logger.warning(f"Pairing session timed out after {self._session_timeout}s")
            await self.cancel()
