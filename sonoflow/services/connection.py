"""Per-connection dispatcher between the client transport and its streaming session."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from ..errors import ValidationError
from ..models.events import SessionEvent
from ..models.session import DEFAULT_LANGUAGE_CODE, DEFAULT_SAMPLE_RATE, StreamingConfig
from ..transcription.base import AbstractRecognitionBackend
from ..transcription.publisher import SessionLifecyclePublisher
from .streaming_session import StreamingSession

logger = logging.getLogger(__name__)

START_STREAMING = "start-streaming"
STOP_STREAMING = "stop-streaming"

SendCallback = Callable[[Dict[str, Any]], Awaitable[None]]


class ClientConnection:
    """Routes one client's control messages and audio frames to its current session.

    A connection always has a current session. Once that session has closed
    or errored, the next ``start-streaming`` replaces it with a fresh one, so a
    client can restart on the same connection.
    """

    def __init__(self,
                 backend: AbstractRecognitionBackend,
                 send: SendCallback,
                 lifecycle_publisher: Optional[SessionLifecyclePublisher] = None,
                 default_language: str = DEFAULT_LANGUAGE_CODE,
                 default_sample_rate: int = DEFAULT_SAMPLE_RATE):
        """Initialize client connection.

        Args:
            backend: Recognition backend shared by all sessions
            send: Coroutine writing one outbound frame to the client
            lifecycle_publisher: Receives state transitions of every session
            default_language: Language used when ``start-streaming`` names none
            default_sample_rate: Sample rate used when ``start-streaming`` names none
        """
        self.backend = backend
        self.default_language = default_language
        self.default_sample_rate = default_sample_rate

        self._send = send
        self._lifecycle = lifecycle_publisher
        self._start_task: Optional[asyncio.Task] = None
        self._closed = False
        self.session = self._new_session()

    def _new_session(self) -> StreamingSession:
        session = StreamingSession(
            backend=self.backend,
            emit=self._emit,
            lifecycle_publisher=self._lifecycle,
        )
        logger.debug(f"Created session {session.session_id}")
        return session

    async def _emit(self, event: SessionEvent) -> None:
        if self._closed:
            logger.debug(f"Connection closed, discarding {event.event_type} for {event.session_id}")
            return
        await self._send(event.to_message())

    async def _send_error(self, message: str) -> None:
        await self._emit(SessionEvent.error(self.session.session_id, message))

    async def handle_control(self, message: Any) -> None:
        """Dispatch one inbound control message (``{"event": ..., "data": ...}``)."""
        if not isinstance(message, dict) or not isinstance(message.get("event"), str):
            logger.warning(f"Malformed control message: {message!r}")
            await self._send_error("Malformed control message")
            return

        event = message["event"]
        if event == START_STREAMING:
            await self._start(message.get("data"))
        elif event == STOP_STREAMING:
            await self._stop()
        else:
            logger.warning(f"Unknown control event: {event}")
            await self._send_error(f"Unknown event: {event}")

    async def _start(self, payload: Any) -> None:
        try:
            config = StreamingConfig.from_payload(
                payload,
                default_language=self.default_language,
                default_sample_rate=self.default_sample_rate,
            )
        except ValidationError as e:
            logger.warning(f"Rejected start-streaming: {e}")
            await self._send_error(e.message)
            return

        if self._start_task is not None and not self._start_task.done():
            await self._send_error("Streaming is already starting")
            return

        if self.session.state.is_terminal:
            self.session = self._new_session()

        # Opening the channel runs in the background so the transport keeps
        # reading; audio that arrives before the session streams is dropped.
        self._start_task = asyncio.create_task(self.session.start(config))
        self._start_task.add_done_callback(self._on_start_done)

    def _on_start_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Starting session {self.session.session_id} failed: {error}", exc_info=error)

    async def _stop(self) -> None:
        start_task, self._start_task = self._start_task, None
        if start_task is not None:
            await asyncio.wait({start_task})
        await self.session.stop()

    async def handle_audio(self, chunk: bytes) -> None:
        """Hand one audio frame to the current session."""
        await self.session.send_audio(chunk)

    async def close(self) -> None:
        """Transport went away: tear the current session down."""
        if self._closed:
            return
        self._closed = True

        start_task, self._start_task = self._start_task, None
        if start_task is not None and not start_task.done():
            # Let the session see the disconnect and close a channel that opens late
            await self.session.disconnect()
            await asyncio.wait({start_task})
        await self.session.disconnect()
