"""Streaming transcription session: one recognition channel per client session.

State machine::

    IDLE --start--> STARTING --opened--> STREAMING --stop--> STOPPING --drained--> CLOSED
                        |                    |
                        +----backend error---+--> ERRORED

    any state --disconnect--> CLOSED

A session owns at most one recognition channel and never hands it out.
Audio is only forwarded while STREAMING; chunks arriving in any other state
are dropped and counted, never buffered.
"""

import asyncio
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Awaitable, Callable, Optional

from ..errors import ConfigurationError, UpstreamError
from ..models.events import SessionEvent
from ..models.session import SessionInfo, SessionState, StreamingConfig
from ..transcription.base import AbstractRecognitionBackend, RecognitionChannel
from ..transcription.policy import select_recognition_model
from ..transcription.publisher import SessionLifecyclePublisher

logger = logging.getLogger(__name__)

EmitCallback = Callable[[SessionEvent], Awaitable[None]]


class StreamingSession:
    """Relays one client's audio to a recognition backend and transcripts back."""

    def __init__(self,
                 backend: AbstractRecognitionBackend,
                 emit: EmitCallback,
                 session_id: Optional[str] = None,
                 lifecycle_publisher: Optional[SessionLifecyclePublisher] = None):
        """Initialize streaming session.

        Args:
            backend: Recognition backend used to open the channel
            emit: Coroutine delivering outbound events to the client transport
            session_id: Session identifier (generated when omitted)
            lifecycle_publisher: Receives every state transition
        """
        self.session_id = session_id or uuid.uuid4().hex
        self.backend = backend
        self.created_at = datetime.now()
        self.config: Optional[StreamingConfig] = None
        self.state = SessionState.IDLE
        self.chunks_forwarded = 0
        self.chunks_dropped = 0

        self._emit = emit
        self._lifecycle = lifecycle_publisher
        self._channel: Optional[RecognitionChannel] = None
        self._forward_task: Optional[asyncio.Task] = None
        self._disconnected = False

    @property
    def has_open_channel(self) -> bool:
        return self._channel is not None

    def get_info(self) -> SessionInfo:
        return SessionInfo(
            session_id=self.session_id,
            state=self.state,
            created_at=self.created_at,
            config=self.config,
            chunks_forwarded=self.chunks_forwarded,
            chunks_dropped=self.chunks_dropped,
        )

    def _transition(self, new_state: SessionState) -> None:
        previous = self.state
        if previous is new_state:
            return
        self.state = new_state
        logger.info(f"Session {self.session_id}: {previous.value} -> {new_state.value}")
        if self._lifecycle is not None:
            self._lifecycle.publish_transition(self.session_id, previous, new_state)

    async def start(self, config: StreamingConfig) -> bool:
        """Open the recognition channel and begin streaming.

        Returns:
            True if the session is now streaming
        """
        if self.state is not SessionState.IDLE:
            logger.warning(f"Session {self.session_id}: start ignored in state {self.state.value}")
            await self._emit(SessionEvent.error(
                self.session_id, f"Cannot start streaming while session is {self.state.value}"
            ))
            return False

        if not self.backend.is_configured():
            return await self._reject_configuration(
                ConfigurationError("Recognition backend credentials are not configured")
            )

        self.config = replace(config, model=select_recognition_model(config.language_code))
        self._transition(SessionState.STARTING)

        try:
            channel = await self.backend.open(self.config)
        except ConfigurationError as e:
            if self._disconnected:
                return False
            self._transition(SessionState.IDLE)
            return await self._reject_configuration(e)
        except UpstreamError as e:
            if self._disconnected:
                return False
            logger.error(f"Session {self.session_id}: failed to open recognition stream: {e}")
            self._transition(SessionState.ERRORED)
            await self._emit(SessionEvent.error(self.session_id, e.message))
            return False
        except Exception as e:
            # Transport failures the backend did not wrap
            if self._disconnected:
                return False
            logger.error(f"Session {self.session_id}: unexpected error opening recognition stream: {e}",
                         exc_info=True)
            self._transition(SessionState.ERRORED)
            await self._emit(SessionEvent.error(self.session_id, str(e) or e.__class__.__name__))
            return False

        if self._disconnected:
            # The client went away while the channel was opening
            await channel.close()
            return False

        self._channel = channel
        self._transition(SessionState.STREAMING)
        await self._emit(SessionEvent.started(self.session_id))
        if self._disconnected:
            return False
        self._forward_task = asyncio.create_task(self._forward_transcripts(channel))
        logger.info(f"Voice streaming started for session {self.session_id} "
                    f"({self.config.language_code}, {self.config.model})")
        return True

    async def _reject_configuration(self, error: ConfigurationError) -> bool:
        logger.error(f"Session {self.session_id}: {error}")
        await self._emit(SessionEvent.error(self.session_id, error.message))
        return False

    async def send_audio(self, chunk: bytes) -> bool:
        """Forward one audio chunk, or drop it outside the streaming window.

        Returns:
            True if the chunk was forwarded
        """
        if self.state is not SessionState.STREAMING:
            self.chunks_dropped += 1
            logger.debug(f"Session {self.session_id}: dropped {len(chunk)}-byte chunk in state "
                         f"{self.state.value} ({self.chunks_dropped} dropped)")
            return False

        try:
            await self._channel.write(chunk)
        except UpstreamError as e:
            await self._fail(e)
            return False

        self.chunks_forwarded += 1
        return True

    async def _forward_transcripts(self, channel: RecognitionChannel) -> None:
        try:
            async for event in channel.events():
                await self._emit(SessionEvent.transcript(self.session_id, event))
        except UpstreamError as e:
            if self.state is SessionState.STOPPING:
                logger.error(f"Session {self.session_id}: backend error while stopping: {e}")
                await self._emit(SessionEvent.error(self.session_id, e.message))
            else:
                await self._fail(e)
            return

        # Only a stop may end the result stream; anything else leaves a dead channel
        if self.state is SessionState.STREAMING:
            await self._fail(UpstreamError("Recognition stream ended unexpectedly"))

    async def _fail(self, error: UpstreamError) -> None:
        if self.state not in (SessionState.STARTING, SessionState.STREAMING):
            return
        logger.error(f"Session {self.session_id}: recognition stream failed: {error}")
        self._transition(SessionState.ERRORED)
        await self._emit(SessionEvent.error(self.session_id, error.message))
        await self._release_channel()

    async def _release_channel(self) -> None:
        channel, self._channel = self._channel, None
        if channel is not None:
            await channel.close()

    async def stop(self) -> bool:
        """Finish the stream gracefully, forwarding any results still in flight.

        Returns:
            True if the session went through a graceful stop
        """
        if self.state is not SessionState.STREAMING:
            logger.debug(f"Session {self.session_id}: stop ignored in state {self.state.value}")
            return False

        self._transition(SessionState.STOPPING)
        channel = self._channel

        try:
            await channel.end()
        except UpstreamError as e:
            logger.error(f"Session {self.session_id}: error ending recognition stream: {e}")
            await self._emit(SessionEvent.error(self.session_id, e.message))

        if self._forward_task is not None:
            await asyncio.wait({self._forward_task})
            self._forward_task = None

        if self.state is not SessionState.STOPPING:
            # Disconnected while draining
            return False

        await self._release_channel()
        self._transition(SessionState.CLOSED)
        await self._emit(SessionEvent.stopped(self.session_id))
        logger.info(f"Voice streaming stopped for session {self.session_id}")
        return True

    async def disconnect(self) -> None:
        """Tear the session down immediately. Safe to call any number of times."""
        if self._disconnected:
            return
        self._disconnected = True

        forward_task, self._forward_task = self._forward_task, None
        if forward_task is not None and not forward_task.done():
            forward_task.cancel()
            await asyncio.wait({forward_task})

        await self._release_channel()
        self._transition(SessionState.CLOSED)
        logger.info(f"Session disconnected: {self.get_info().to_dict()}")
