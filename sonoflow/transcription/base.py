"""Abstract base classes for streaming recognition backends."""

import asyncio
from abc import ABC, abstractmethod
from typing import AsyncIterator, Union
import logging

from ..errors import UpstreamError
from ..models.session import StreamingConfig
from ..models.transcription import TranscriptEvent

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING_EVENTS = 100

_END_OF_STREAM = object()


class RecognitionChannel(ABC):
    """An open recognition stream.

    Audio goes in through ``write``; results come out of ``events``. The
    result side is a bounded queue with exactly one producer (the backend)
    and one consumer (the owning session).
    """

    def __init__(self, max_pending_events: int = DEFAULT_MAX_PENDING_EVENTS):
        self._events: "asyncio.Queue[Union[TranscriptEvent, UpstreamError, object]]" = asyncio.Queue(
            maxsize=max_pending_events
        )

    async def publish(self, event: TranscriptEvent) -> None:
        """Producer side: queue a transcript event, waiting while the queue is full."""
        await self._events.put(event)

    async def publish_error(self, message: str) -> None:
        """Producer side: terminate the stream with a backend error."""
        await self._events.put(UpstreamError(message))

    async def publish_end(self) -> None:
        """Producer side: the backend closed the stream normally."""
        await self._events.put(_END_OF_STREAM)

    async def events(self) -> AsyncIterator[TranscriptEvent]:
        """Consumer side: transcript events in backend order.

        Ends when the backend closes the stream.

        Raises:
            UpstreamError: If the backend failed
        """
        while True:
            item = await self._events.get()
            if item is _END_OF_STREAM:
                return
            if isinstance(item, UpstreamError):
                raise item
            yield item

    @abstractmethod
    async def write(self, chunk: bytes) -> None:
        """Send one audio chunk to the backend."""
        pass

    @abstractmethod
    async def end(self) -> None:
        """Signal end-of-audio and wait until the backend has finished the stream."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Tear the stream down immediately, discarding in-flight results.

        Closing an already closed channel does nothing.
        """
        pass


class AbstractRecognitionBackend(ABC):
    """Abstract base class for streaming recognition backends."""

    service_name = "recognition"

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials needed to open a channel are present."""
        pass

    @abstractmethod
    async def open(self, config: StreamingConfig) -> RecognitionChannel:
        """Open a recognition channel.

        Raises:
            ConfigurationError: If credentials are missing or unusable
            UpstreamError: If the backend refused the stream
        """
        pass
