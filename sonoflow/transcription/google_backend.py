"""Google Speech-to-Text streaming recognition backend."""

import asyncio
import logging
from typing import Optional, AsyncIterator

from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.auth import exceptions as auth_exceptions
from google.oauth2 import service_account

from .base import AbstractRecognitionBackend, RecognitionChannel, DEFAULT_MAX_PENDING_EVENTS
from .policy import select_recognition_model
from ..config import SonoFlowConfig
from ..errors import ConfigurationError, UpstreamError
from ..models.session import StreamingConfig
from ..models.transcription import TranscriptEvent

logger = logging.getLogger(__name__)

DEFAULT_MAX_PENDING_AUDIO = 100

CREDENTIALS_MISSING_MESSAGE = (
    "Google Cloud credentials not configured. "
    "Please set GOOGLE_APPLICATION_CREDENTIALS or GOOGLE_CLOUD_API_KEY"
)


class GoogleStreamingChannel(RecognitionChannel):
    """One ``streaming_recognize`` call.

    Audio chunks are queued and fed to the request stream in write order; a
    pump task turns the response stream into transcript events. The audio
    queue is bounded, so ``write`` suspends while the request stream is behind.
    """

    def __init__(self,
                 client: speech.SpeechAsyncClient,
                 streaming_config: speech.StreamingRecognitionConfig,
                 max_pending_events: int = DEFAULT_MAX_PENDING_EVENTS,
                 max_pending_audio: int = DEFAULT_MAX_PENDING_AUDIO):
        super().__init__(max_pending_events)
        self._client = client
        self._streaming_config = streaming_config
        self._audio: "asyncio.Queue[Optional[bytes]]" = asyncio.Queue(maxsize=max_pending_audio)
        self._pump_task: Optional[asyncio.Task] = None
        self._ended = False
        self._closed = False

    async def _requests(self) -> AsyncIterator[speech.StreamingRecognizeRequest]:
        # The first request carries only the configuration
        yield speech.StreamingRecognizeRequest(streaming_config=self._streaming_config)
        while True:
            chunk = await self._audio.get()
            if chunk is None:
                return
            yield speech.StreamingRecognizeRequest(audio_content=chunk)

    async def start(self) -> None:
        """Open the streaming call and start pumping responses."""
        try:
            responses = await self._client.streaming_recognize(requests=self._requests())
        except gax_exceptions.GoogleAPICallError as e:
            logger.error(f"Google STT streaming call failed to open: {e}")
            raise UpstreamError(f"Google Speech streaming failed to open: {e.message}") from e
        self._pump_task = asyncio.create_task(self._pump(responses))

    async def _pump(self, responses) -> None:
        try:
            async for response in responses:
                if not response.results:
                    continue
                result = response.results[0]
                if not result.alternatives:
                    continue
                alternative = result.alternatives[0]
                logger.debug(f"Transcript (final={result.is_final}, conf={alternative.confidence}): "
                             f"'{alternative.transcript}'")
                await self.publish(TranscriptEvent(
                    transcript=alternative.transcript,
                    is_final=result.is_final,
                    confidence=alternative.confidence,
                ))
        except gax_exceptions.GoogleAPICallError as e:
            logger.error(f"Google STT streaming error: {e}")
            await self.publish_error(e.message or str(e))
            return
        except Exception as e:
            # Transport failures that api_core did not wrap
            logger.error(f"Google STT stream failed: {e}", exc_info=True)
            await self.publish_error(str(e) or e.__class__.__name__)
            return
        await self.publish_end()

    async def _enqueue(self, item: Optional[bytes]) -> bool:
        """Queue one request item, giving up once the response pump has finished."""
        put = asyncio.ensure_future(self._audio.put(item))
        waiters = {put}
        if self._pump_task is not None:
            waiters.add(self._pump_task)
        try:
            await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            put.cancel()
            raise
        if not put.done():
            put.cancel()
            return False
        return True

    async def write(self, chunk: bytes) -> None:
        if self._ended:
            raise UpstreamError("Recognition stream already received end-of-audio")
        if not await self._enqueue(chunk):
            raise UpstreamError("Recognition stream is no longer accepting audio")

    async def end(self) -> None:
        if not self._ended:
            self._ended = True
            await self._enqueue(None)
        if self._pump_task is not None:
            await asyncio.wait({self._pump_task})

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._ended = True
        if self._pump_task is not None and not self._pump_task.done():
            self._pump_task.cancel()
            await asyncio.wait({self._pump_task})
        # Unsent audio is discarded on close
        while not self._audio.empty():
            self._audio.get_nowait()
        self._audio.put_nowait(None)


class GoogleStreamingBackend(AbstractRecognitionBackend):
    """Google Speech-to-Text streaming backend."""

    service_name = "Google Speech-to-Text"

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 api_key: Optional[str] = None,
                 use_enhanced: bool = True,
                 enable_automatic_punctuation: bool = True,
                 interim_results: bool = True,
                 max_pending_events: int = DEFAULT_MAX_PENDING_EVENTS,
                 max_pending_audio: int = DEFAULT_MAX_PENDING_AUDIO):
        """Initialize Google streaming backend.

        Args:
            credentials_path: Path to Google Cloud service account JSON file
            api_key: Google Cloud API key, used when no service account is given
            use_enhanced: Whether to use enhanced models (costs more but better quality)
            enable_automatic_punctuation: Enable automatic punctuation
            interim_results: Emit provisional transcripts as well as final ones
            max_pending_events: Capacity of each channel's result queue
            max_pending_audio: Capacity of each channel's outgoing audio queue
        """
        self.credentials_path = credentials_path
        self.api_key = api_key
        self.use_enhanced = use_enhanced
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.interim_results = interim_results
        self.max_pending_events = max_pending_events
        self.max_pending_audio = max_pending_audio
        self._client: Optional[speech.SpeechAsyncClient] = None

    @classmethod
    def from_config(cls, config: SonoFlowConfig) -> "GoogleStreamingBackend":
        return cls(
            credentials_path=config.get_google_credentials_path(),
            api_key=config.get_google_api_key(),
            use_enhanced=config.get('google_cloud.use_enhanced_model', True),
            enable_automatic_punctuation=config.get('google_cloud.enable_automatic_punctuation', True),
            interim_results=config.get('google_cloud.interim_results', True),
            max_pending_events=config.get('streaming.event_queue_size', DEFAULT_MAX_PENDING_EVENTS),
            max_pending_audio=config.get('streaming.audio_queue_size', DEFAULT_MAX_PENDING_AUDIO),
        )

    def is_configured(self) -> bool:
        return bool(self.credentials_path or self.api_key)

    def _create_client(self) -> speech.SpeechAsyncClient:
        if self.credentials_path:
            logger.info(f"Loading Google credentials from: {self.credentials_path}")
            credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
            logger.info(f"Using Google Cloud project: {credentials.project_id}")
            return speech.SpeechAsyncClient(credentials=credentials)
        logger.info("Using Google Cloud API key authentication")
        return speech.SpeechAsyncClient(client_options={"api_key": self.api_key})

    def _get_client(self) -> speech.SpeechAsyncClient:
        # One client serves every session; each session gets its own call
        if self._client is None:
            try:
                self._client = self._create_client()
            except (FileNotFoundError, ValueError, auth_exceptions.DefaultCredentialsError) as e:
                raise ConfigurationError(f"Google Cloud credentials could not be loaded: {e}") from e
        return self._client

    def build_streaming_config(self, config: StreamingConfig) -> speech.StreamingRecognitionConfig:
        recognition_config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=config.sample_rate,
            language_code=config.language_code,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
            use_enhanced=self.use_enhanced,
            model=config.model or select_recognition_model(config.language_code),
        )
        return speech.StreamingRecognitionConfig(
            config=recognition_config,
            interim_results=self.interim_results,
        )

    async def open(self, config: StreamingConfig) -> GoogleStreamingChannel:
        if not self.is_configured():
            raise ConfigurationError(CREDENTIALS_MISSING_MESSAGE)

        channel = GoogleStreamingChannel(
            client=self._get_client(),
            streaming_config=self.build_streaming_config(config),
            max_pending_events=self.max_pending_events,
            max_pending_audio=self.max_pending_audio,
        )
        await channel.start()
        logger.info(f"Opened {self.service_name} stream: language={config.language_code}, "
                    f"sample_rate={config.sample_rate}, model={config.model}")
        return channel
