"""OpenAI Whisper client for batch transcription of recorded dictations."""

import logging
import aiohttp
from typing import Optional

from ..errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

API_KEY_MISSING_MESSAGE = "OpenAI API key not configured. Please add OPENAI_API_KEY to your environment"


class WhisperTranscriber:
    """Sends a complete audio recording to Whisper and returns its transcript."""

    def __init__(self, api_key: Optional[str], model: str = "whisper-1"):
        """Initialize Whisper transcriber.

        Args:
            api_key: OpenAI API key
            model: Transcription model to use
        """
        self.api_key = api_key
        self.model = model
        self.base_url = "https://api.openai.com/v1/audio/transcriptions"

        logger.info(f"WhisperTranscriber initialized with model: {model}")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def transcribe(self,
                         audio: bytes,
                         filename: str = "audio.webm",
                         content_type: str = "application/octet-stream",
                         language: Optional[str] = None) -> str:
        """Transcribe one recording.

        Args:
            audio: Raw bytes of the uploaded recording
            filename: Original file name, used by the API to detect the format
            content_type: MIME type of the recording
            language: Optional ISO-639-1 language hint

        Returns:
            Transcript text

        Raises:
            ConfigurationError: If no API key is configured
            UpstreamError: If the API call fails
        """
        if not self.api_key:
            raise ConfigurationError(API_KEY_MISSING_MESSAGE)

        form = aiohttp.FormData()
        form.add_field("file", audio, filename=filename, content_type=content_type)
        form.add_field("model", self.model)
        if language:
            form.add_field("language", language)

        headers = {"Authorization": f"Bearer {self.api_key}"}

        logger.debug(f"Sending {len(audio)} bytes to Whisper (language={language})")
        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(self.base_url, headers=headers, data=form) as response:
                    if response.status != 200:
                        error_text = await response.text()
                        logger.error(f"Whisper API error: {response.status} - {error_text}")
                        raise UpstreamError(
                            f"Whisper API error: {response.status}",
                            status=response.status,
                            details=error_text,
                        )

                    result = await response.json()
                    return result["text"]
        except aiohttp.ClientError as e:
            logger.error(f"Whisper request failed: {e}")
            raise UpstreamError(f"Whisper request failed: {e}", details=str(e)) from e
