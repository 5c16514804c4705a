"""Pytest configuration and fixtures for SonoFlow tests."""

import asyncio
import logging
from typing import List, Optional

import numpy as np
import pytest

from sonoflow.config import SonoFlowConfig
from sonoflow.models.events import SessionEvent
from sonoflow.models.session import StreamingConfig
from sonoflow.transcription.base import AbstractRecognitionBackend, RecognitionChannel
from sonoflow.errors import UpstreamError


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class FakeRecognitionChannel(RecognitionChannel):
    """Recognition channel that records audio and lets tests publish results."""

    def __init__(self):
        super().__init__()
        self.written: List[bytes] = []
        self.ended = False
        self.closed = False
        self.close_calls = 0

    async def write(self, chunk: bytes) -> None:
        if self.closed or self.ended:
            raise UpstreamError("write on finished channel")
        self.written.append(chunk)

    async def end(self) -> None:
        self.ended = True
        await self.publish_end()

    async def close(self) -> None:
        self.close_calls += 1
        self.closed = True


class FakeRecognitionBackend(AbstractRecognitionBackend):
    """Recognition backend handing out fake channels."""

    service_name = "Fake Speech"

    def __init__(self, configured: bool = True, open_error: Optional[Exception] = None):
        self.configured = configured
        self.open_error = open_error
        self.opened_configs: List[StreamingConfig] = []
        self.channels: List[FakeRecognitionChannel] = []
        # When set, open() waits for it before returning the channel
        self.gate: Optional[asyncio.Event] = None

    def is_configured(self) -> bool:
        return self.configured

    async def open(self, config: StreamingConfig) -> FakeRecognitionChannel:
        self.opened_configs.append(config)
        if self.gate is not None:
            await self.gate.wait()
        if self.open_error is not None:
            raise self.open_error
        channel = FakeRecognitionChannel()
        self.channels.append(channel)
        return channel


class EventCollector:
    """Emit callback that keeps every session event."""

    def __init__(self):
        self.events: List[SessionEvent] = []

    async def __call__(self, event: SessionEvent) -> None:
        self.events.append(event)

    def types(self) -> List[str]:
        return [event.event_type for event in self.events]

    def of_type(self, event_type: str) -> List[SessionEvent]:
        return [event for event in self.events if event.event_type == event_type]


async def wait_until(predicate, timeout: float = 1.0) -> None:
    """Yield to the event loop until ``predicate()`` holds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("Condition not met before timeout")
        await asyncio.sleep(0.005)


@pytest.fixture
def fake_backend():
    return FakeRecognitionBackend()


@pytest.fixture
def unconfigured_backend():
    return FakeRecognitionBackend(configured=False)


@pytest.fixture
def collector():
    return EventCollector()


@pytest.fixture
def test_config(tmp_path):
    """Configuration that keeps logs and credentials out of the environment."""
    return SonoFlowConfig.from_dict({
        "streaming": {"default_language": "en-US", "default_sample_rate": 16000},
        "enhancement": {"default_procedure": "echocardiogram", "default_language": "en-US"},
        "logging": {"file_path": str(tmp_path / "sonoflow.log"), "console_output": False},
    })


@pytest.fixture
def sample_audio_chunk():
    """Generate a sample audio chunk for testing."""
    # 1024 samples of 16-bit audio (440 Hz sine wave)
    sample_rate = 16000
    duration = 1024 / sample_rate
    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * 440 * t)
    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def audio_chunks():
    """Generate a sequence of distinct audio chunks."""
    def generate(count: int = 5, samples: int = 512):
        rng = np.random.default_rng(seed=7)
        return [
            (rng.uniform(-1, 1, samples) * 32767).astype(np.int16).tobytes()
            for _ in range(count)
        ]

    return generate


@pytest.fixture
def wait_for():
    """Awaitable helper: ``await wait_for(lambda: condition)``."""
    return wait_until
