import pytest

from sonoflow.models.session import SessionState
from sonoflow.services.session_registry import SessionRegistry
from sonoflow.services.streaming_session import StreamingSession
from sonoflow.models.session import StreamingConfig
from sonoflow.transcription.publisher import SessionLifecyclePublisher


@pytest.fixture
def registry():
    registry = SessionRegistry()
    yield registry
    registry.shutdown()


@pytest.fixture
def publisher():
    return SessionLifecyclePublisher()


def test_tracks_live_sessions(registry, publisher):
    publisher.publish_transition("a", SessionState.IDLE, SessionState.STARTING)
    publisher.publish_transition("b", SessionState.IDLE, SessionState.STARTING)
    publisher.publish_transition("a", SessionState.STARTING, SessionState.STREAMING)

    assert registry.active_count() == 2
    assert {"session_id": "a", "state": "streaming"} in registry.snapshot()
    assert {"session_id": "b", "state": "starting"} in registry.snapshot()


@pytest.mark.parametrize("terminal", [SessionState.CLOSED, SessionState.ERRORED])
def test_terminal_sessions_are_dropped(registry, publisher, terminal):
    publisher.publish_transition("a", SessionState.IDLE, SessionState.STARTING)
    publisher.publish_transition("a", SessionState.STARTING, terminal)

    assert registry.active_count() == 0
    assert registry.snapshot() == []


def test_shutdown_stops_tracking(publisher):
    registry = SessionRegistry()
    registry.shutdown()

    publisher.publish_transition("a", SessionState.IDLE, SessionState.STARTING)

    assert registry.active_count() == 0


async def test_follows_streaming_session_lifecycle(registry, publisher, fake_backend, collector):
    session = StreamingSession(backend=fake_backend, emit=collector, lifecycle_publisher=publisher)

    await session.start(StreamingConfig())
    assert registry.snapshot() == [{"session_id": session.session_id, "state": "streaming"}]

    await session.stop()
    assert registry.active_count() == 0
