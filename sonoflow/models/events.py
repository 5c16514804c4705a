"""Outbound session events relayed to the client over the transport."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

from .transcription import TranscriptEvent

STREAMING_STARTED = "streaming-started"
STREAMING_TRANSCRIPT = "streaming-transcript"
STREAMING_ERROR = "streaming-error"
STREAMING_STOPPED = "streaming-stopped"


@dataclass
class SessionEvent:
    """Event emitted by a streaming session."""
    session_id: str
    event_type: str
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    @classmethod
    def started(cls, session_id: str) -> "SessionEvent":
        return cls(session_id, STREAMING_STARTED, {"message": "Streaming started successfully"})

    @classmethod
    def transcript(cls, session_id: str, event: TranscriptEvent) -> "SessionEvent":
        return cls(session_id, STREAMING_TRANSCRIPT, event.to_payload())

    @classmethod
    def error(cls, session_id: str, message: str) -> "SessionEvent":
        return cls(session_id, STREAMING_ERROR, {"error": message})

    @classmethod
    def stopped(cls, session_id: str) -> "SessionEvent":
        return cls(session_id, STREAMING_STOPPED, {"message": "Streaming stopped"})

    def to_message(self) -> Dict[str, Any]:
        """Transport frame for this event."""
        return {"event": self.event_type, "data": self.data}
