"""Data models for the SonoFlow application."""

from .transcription import TranscriptEvent
from .session import (
    SessionState,
    StreamingConfig,
    StartStreamingPayload,
    SessionInfo,
    StateTransition,
)
from .events import SessionEvent
from .enhancement import (
    EnhancementRequest,
    EnhancementResult,
    FindingsResult,
)

__all__ = [
    "TranscriptEvent",
    "SessionState",
    "StreamingConfig",
    "StartStreamingPayload",
    "SessionInfo",
    "StateTransition",
    "SessionEvent",
    "EnhancementRequest",
    "EnhancementResult",
    "FindingsResult",
]
