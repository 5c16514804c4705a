"""Services layer for SonoFlow application logic."""

from .streaming_session import StreamingSession
from .connection import ClientConnection
from .session_registry import SessionRegistry
from .enhancement_service import EnhancementService

__all__ = [
    "StreamingSession",
    "ClientConnection",
    "SessionRegistry",
    "EnhancementService",
]
