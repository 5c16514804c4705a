"""Transcription-related data models."""

from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass(frozen=True)
class TranscriptEvent:
    """A partial or final transcript emitted by a recognition backend."""
    transcript: str
    is_final: bool
    confidence: Optional[float] = None

    def to_payload(self) -> Dict[str, Any]:
        """Wire form of the event, as relayed to the client."""
        return {
            "transcript": self.transcript,
            "isFinal": self.is_final,
            "confidence": self.confidence,
        }
