"""Session-related data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError

DEFAULT_LANGUAGE_CODE = "en-US"
DEFAULT_SAMPLE_RATE = 16000


class SessionState(Enum):
    """Lifecycle state of a streaming session."""
    IDLE = "idle"
    STARTING = "starting"
    STREAMING = "streaming"
    STOPPING = "stopping"
    CLOSED = "closed"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (SessionState.CLOSED, SessionState.ERRORED)


class StartStreamingPayload(BaseModel):
    """Body of an inbound ``start-streaming`` control message."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    language_code: Optional[str] = Field(default=None, alias="languageCode", min_length=1)
    # Older clients send ``language`` instead of ``languageCode``
    language: Optional[str] = Field(default=None, min_length=1)
    sample_rate: Optional[int] = Field(default=None, alias="sampleRate", gt=0)


@dataclass(frozen=True)
class StreamingConfig:
    """Recognition settings for one session."""
    language_code: str = DEFAULT_LANGUAGE_CODE
    sample_rate: int = DEFAULT_SAMPLE_RATE
    model: Optional[str] = None  # filled in by the recognition model policy

    @classmethod
    def from_payload(cls,
                     payload: Optional[Dict[str, Any]],
                     default_language: str = DEFAULT_LANGUAGE_CODE,
                     default_sample_rate: int = DEFAULT_SAMPLE_RATE) -> "StreamingConfig":
        """Build a config from a ``start-streaming`` payload, applying defaults.

        Raises:
            ValidationError: If the payload is not a mapping or has invalid values
        """
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ValidationError("start-streaming payload must be an object")

        try:
            parsed = StartStreamingPayload.model_validate(payload)
        except PydanticValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ValidationError(f"Invalid start-streaming payload: {problems}") from e

        return cls(
            language_code=parsed.language_code or parsed.language or default_language,
            sample_rate=parsed.sample_rate or default_sample_rate,
        )


@dataclass
class SessionInfo:
    """Point-in-time description of a streaming session."""
    session_id: str
    state: SessionState
    created_at: datetime
    config: Optional[StreamingConfig] = None
    chunks_forwarded: int = 0
    chunks_dropped: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "state": self.state.value,
            "created_at": self.created_at.isoformat(),
            "language_code": self.config.language_code if self.config else None,
            "sample_rate": self.config.sample_rate if self.config else None,
            "model": self.config.model if self.config else None,
            "chunks_forwarded": self.chunks_forwarded,
            "chunks_dropped": self.chunks_dropped,
        }


@dataclass(frozen=True)
class StateTransition:
    """A session moved from one lifecycle state to another."""
    session_id: str
    previous: SessionState
    current: SessionState
    timestamp: datetime = field(default_factory=datetime.now)
