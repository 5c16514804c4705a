"""Transcription module for SonoFlow."""

from .base import AbstractRecognitionBackend, RecognitionChannel
from .google_backend import GoogleStreamingBackend, GoogleStreamingChannel
from .policy import select_recognition_model
from .publisher import SessionLifecyclePublisher, SESSION_LIFECYCLE_TOPIC
from .whisper_client import WhisperTranscriber

__all__ = [
    "AbstractRecognitionBackend",
    "RecognitionChannel",
    "GoogleStreamingBackend",
    "GoogleStreamingChannel",
    "select_recognition_model",
    "SessionLifecyclePublisher",
    "SESSION_LIFECYCLE_TOPIC",
    "WhisperTranscriber",
]
