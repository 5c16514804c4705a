"""Typed keys for objects shared through the aiohttp application."""

import weakref

from aiohttp import web

from ..config import SonoFlowConfig
from ..services.enhancement_service import EnhancementService
from ..services.session_registry import SessionRegistry
from ..transcription.base import AbstractRecognitionBackend
from ..transcription.publisher import SessionLifecyclePublisher
from ..transcription.whisper_client import WhisperTranscriber

CONFIG_KEY = web.AppKey("config", SonoFlowConfig)
BACKEND_KEY = web.AppKey("backend", AbstractRecognitionBackend)
WHISPER_KEY = web.AppKey("whisper", WhisperTranscriber)
ENHANCEMENT_KEY = web.AppKey("enhancement", EnhancementService)
PUBLISHER_KEY = web.AppKey("lifecycle_publisher", SessionLifecyclePublisher)
REGISTRY_KEY = web.AppKey("session_registry", SessionRegistry)
SOCKETS_KEY = web.AppKey("sockets", weakref.WeakSet)
