"""aiohttp application factory."""

import logging
import weakref
from typing import Optional

from aiohttp import web, WSCloseCode

from ..config import SonoFlowConfig
from ..errors import ConfigurationError, UpstreamError, ValidationError
from ..services.enhancement_service import EnhancementService
from ..services.session_registry import SessionRegistry
from ..transcription.base import AbstractRecognitionBackend
from ..transcription.google_backend import GoogleStreamingBackend
from ..transcription.publisher import SessionLifecyclePublisher
from ..transcription.whisper_client import WhisperTranscriber
from .keys import (
    BACKEND_KEY,
    CONFIG_KEY,
    ENHANCEMENT_KEY,
    PUBLISHER_KEY,
    REGISTRY_KEY,
    SOCKETS_KEY,
    WHISPER_KEY,
)
from .routes import routes
from .socket import websocket_handler

logger = logging.getLogger(__name__)


@web.middleware
async def error_middleware(request: web.Request, handler) -> web.StreamResponse:
    """Translate errors into JSON responses."""
    try:
        return await handler(request)
    except web.HTTPNotFound:
        return web.json_response({"error": "Route not found"}, status=404)
    except web.HTTPException:
        raise
    except ValidationError as e:
        return web.json_response({"error": e.message}, status=400)
    except ConfigurationError as e:
        logger.error(f"{request.method} {request.path}: {e}")
        return web.json_response({"error": e.message}, status=500)
    except UpstreamError as e:
        logger.error(f"{request.method} {request.path}: {e}")
        return web.json_response({"error": e.message, "details": e.details}, status=e.status or 502)
    except Exception as e:
        logger.error(f"Unhandled error in {request.method} {request.path}: {e}", exc_info=True)
        return web.json_response({"error": "Internal server error"}, status=500)


async def _close_sockets(app: web.Application) -> None:
    for ws in set(app[SOCKETS_KEY]):
        await ws.close(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")


async def _shutdown_registry(app: web.Application) -> None:
    app[REGISTRY_KEY].shutdown()


def create_app(config: SonoFlowConfig,
               backend: Optional[AbstractRecognitionBackend] = None,
               whisper: Optional[WhisperTranscriber] = None) -> web.Application:
    """Build the SonoFlow web application.

    Args:
        config: Application configuration
        backend: Streaming recognition backend (Google Speech when omitted)
        whisper: Batch transcriber (built from config when omitted)
    """
    app = web.Application(middlewares=[error_middleware])

    app[CONFIG_KEY] = config
    app[BACKEND_KEY] = backend or GoogleStreamingBackend.from_config(config)
    app[WHISPER_KEY] = whisper or WhisperTranscriber(
        api_key=config.get_openai_api_key(),
        model=config.get('openai.transcription_model', 'whisper-1'),
    )
    app[ENHANCEMENT_KEY] = EnhancementService.from_config(config)
    app[PUBLISHER_KEY] = SessionLifecyclePublisher()
    app[REGISTRY_KEY] = SessionRegistry()
    app[SOCKETS_KEY] = weakref.WeakSet()

    app.add_routes(routes)
    app.router.add_get('/ws', websocket_handler)

    app.on_shutdown.append(_close_sockets)
    app.on_cleanup.append(_shutdown_registry)

    logger.info(f"SonoFlow app created (streaming backend: {app[BACKEND_KEY].service_name}, "
                f"configured={app[BACKEND_KEY].is_configured()})")
    return app
