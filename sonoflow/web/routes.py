"""HTTP routes: batch enhancement, transcription modes, Whisper transcription, health."""

import logging

from aiohttp import web

from ..errors import ConfigurationError, UpstreamError
from .keys import BACKEND_KEY, ENHANCEMENT_KEY, REGISTRY_KEY, WHISPER_KEY

logger = logging.getLogger(__name__)

routes = web.RouteTableDef()


@routes.post('/api/voice/extract-fields')
async def extract_fields(request: web.Request) -> web.Response:
    """Run the enhancement pipeline over a finished transcript."""
    try:
        body = await request.json()
    except ValueError:
        body = None

    # ValidationError becomes a 400 in the error middleware
    response = request.app[ENHANCEMENT_KEY].enhance(body)
    return web.json_response(response)


@routes.get('/api/voice/modes')
async def transcription_modes(request: web.Request) -> web.Response:
    modes = {
        "batch": {
            "name": "Batch Processing",
            "provider": "OpenAI Whisper",
            "available": request.app[WHISPER_KEY].is_configured,
            "description": "Record complete audio, then transcribe (most accurate)",
        },
        "streaming": {
            "name": "Real-time Streaming",
            "provider": request.app[BACKEND_KEY].service_name,
            "available": request.app[BACKEND_KEY].is_configured(),
            "description": "See transcription as you speak (live feedback)",
        },
    }
    return web.json_response(modes)


@routes.post('/api/voice/transcribe')
async def transcribe(request: web.Request) -> web.Response:
    """Transcribe an uploaded recording with Whisper."""
    form = await request.post()
    audio = form.get('audio')
    if not isinstance(audio, web.FileField):
        return web.json_response({"error": "No audio file provided"}, status=400)

    language = form.get('language') or None
    data = audio.file.read()

    try:
        transcript = await request.app[WHISPER_KEY].transcribe(
            data,
            filename=audio.filename or "audio.webm",
            content_type=audio.content_type or "application/octet-stream",
            language=language,
        )
    except ConfigurationError as e:
        return web.json_response({"error": e.message}, status=500)
    except UpstreamError as e:
        logger.error(f"Transcription failed: {e}")
        return web.json_response(
            {"error": "Transcription failed", "details": e.details},
            status=e.status or 502,
        )

    logger.info(f"Transcribed {len(data)}-byte recording ({len(transcript)} chars)")
    return web.json_response({"transcript": transcript})


@routes.get('/api/health')
async def health(request: web.Request) -> web.Response:
    return web.json_response({
        "status": "ok",
        "message": "SonoFlow API is running",
        "active_sessions": request.app[REGISTRY_KEY].active_count(),
        "sessions": request.app[REGISTRY_KEY].snapshot(),
    })
