"""WebSocket transport: one client connection per socket.

Text frames carry JSON control messages (``start-streaming``,
``stop-streaming``); binary frames carry audio chunks. Closing the socket
disconnects the session.
"""

import json
import logging
from typing import Any, Dict

from aiohttp import web, WSMsgType

from ..services.connection import ClientConnection
from .keys import BACKEND_KEY, CONFIG_KEY, PUBLISHER_KEY, SOCKETS_KEY

logger = logging.getLogger(__name__)


async def websocket_handler(request: web.Request) -> web.WebSocketResponse:
    ws = web.WebSocketResponse()
    await ws.prepare(request)
    request.app[SOCKETS_KEY].add(ws)

    async def send(message: Dict[str, Any]) -> None:
        if ws.closed:
            logger.debug(f"Socket closed, not sending {message.get('event')}")
            return
        try:
            await ws.send_json(message)
        except ConnectionResetError:
            logger.debug(f"Client went away before {message.get('event')} was sent")

    config = request.app[CONFIG_KEY]
    connection = ClientConnection(
        backend=request.app[BACKEND_KEY],
        send=send,
        lifecycle_publisher=request.app[PUBLISHER_KEY],
        default_language=config.get('streaming.default_language', 'en-US'),
        default_sample_rate=config.get('streaming.default_sample_rate', 16000),
    )
    logger.info(f"Client connected: {request.remote}")

    try:
        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                try:
                    message = json.loads(msg.data)
                except ValueError:
                    message = None
                await connection.handle_control(message)
            elif msg.type == WSMsgType.BINARY:
                await connection.handle_audio(msg.data)
            elif msg.type == WSMsgType.ERROR:
                logger.error(f"WebSocket error: {ws.exception()}")
    finally:
        await connection.close()
        request.app[SOCKETS_KEY].discard(ws)
        logger.info(f"Client disconnected: {request.remote}")

    return ws
