# backend/app/routes/realtime.py
"""
WebSocket endpoint for real-time chat.

    WS /ws?token=<jwt>

The token travels in the query string because browser WebSocket APIs cannot
set an Authorization header on the handshake. The connection is accepted
first so that an authentication failure reaches the client as a 1008 close
frame.
"""

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..core.constants import WS_PATH, WS_TOKEN_QUERY_PARAM
from ..services.messaging.socket_handler import ChatSocketHandler

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket(WS_PATH)
async def chat_socket(websocket: WebSocket) -> None:
    await websocket.accept()
    handler = ChatSocketHandler(websocket)

    user_id = await handler.authenticate(websocket.query_params.get(WS_TOKEN_QUERY_PARAM))
    if user_id is None:
        return

    try:
        await handler.on_connect(user_id)
        while True:
            raw = await websocket.receive_text()
            await handler.handle_text(raw)
    except WebSocketDisconnect:
        pass
    finally:
        await handler.on_disconnect()
