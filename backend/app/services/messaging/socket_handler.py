# backend/app/services/messaging/socket_handler.py
"""
Per-connection socket protocol.

Lifecycle:
1. ``authenticate`` verifies the ``token`` query parameter; failures close
   the socket with 1008 (policy violation)
2. ``on_connect`` registers the connection, marks the user online and sends
   ``connected``
3. ``handle_text`` parses one inbound frame and dispatches it; every failure
   is answered with an ``error`` frame and the connection stays open
4. ``on_disconnect`` unregisters and marks the user offline

Presence is last-writer-wins by default: closing any one of a user's
connections marks them offline. With ``presence_refcount_enabled`` the
offline write happens only when the user's last connection closes.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import WebSocket, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.auth import verify_token
from app.core.config import settings
from app.core.exceptions import DomainException
from app.database import run_in_session
from app.monitoring.prometheus_metrics import prometheus_metrics
from app.schemas.realtime import (
    ChatMessageFrame,
    MessageReadFrame,
    ReactionFrame,
    SubscribeFrame,
    TypingFrame,
    inbound_frame_adapter,
)
from app.services.conversation_service import ConversationService
from app.services.message_service import MessageService
from app.services.messaging.chat_delivery import deliver_chat_message
from app.services.messaging.connection_manager import (
    ClientConnection,
    ConnectionManager,
    connection_manager,
)
from app.services.messaging.events import (
    GENERIC_ERROR_MESSAGE,
    INVALID_FRAME_MESSAGE,
    build_connected_event,
    build_error_event,
    build_message_read_event,
    build_reaction_event,
    build_subscribed_event,
    build_typing_event,
)
from app.services.presence_service import PresenceService

logger = logging.getLogger(__name__)

TOKEN_REQUIRED_REASON = "Token required"
AUTH_FAILED_REASON = "Authentication failed"


class ChatSocketHandler:
    def __init__(self, websocket: WebSocket, manager: Optional[ConnectionManager] = None):
        self.websocket = websocket
        self.manager = manager or connection_manager
        self.connection: Optional[ClientConnection] = None
        self._handlers: Dict[str, Callable[[Any], Awaitable[None]]] = {
            "subscribe": self._on_subscribe,
            "message": self._on_message,
            "typing_start": self._on_typing,
            "typing_stop": self._on_typing,
            "reaction_added": self._on_reaction,
            "reaction_removed": self._on_reaction,
            "message_read": self._on_message_read,
        }

    async def authenticate(self, token: Optional[str]) -> Optional[str]:
        """Return the verified user id, or close the socket and return None."""
        if not token:
            await self.websocket.close(
                code=status.WS_1008_POLICY_VIOLATION, reason=TOKEN_REQUIRED_REASON
            )
            return None
        try:
            return verify_token(token).user_id
        except DomainException as e:
            logger.info(f"Socket authentication failed: {e.message}")
            await self.websocket.close(
                code=status.WS_1008_POLICY_VIOLATION, reason=AUTH_FAILED_REASON
            )
            return None

    async def on_connect(self, user_id: str) -> ClientConnection:
        connection = ClientConnection(websocket=self.websocket, user_id=user_id)
        self.connection = connection
        self.manager.register(connection)
        await self._set_presence(user_id, online=True)
        await self.websocket.send_json(build_connected_event(user_id))
        logger.info(
            "Socket connected",
            extra={"user_id": user_id, "connection_id": connection.connection_id},
        )
        return connection

    async def on_disconnect(self) -> None:
        connection = self.connection
        if connection is None:
            return
        remaining = self.manager.unregister(connection)
        if settings.presence_refcount_enabled and remaining > 0:
            logger.debug(
                "Socket closed, user still connected elsewhere",
                extra={"user_id": connection.user_id, "remaining": remaining},
            )
        else:
            await self._set_presence(connection.user_id, online=False)
        logger.info(
            "Socket disconnected",
            extra={"user_id": connection.user_id, "connection_id": connection.connection_id},
        )

    async def _set_presence(self, user_id: str, *, online: bool) -> None:
        def _write(session: Session) -> None:
            service = PresenceService(session)
            if online:
                service.mark_online(user_id)
            else:
                service.mark_offline(user_id)

        try:
            await run_in_session(_write)
        except Exception:
            logger.exception(
                "Failed to write presence", extra={"user_id": user_id, "online": online}
            )

    async def send_error(self, message: str = GENERIC_ERROR_MESSAGE) -> None:
        await self.websocket.send_json(build_error_event(message))

    async def handle_text(self, raw: str) -> None:
        """Dispatch one inbound frame. Never raises for frame-level failures."""
        frame_type = "unknown"
        try:
            data = json.loads(raw)
            frame = inbound_frame_adapter.validate_python(data)
        except (ValueError, ValidationError) as e:
            # json.JSONDecodeError is a ValueError
            logger.debug(f"Rejected socket frame: {e}")
            prometheus_metrics.record_ws_frame(frame_type, "invalid")
            await self.send_error(INVALID_FRAME_MESSAGE)
            return

        frame_type = frame.type
        try:
            await self._handlers[frame_type](frame)
        except DomainException as e:
            if e.status_code >= 500:
                logger.error(
                    f"Socket frame failed: {e.message}",
                    extra={"frame_type": frame_type, "user_id": self._user_id, "code": e.code},
                )
                prometheus_metrics.record_ws_frame(frame_type, "error")
                await self.send_error(GENERIC_ERROR_MESSAGE)
                return
            prometheus_metrics.record_ws_frame(frame_type, "rejected")
            await self.send_error(e.message)
            return
        except Exception:
            logger.exception(
                "Socket frame handling failed",
                extra={"frame_type": frame_type, "user_id": self._user_id},
            )
            prometheus_metrics.record_ws_frame(frame_type, "error")
            await self.send_error(GENERIC_ERROR_MESSAGE)
            return
        prometheus_metrics.record_ws_frame(frame_type, "ok")

    @property
    def _user_id(self) -> str:
        assert self.connection is not None
        return self.connection.user_id

    async def _on_subscribe(self, frame: SubscribeFrame) -> None:
        user_id = self._user_id

        def _check(session: Session) -> None:
            ConversationService(session).require_participant(frame.conversation_id, user_id)

        await run_in_session(_check)
        assert self.connection is not None
        self.manager.subscribe(self.connection, frame.conversation_id)
        await self.websocket.send_json(build_subscribed_event(frame.conversation_id))

    async def _on_message(self, frame: ChatMessageFrame) -> None:
        await deliver_chat_message(
            frame.conversation_id, self._user_id, frame.content, manager=self.manager
        )

    async def _on_typing(self, frame: TypingFrame) -> None:
        assert self.connection is not None
        if self.connection.conversation_id != frame.conversation_id:
            await self.send_error("Not subscribed to this conversation")
            return
        await self.manager.broadcast_to_topic(
            frame.conversation_id,
            build_typing_event(
                frame.conversation_id, self._user_id, is_typing=frame.type == "typing_start"
            ),
            exclude=self.connection,
        )

    async def _on_reaction(self, frame: ReactionFrame) -> None:
        user_id = self._user_id
        added = frame.type == "reaction_added"

        def _apply(session: Session) -> str:
            service = MessageService(session)
            if added:
                result = service.add_reaction(
                    frame.message_id, user_id, frame.emoji, frame.conversation_id
                )
            else:
                result = service.remove_reaction(
                    frame.message_id, user_id, frame.emoji, frame.conversation_id
                )
            return result.emoji

        emoji = await run_in_session(_apply)
        await self.manager.broadcast_to_topic(
            frame.conversation_id,
            build_reaction_event(frame.conversation_id, frame.message_id, user_id, emoji, added),
        )

    async def _on_message_read(self, frame: MessageReadFrame) -> None:
        user_id = self._user_id

        def _apply(session: Session) -> Optional[str]:
            receipt = MessageService(session).update_read_receipt(
                frame.conversation_id, user_id, frame.last_read_message_id
            )
            return receipt.last_read_message_id

        last_read_message_id = await run_in_session(_apply)
        await self.manager.broadcast_to_topic(
            frame.conversation_id,
            build_message_read_event(frame.conversation_id, user_id, last_read_message_id),
            exclude=self.connection,
        )
