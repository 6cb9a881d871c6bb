# backend/app/services/messaging/chat_delivery.py
"""
Persist-then-fan-out path shared by ``POST /messages/send`` and the socket
``message`` frame.

Order per message:
1. Persist in its own committed session (raises domain errors unchanged)
2. Push ``new_message`` to every connection subscribed to the conversation
3. Create the ``message_received`` notification for the other participant

Step 3 runs in a separate session; its failure is logged and never undoes
or fails the send.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.database import run_in_session
from app.models.message import Message
from app.services.conversation_service import ConversationService, MessageAttachment
from app.services.messaging.connection_manager import ConnectionManager, connection_manager
from app.services.messaging.events import build_new_message_event
from app.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


async def deliver_chat_message(
    conversation_id: str,
    sender_id: str,
    content: Optional[str],
    attachment: Optional[MessageAttachment] = None,
    manager: Optional[ConnectionManager] = None,
) -> Message:
    manager = manager or connection_manager

    def _persist(session: Session) -> Message:
        return ConversationService(session).send_message(
            conversation_id, sender_id, content, attachment=attachment
        )

    message = await run_in_session(_persist)

    delivered = await manager.broadcast_to_topic(
        conversation_id, build_new_message_event(message)
    )
    logger.debug(
        "new_message fanned out",
        extra={
            "conversation_id": conversation_id,
            "message_id": message.id,
            "delivered": delivered,
        },
    )

    def _notify(session: Session) -> None:
        conversation = ConversationService(session).require_participant(
            conversation_id, sender_id
        )
        NotificationService(session).notify_message_received(conversation, message)

    try:
        await run_in_session(_notify)
    except Exception:
        logger.exception(
            "Failed to create message notification",
            extra={"conversation_id": conversation_id, "message_id": message.id},
        )

    return message
