# backend/app/services/messaging/events.py
"""
Outbound socket frame types and builders.

Frames are flat JSON objects with a ``type`` key and camelCase fields:
{
    "type": str,             # Frame type identifier
    "conversationId": str,   # Topic the frame belongs to (most frames)
    ...                      # Frame-specific fields
}
"""

from enum import Enum
from typing import Any, Dict, Optional

from app.models.message import Message
from app.schemas.message_responses import MessageResponse


class EventType(str, Enum):
    """Valid server-to-client frame types."""

    CONNECTED = "connected"
    SUBSCRIBED = "subscribed"
    NEW_MESSAGE = "new_message"
    TYPING_START = "typing_start"
    TYPING_STOP = "typing_stop"
    REACTION_ADDED = "reaction_added"
    REACTION_REMOVED = "reaction_removed"
    MESSAGE_READ = "message_read"
    ERROR = "error"


GENERIC_ERROR_MESSAGE = "An error occurred"
INVALID_FRAME_MESSAGE = "Invalid message format"


def build_event(event_type: EventType, **fields: Any) -> Dict[str, Any]:
    """
    Build a frame.

    Args:
        event_type: The type of frame
        fields: Frame-specific fields, already in wire (camelCase) form

    Returns:
        Frame dict ready for ``send_json``
    """
    return {"type": event_type.value, **fields}


def serialize_message(message: Message) -> Dict[str, Any]:
    return MessageResponse.model_validate(message).model_dump(mode="json", by_alias=True)


def build_connected_event(user_id: str) -> Dict[str, Any]:
    return build_event(EventType.CONNECTED, userId=user_id)


def build_subscribed_event(conversation_id: str) -> Dict[str, Any]:
    return build_event(EventType.SUBSCRIBED, conversationId=conversation_id)


def build_new_message_event(message: Message) -> Dict[str, Any]:
    """Build a new_message frame from a persisted message."""
    return build_event(
        EventType.NEW_MESSAGE,
        conversationId=message.conversation_id,
        message=serialize_message(message),
    )


def build_typing_event(conversation_id: str, user_id: str, is_typing: bool) -> Dict[str, Any]:
    return build_event(
        EventType.TYPING_START if is_typing else EventType.TYPING_STOP,
        conversationId=conversation_id,
        userId=user_id,
    )


def build_reaction_event(
    conversation_id: str,
    message_id: str,
    user_id: str,
    emoji: str,
    added: bool,
) -> Dict[str, Any]:
    """Build a reaction_added / reaction_removed frame."""
    return build_event(
        EventType.REACTION_ADDED if added else EventType.REACTION_REMOVED,
        conversationId=conversation_id,
        messageId=message_id,
        userId=user_id,
        emoji=emoji,
    )


def build_message_read_event(
    conversation_id: str, user_id: str, last_read_message_id: Optional[str]
) -> Dict[str, Any]:
    return build_event(
        EventType.MESSAGE_READ,
        conversationId=conversation_id,
        userId=user_id,
        lastReadMessageId=last_read_message_id,
    )


def build_error_event(message: str = GENERIC_ERROR_MESSAGE) -> Dict[str, Any]:
    return build_event(EventType.ERROR, message=message)
