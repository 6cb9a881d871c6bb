# backend/app/schemas/message_responses.py
"""
Response schemas for the message/chat system.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel


class MessageResponse(StrictModel):
    """A persisted chat message."""

    id: str
    conversation_id: str
    sender_id: str
    content: Optional[str] = None
    file_url: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    is_read: bool = False
    created_at: datetime


class MessagesResponse(StrictModel):
    """Ascending message history."""

    messages: List[MessageResponse]


class MarkMessagesReadResponse(StrictModel):
    """Response after marking messages as read."""

    success: bool = True
    messages_marked: int = Field(..., description="Number of messages marked as read")


class UnreadCountResponse(StrictModel):
    """Unread message count across all conversations."""

    count: int = Field(..., ge=0)


class ReactionResponse(StrictModel):
    id: str
    message_id: str
    user_id: str
    emoji: str
    created_at: datetime


class ReactionListResponse(StrictModel):
    reactions: List[ReactionResponse]


class ReactionChangeResponse(StrictModel):
    """Result of adding or removing a reaction."""

    message_id: str
    conversation_id: str
    emoji: str
    action: str
    removed_count: int = 0


class ReadReceiptResponse(StrictModel):
    conversation_id: str
    user_id: str
    last_read_message_id: Optional[str] = None
    last_read_at: datetime


class ReadReceiptListResponse(StrictModel):
    receipts: List[ReadReceiptResponse]
