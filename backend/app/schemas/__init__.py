# backend/app/schemas/__init__.py
"""
Pydantic schemas for the SocietyHub messaging API.

Wire names are camelCase; Python attribute names stay snake_case.
"""

from .conversation import (
    ConversationListItem,
    ConversationListResponse,
    ConversationResponse,
    CreateConversationRequest,
    CreateConversationResponse,
    UserSummary,
)
from .message_requests import (
    AddReactionRequest,
    AttachmentRequest,
    ReadReceiptRequest,
    SendMessageRequest,
)
from .message_responses import (
    MarkMessagesReadResponse,
    MessageResponse,
    MessagesResponse,
    ReactionChangeResponse,
    ReactionListResponse,
    ReactionResponse,
    ReadReceiptListResponse,
    ReadReceiptResponse,
    UnreadCountResponse,
)

__all__ = [
    "AddReactionRequest",
    "AttachmentRequest",
    "ConversationListItem",
    "ConversationListResponse",
    "ConversationResponse",
    "CreateConversationRequest",
    "CreateConversationResponse",
    "MarkMessagesReadResponse",
    "MessageResponse",
    "MessagesResponse",
    "ReactionChangeResponse",
    "ReactionListResponse",
    "ReactionResponse",
    "ReadReceiptListResponse",
    "ReadReceiptRequest",
    "ReadReceiptResponse",
    "SendMessageRequest",
    "UnreadCountResponse",
    "UserSummary",
]
