# backend/app/routes/v1/messages.py
"""
Messages routes - API v1

Versioned message endpoints under /api/v1/messages.
Business logic lives in ConversationService and MessageService; sends go
through the shared chat delivery path so socket subscribers see HTTP sends.

Endpoints (organized with static routes BEFORE dynamic routes):
    POST /send                                  - Send a message (text and/or attachment)
    GET /unread/count                           - Total unread count for current user

    === Conversation-scoped Routes ===
    GET /{conversation_id}                      - Ascending history (optional ?limit=)
    POST /{conversation_id}/read                - Mark incoming messages read
    POST /{conversation_id}/read-receipt        - Move the caller's read cursor
    GET /{conversation_id}/read-receipts        - Read cursors of both participants

    === Message-specific Routes ===
    POST /{message_id}/reactions                - Add emoji reaction
    DELETE /{message_id}/reactions?emoji=       - Remove emoji reaction
    GET /{message_id}/reactions                 - List reactions
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies.auth import get_current_user_id
from ...api.dependencies.services import get_conversation_service, get_message_service
from ...core.constants import MAX_QUERY_LIMIT
from ...schemas.message_requests import AddReactionRequest, ReadReceiptRequest, SendMessageRequest
from ...schemas.message_responses import (
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
from ...services.conversation_service import ConversationService, MessageAttachment
from ...services.message_service import MessageService, ReactionResult
from ...services.messaging.chat_delivery import deliver_chat_message

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["messages-v1"])


def _reaction_change(result: ReactionResult) -> ReactionChangeResponse:
    return ReactionChangeResponse(
        message_id=result.message.id,
        conversation_id=result.conversation_id,
        emoji=result.emoji,
        action=result.action,
        removed_count=result.removed_count,
    )


@router.post("/send", response_model=MessageResponse)
async def send_message(
    request: SendMessageRequest,
    user_id: str = Depends(get_current_user_id),
) -> MessageResponse:
    """
    Send a message to a conversation the caller participates in.

    The message is committed before it is pushed to subscribed sockets.
    """
    attachment = (
        MessageAttachment(
            url=request.attachment.url,
            name=request.attachment.name,
            mime_type=request.attachment.mime_type,
        )
        if request.attachment
        else None
    )
    message = await deliver_chat_message(
        request.conversation_id, user_id, request.content, attachment=attachment
    )
    return MessageResponse.model_validate(message)


@router.get("/unread/count", response_model=UnreadCountResponse)
def get_unread_count(
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
) -> UnreadCountResponse:
    return UnreadCountResponse(count=service.get_unread_count(user_id))


@router.get("/{conversation_id}", response_model=MessagesResponse)
def get_conversation_messages(
    conversation_id: str,
    limit: Optional[int] = Query(None, ge=1, le=MAX_QUERY_LIMIT),
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
) -> MessagesResponse:
    """Full history by default; ``limit`` returns the newest N, still oldest first."""
    messages = service.get_conversation_messages(conversation_id, user_id, limit=limit)
    return MessagesResponse(messages=[MessageResponse.model_validate(m) for m in messages])


@router.post("/{conversation_id}/read", response_model=MarkMessagesReadResponse)
def mark_messages_as_read(
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
) -> MarkMessagesReadResponse:
    count = service.mark_messages_as_read(conversation_id, user_id)
    return MarkMessagesReadResponse(messages_marked=count)


@router.post("/{conversation_id}/read-receipt", response_model=ReadReceiptResponse)
def update_read_receipt(
    conversation_id: str,
    request: ReadReceiptRequest,
    user_id: str = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
) -> ReadReceiptResponse:
    receipt = service.update_read_receipt(conversation_id, user_id, request.last_read_message_id)
    return ReadReceiptResponse.model_validate(receipt)


@router.get("/{conversation_id}/read-receipts", response_model=ReadReceiptListResponse)
def get_read_receipts(
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
) -> ReadReceiptListResponse:
    receipts = service.get_read_receipts(conversation_id, user_id)
    return ReadReceiptListResponse(
        receipts=[ReadReceiptResponse.model_validate(r) for r in receipts]
    )


@router.post("/{message_id}/reactions", response_model=ReactionChangeResponse)
def add_reaction(
    message_id: str,
    request: AddReactionRequest,
    user_id: str = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
) -> ReactionChangeResponse:
    """Add an emoji reaction. Adding the same emoji again is a no-op."""
    return _reaction_change(service.add_reaction(message_id, user_id, request.emoji))


@router.delete("/{message_id}/reactions", response_model=ReactionChangeResponse)
def remove_reaction(
    message_id: str,
    emoji: str = Query(...),
    user_id: str = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
) -> ReactionChangeResponse:
    return _reaction_change(service.remove_reaction(message_id, user_id, emoji))


@router.get("/{message_id}/reactions", response_model=ReactionListResponse)
def list_reactions(
    message_id: str,
    user_id: str = Depends(get_current_user_id),
    service: MessageService = Depends(get_message_service),
) -> ReactionListResponse:
    reactions = service.get_message_reactions(message_id, user_id)
    return ReactionListResponse(reactions=[ReactionResponse.model_validate(r) for r in reactions])
