# backend/app/routes/v1/conversations.py
"""
Conversations routes - API v1

Versioned conversation endpoints under /api/v1/conversations.
All business logic delegated to ConversationService.

Endpoints:
    POST /create                        -> Get or create the conversation with another resident
    GET /                               -> List the caller's conversations, most recent first
"""

import logging

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import get_current_user_id
from ...api.dependencies.services import get_conversation_service
from ...schemas.conversation import (
    ConversationListItem,
    ConversationListResponse,
    ConversationResponse,
    CreateConversationRequest,
    CreateConversationResponse,
    UserSummary,
)
from ...schemas.message_responses import MessageResponse
from ...services.conversation_service import ConversationService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["conversations-v1"])


@router.post("/create", response_model=CreateConversationResponse)
def create_conversation(
    request: CreateConversationRequest,
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
) -> CreateConversationResponse:
    """
    Get or create the conversation between the caller and ``otherUserId``.

    Repeated calls, in either direction, return the same conversation.
    """
    conversation, created = service.get_or_create_conversation(user_id, request.other_user_id)
    return CreateConversationResponse(
        conversation=ConversationResponse.model_validate(conversation),
        created=created,
    )


@router.get("", response_model=ConversationListResponse)
def list_conversations(
    user_id: str = Depends(get_current_user_id),
    service: ConversationService = Depends(get_conversation_service),
) -> ConversationListResponse:
    """
    List all conversations for the current user.

    Each entry carries the other participant, the caller's unread count and
    the latest message.
    """
    summaries = service.get_user_conversations(user_id)
    return ConversationListResponse(
        conversations=[
            ConversationListItem(
                id=summary.conversation.id,
                other_user=(
                    UserSummary.model_validate(summary.other_user) if summary.other_user else None
                ),
                unread_count=summary.unread_count,
                last_message=(
                    MessageResponse.model_validate(summary.last_message)
                    if summary.last_message
                    else None
                ),
                last_message_at=summary.conversation.last_message_at,
                created_at=summary.conversation.created_at,
            )
            for summary in summaries
        ]
    )
