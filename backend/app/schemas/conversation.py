# backend/app/schemas/conversation.py
"""
Pydantic schemas for conversation API.

Provides request/response models for the per-user-pair conversation endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel
from .message_responses import MessageResponse


class UserSummary(StrictModel):
    """Public profile of a resident."""

    id: str
    full_name: str
    flat_number: Optional[str] = None
    profile_photo_url: Optional[str] = None


class CreateConversationRequest(StrictRequestModel):
    """Request to get or create the conversation with another resident."""

    other_user_id: str = Field(..., min_length=1, description="The other participant")


class ConversationResponse(StrictModel):
    """Conversation row."""

    id: str
    user1_id: str
    user2_id: str
    created_at: datetime
    last_message_at: Optional[datetime] = None


class CreateConversationResponse(StrictModel):
    """Result of get-or-create."""

    conversation: ConversationResponse
    created: bool = Field(..., description="True if the conversation was just created")


class ConversationListItem(StrictModel):
    """A conversation as seen by the current user."""

    id: str
    other_user: Optional[UserSummary] = None
    unread_count: int = 0
    last_message: Optional[MessageResponse] = None
    last_message_at: Optional[datetime] = None
    created_at: datetime


class ConversationListResponse(StrictModel):
    """Conversations ordered by most recent activity."""

    conversations: List[ConversationListItem]
