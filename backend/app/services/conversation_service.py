# backend/app/services/conversation_service.py
"""
Conversation Service for per-user-pair messaging.

Handles business logic for the conversation store:
- Idempotent get-or-create for a user pair
- Sending messages (text and/or a single attachment)
- History reads and conversation listings with unread counts
- The coarse is_read flag and the global unread count

Every conversation-scoped operation checks participancy first and raises
NotParticipantException for outsiders.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, NotParticipantException, ValidationException
from ..models.conversation import Conversation
from ..models.message import Message
from ..models.user import User
from ..repositories.conversation_repository import ConversationRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.message_repository import MessageRepository
from ..repositories.user_repository import UserRepository
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageAttachment:
    """A file already uploaded elsewhere; only its reference is stored."""

    url: str
    name: Optional[str] = None
    mime_type: Optional[str] = None


@dataclass
class ConversationSummary:
    """A conversation as seen by one participant."""

    conversation: Conversation
    other_user: Optional[User]
    unread_count: int
    last_message: Optional[Message]


def normalize_message_content(
    content: Optional[str], *, has_attachment: bool = False
) -> Optional[str]:
    """
    Trim and validate message text.

    Text is required unless an attachment carries the message.
    """
    text = (content or "").strip()
    if not text:
        if has_attachment:
            return None
        raise ValidationException("Message content required", code="message_content_required")
    if len(text) > settings.max_message_length:
        raise ValidationException(
            f"Message too long (max {settings.max_message_length} characters)",
            code="message_too_long",
        )
    return text


def load_conversation_for_participant(
    repository: ConversationRepository, conversation_id: str, user_id: str
) -> Conversation:
    conversation = repository.get_by_id(conversation_id)
    if conversation is None:
        raise NotFoundException("Conversation not found", code="conversation_not_found")
    if not conversation.is_participant(user_id):
        raise NotParticipantException(details={"conversation_id": conversation_id})
    return conversation


class ConversationService(BaseService):
    """
    Service for managing per-user-pair conversations.

    Handles conversation creation, message sending, and
    related business logic with proper access control.
    """

    def __init__(
        self,
        db: Session,
        conversation_repository: Optional[ConversationRepository] = None,
        message_repository: Optional[MessageRepository] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        super().__init__(db)
        self.conversation_repository = (
            conversation_repository or RepositoryFactory.create_conversation_repository(db)
        )
        self.message_repository = message_repository or RepositoryFactory.create_message_repository(
            db
        )
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.logger = logging.getLogger(__name__)

    def require_participant(self, conversation_id: str, user_id: str) -> Conversation:
        return load_conversation_for_participant(
            self.conversation_repository, conversation_id, user_id
        )

    @BaseService.measure_operation("get_or_create_conversation")
    def get_or_create_conversation(
        self, user_id: str, other_user_id: str
    ) -> Tuple[Conversation, bool]:
        """
        Get the conversation for the pair, creating it on first contact.

        Argument order does not matter: (A, B) and (B, A) yield the same row.

        Returns:
            Tuple of (conversation, created) where created is True if new
        """
        if not other_user_id:
            raise ValidationException("otherUserId is required", code="other_user_required")
        if other_user_id == user_id:
            raise ValidationException(
                "Cannot start a conversation with yourself", code="self_conversation"
            )
        if self.user_repository.get_by_id(other_user_id) is None:
            raise NotFoundException("User not found", code="user_not_found")

        conversation, created = self.conversation_repository.get_or_create(user_id, other_user_id)
        if created:
            self.logger.info(
                "Conversation created",
                extra={"conversation_id": conversation.id, "user_id": user_id},
            )
        return conversation, created

    @BaseService.measure_operation("send_message")
    def send_message(
        self,
        conversation_id: str,
        sender_id: str,
        content: Optional[str],
        attachment: Optional[MessageAttachment] = None,
    ) -> Message:
        """
        Persist a message from a participant and advance last_message_at.

        Raises:
            ValidationException: empty or oversized content
            NotFoundException: unknown conversation
            NotParticipantException: sender is not in the conversation
        """
        text = normalize_message_content(content, has_attachment=attachment is not None)
        conversation = self.require_participant(conversation_id, sender_id)

        message = self.message_repository.create_message(
            conversation_id=conversation.id,
            sender_id=sender_id,
            content=text,
            file_url=attachment.url if attachment else None,
            file_name=attachment.name if attachment else None,
            file_type=attachment.mime_type if attachment else None,
        )
        self.conversation_repository.advance_last_message_at(conversation.id, message.created_at)
        self.db.refresh(conversation, ["last_message_at"])

        self.logger.info(
            "Message sent",
            extra={
                "conversation_id": conversation.id,
                "message_id": message.id,
                "user_id": sender_id,
                "has_attachment": attachment is not None,
            },
        )
        return message

    @BaseService.measure_operation("get_conversation_messages")
    def get_conversation_messages(
        self, conversation_id: str, user_id: str, limit: Optional[int] = None
    ) -> List[Message]:
        """Full ascending history, or the newest ``limit`` messages (still ascending)."""
        if limit is not None and limit < 1:
            raise ValidationException("limit must be positive", code="invalid_limit")
        self.require_participant(conversation_id, user_id)
        return self.message_repository.get_conversation_messages(conversation_id, limit=limit)

    @BaseService.measure_operation("get_user_conversations")
    def get_user_conversations(self, user_id: str) -> List[ConversationSummary]:
        """Conversations enriched with the other user, unread count and latest message."""
        conversations = self.conversation_repository.find_for_user(user_id)
        if not conversations:
            return []

        other_ids = [c.get_other_user_id(user_id) for c in conversations]
        users = self.user_repository.get_by_ids(other_ids)
        unread = self.message_repository.unread_counts_by_conversation(
            [c.id for c in conversations], user_id
        )
        return [
            ConversationSummary(
                conversation=conversation,
                other_user=users.get(other_id),
                unread_count=unread.get(conversation.id, 0),
                last_message=self.message_repository.get_latest_message(conversation.id),
            )
            for conversation, other_id in zip(conversations, other_ids)
        ]

    @BaseService.measure_operation("mark_messages_as_read")
    def mark_messages_as_read(self, conversation_id: str, user_id: str) -> int:
        """Flag every incoming message in the conversation as read for ``user_id``."""
        self.require_participant(conversation_id, user_id)
        updated = self.message_repository.mark_conversation_read(conversation_id, user_id)
        self.logger.debug(
            "Marked messages read",
            extra={"conversation_id": conversation_id, "user_id": user_id, "count": updated},
        )
        return updated

    @BaseService.measure_operation("get_unread_count")
    def get_unread_count(self, user_id: str) -> int:
        return self.message_repository.count_unread_for_user(user_id)
