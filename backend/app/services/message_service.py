# backend/app/services/message_service.py
"""
Message Service for reactions and read receipts.

Reactions are a set keyed by (message, user, emoji): adding twice stores
one row and a single remove clears it. Read receipts are one overwriting
cursor per (conversation, user).
"""

from dataclasses import dataclass
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException, ValidationException
from ..models.conversation import Conversation
from ..models.message import Message, MessageReaction, ReadReceipt
from ..repositories.conversation_repository import ConversationRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.message_repository import MessageRepository
from ..repositories.reaction_repository import ReactionRepository
from ..repositories.read_receipt_repository import ReadReceiptRepository
from .base import BaseService
from .conversation_service import load_conversation_for_participant

logger = logging.getLogger(__name__)


@dataclass
class ReactionResult:
    """Outcome of a reaction add/remove, with the context fan-out needs."""

    message: Message
    conversation_id: str
    emoji: str
    action: str  # "added" or "removed"
    reaction: Optional[MessageReaction] = None
    removed_count: int = 0


def normalize_emoji(emoji: Optional[str]) -> str:
    value = (emoji or "").strip()
    if not value:
        raise ValidationException("Emoji is required", code="emoji_required")
    if len(value) > settings.max_emoji_length:
        raise ValidationException(
            f"Emoji too long (max {settings.max_emoji_length} characters)",
            code="emoji_too_long",
        )
    return value


class MessageService(BaseService):
    """
    Service for message reactions and read receipts.

    All operations require the caller to be a participant of the
    conversation the message belongs to.
    """

    def __init__(
        self,
        db: Session,
        message_repository: Optional[MessageRepository] = None,
        conversation_repository: Optional[ConversationRepository] = None,
        reaction_repository: Optional[ReactionRepository] = None,
        read_receipt_repository: Optional[ReadReceiptRepository] = None,
    ):
        super().__init__(db)
        self.repository = message_repository or RepositoryFactory.create_message_repository(db)
        self.conversation_repository = (
            conversation_repository or RepositoryFactory.create_conversation_repository(db)
        )
        self.reaction_repository = (
            reaction_repository or RepositoryFactory.create_reaction_repository(db)
        )
        self.read_receipt_repository = (
            read_receipt_repository or RepositoryFactory.create_read_receipt_repository(db)
        )

    def _get_message_for_participant(
        self, message_id: str, user_id: str, conversation_id: Optional[str] = None
    ) -> Message:
        message = self.repository.get_by_id(message_id)
        if message is None:
            raise NotFoundException("Message not found", code="message_not_found")
        if conversation_id is not None and message.conversation_id != conversation_id:
            raise ValidationException(
                "Message does not belong to this conversation", code="message_conversation_mismatch"
            )
        load_conversation_for_participant(
            self.conversation_repository, message.conversation_id, user_id
        )
        return message

    @BaseService.measure_operation("add_reaction")
    def add_reaction(
        self,
        message_id: str,
        user_id: str,
        emoji: str,
        conversation_id: Optional[str] = None,
    ) -> ReactionResult:
        """Add an emoji reaction; repeating the same emoji is a no-op."""
        value = normalize_emoji(emoji)
        message = self._get_message_for_participant(message_id, user_id, conversation_id)
        reaction = self.reaction_repository.add(message.id, user_id, value)
        return ReactionResult(
            message=message,
            conversation_id=message.conversation_id,
            emoji=value,
            action="added",
            reaction=reaction,
        )

    @BaseService.measure_operation("remove_reaction")
    def remove_reaction(
        self,
        message_id: str,
        user_id: str,
        emoji: str,
        conversation_id: Optional[str] = None,
    ) -> ReactionResult:
        """Remove the user's emoji from the message. Removing an absent reaction is a no-op."""
        value = normalize_emoji(emoji)
        message = self._get_message_for_participant(message_id, user_id, conversation_id)
        removed = self.reaction_repository.remove(message.id, user_id, value)
        return ReactionResult(
            message=message,
            conversation_id=message.conversation_id,
            emoji=value,
            action="removed",
            removed_count=removed,
        )

    @BaseService.measure_operation("get_message_reactions")
    def get_message_reactions(self, message_id: str, user_id: str) -> List[MessageReaction]:
        message = self._get_message_for_participant(message_id, user_id)
        return self.reaction_repository.list_for_message(message.id)

    @BaseService.measure_operation("update_read_receipt")
    def update_read_receipt(
        self,
        conversation_id: str,
        user_id: str,
        last_read_message_id: Optional[str] = None,
    ) -> ReadReceipt:
        """
        Overwrite the user's read cursor for the conversation.

        ``last_read_message_id`` must belong to the conversation when given.
        """
        conversation: Conversation = load_conversation_for_participant(
            self.conversation_repository, conversation_id, user_id
        )
        if last_read_message_id and not self.repository.belongs_to_conversation(
            last_read_message_id, conversation.id
        ):
            raise ValidationException(
                "Message does not belong to this conversation", code="message_conversation_mismatch"
            )
        receipt = self.read_receipt_repository.upsert(
            conversation.id, user_id, last_read_message_id or None
        )
        self.logger.debug(
            "Read receipt updated",
            extra={
                "conversation_id": conversation.id,
                "user_id": user_id,
                "message_id": last_read_message_id,
            },
        )
        return receipt

    @BaseService.measure_operation("get_read_receipts")
    def get_read_receipts(self, conversation_id: str, user_id: str) -> List[ReadReceipt]:
        load_conversation_for_participant(self.conversation_repository, conversation_id, user_id)
        return self.read_receipt_repository.list_for_conversation(conversation_id)
