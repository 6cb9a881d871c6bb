# backend/app/repositories/message_repository.py
"""
Message Repository for the chat system.

Handles message persistence, history reads and the coarse ``is_read`` flag
used for unread counts.
"""

from typing import Dict, List, Optional, Sequence, cast

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..models.conversation import Conversation
from ..models.message import Message
from .base_repository import BaseRepository


class MessageRepository(BaseRepository[Message]):
    """Repository for Message entity operations."""

    def __init__(self, db: Session):
        super().__init__(db, Message)

    def create_message(
        self,
        conversation_id: str,
        sender_id: str,
        content: Optional[str],
        *,
        file_url: Optional[str] = None,
        file_name: Optional[str] = None,
        file_type: Optional[str] = None,
    ) -> Message:
        return self.create(
            conversation_id=conversation_id,
            sender_id=sender_id,
            content=content,
            file_url=file_url,
            file_name=file_name,
            file_type=file_type,
            is_read=False,
        )

    def get_conversation_messages(
        self, conversation_id: str, limit: Optional[int] = None
    ) -> List[Message]:
        """
        Messages in ascending creation order.

        With ``limit`` only the most recent ``limit`` messages are returned,
        still oldest first.
        """
        query = self.db.query(Message).filter(Message.conversation_id == conversation_id)
        if limit is None:
            return cast(
                List[Message], query.order_by(Message.created_at.asc(), Message.id.asc()).all()
            )
        recent = query.order_by(Message.created_at.desc(), Message.id.desc()).limit(limit).all()
        return list(reversed(recent))

    def get_latest_message(self, conversation_id: str) -> Optional[Message]:
        return cast(
            Optional[Message],
            self.db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.desc(), Message.id.desc())
            .first(),
        )

    def belongs_to_conversation(self, message_id: str, conversation_id: str) -> bool:
        return self.exists(id=message_id, conversation_id=conversation_id)

    def count_unread(self, conversation_id: str, user_id: str) -> int:
        """Messages in the conversation not sent by ``user_id`` and not yet flagged read."""
        return int(
            self.db.query(func.count(Message.id))
            .filter(
                Message.conversation_id == conversation_id,
                Message.sender_id != user_id,
                Message.is_read.is_(False),
            )
            .scalar()
            or 0
        )

    def unread_counts_by_conversation(
        self, conversation_ids: Sequence[str], user_id: str
    ) -> Dict[str, int]:
        """Batch unread counts keyed by conversation id (missing ids mean zero)."""
        if not conversation_ids:
            return {}
        rows = (
            self.db.query(Message.conversation_id, func.count(Message.id))
            .filter(
                Message.conversation_id.in_(list(conversation_ids)),
                Message.sender_id != user_id,
                Message.is_read.is_(False),
            )
            .group_by(Message.conversation_id)
            .all()
        )
        return {conversation_id: int(count) for conversation_id, count in rows}

    def count_unread_for_user(self, user_id: str) -> int:
        """Unread messages across every conversation the user takes part in."""
        return int(
            self.db.query(func.count(Message.id))
            .join(Conversation, Conversation.id == Message.conversation_id)
            .filter(
                or_(Conversation.user1_id == user_id, Conversation.user2_id == user_id),
                Message.sender_id != user_id,
                Message.is_read.is_(False),
            )
            .scalar()
            or 0
        )

    def mark_conversation_read(self, conversation_id: str, user_id: str) -> int:
        """Flip ``is_read`` for the user's incoming messages. Returns rows changed."""
        updated = (
            self.db.query(Message)
            .filter(
                Message.conversation_id == conversation_id,
                Message.sender_id != user_id,
                Message.is_read.is_(False),
            )
            .update({Message.is_read: True}, synchronize_session=False)
        )
        self.db.flush()
        return int(updated)
