# backend/app/models/message.py
"""
Message model for the chat system.

Messages are an append-only, conversation-scoped log. Only ``is_read`` is
mutated after insert. Reactions and read receipts hang off messages and
conversations respectively.
"""

from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class Message(Base):
    """
    Chat message.

    Either ``content`` or the attachment columns (``file_url``, ``file_name``,
    ``file_type``) are populated; both may be.
    """

    __tablename__ = "messages"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    conversation_id = Column(
        String(26), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    sender_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=True)
    file_url = Column(String(1000), nullable=True)
    file_name = Column(String(255), nullable=True)
    file_type = Column(String(100), nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("User", foreign_keys=[sender_id])
    reactions = relationship(
        "MessageReaction",
        back_populates="message",
        order_by="MessageReaction.created_at",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_messages_conversation_created", "conversation_id", "created_at"),
        Index("idx_messages_unread", "conversation_id", "is_read", "sender_id"),
    )

    @property
    def has_attachment(self) -> bool:
        return bool(self.file_url)


class MessageReaction(Base):
    """Emoji reaction; a set keyed by (message, user, emoji)."""

    __tablename__ = "message_reactions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    message_id = Column(String(26), ForeignKey("messages.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    emoji = Column(String(32), nullable=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    message = relationship("Message", back_populates="reactions")

    __table_args__ = (
        UniqueConstraint("message_id", "user_id", "emoji", name="uq_message_reactions_user_emoji"),
    )


class ReadReceipt(Base):
    """Per (conversation, user) read cursor, overwritten on every update."""

    __tablename__ = "read_receipts"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    conversation_id = Column(
        String(26), ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False
    )
    user_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    last_read_message_id = Column(
        String(26), ForeignKey("messages.id", ondelete="SET NULL"), nullable=True
    )
    last_read_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    __table_args__ = (
        UniqueConstraint("conversation_id", "user_id", name="uq_read_receipts_conversation_user"),
    )
