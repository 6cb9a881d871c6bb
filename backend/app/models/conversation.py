# backend/app/models/conversation.py
"""
Conversation model for per-user-pair messaging.

Each unordered pair of residents has exactly one conversation. The pair is
stored twice: as the two participant columns (in first-contact order) and
as ``pair_key``, the sorted ids joined by ``:``. The unique constraint on
``pair_key`` is what keeps two concurrent first-contact attempts from
creating duplicate rows.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


def make_pair_key(user_a_id: str, user_b_id: str) -> str:
    """Canonical, order-independent key for a participant pair."""
    first, second = sorted((str(user_a_id), str(user_b_id)))
    return f"{first}:{second}"


class Conversation(Base):
    """
    Conversation between two residents.

    Attributes:
        id: ULID primary key
        user1_id: Participant who initiated first contact
        user2_id: The other participant
        pair_key: Sorted participant ids, unique
        last_message_at: Never older than the newest persisted message
        created_at: When the conversation was created
    """

    __tablename__ = "conversations"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user1_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    user2_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    pair_key = Column(String(53), nullable=False, unique=True)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )
    last_message_at = Column(DateTime(timezone=True), nullable=True)

    user1 = relationship("User", foreign_keys=[user1_id])
    user2 = relationship("User", foreign_keys=[user2_id])
    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.created_at",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_conversations_user1", "user1_id"),
        Index("idx_conversations_user2", "user2_id"),
        Index("idx_conversations_last_message", "last_message_at"),
    )

    def __repr__(self) -> str:
        return f"<Conversation(id={self.id}, user1={self.user1_id}, user2={self.user2_id})>"

    def get_other_user_id(self, current_user_id: str) -> str:
        """Return the id of the participant that is not ``current_user_id``."""
        if current_user_id == self.user1_id:
            return str(self.user2_id)
        return str(self.user1_id)

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.user1_id, self.user2_id)
