# backend/app/repositories/conversation_repository.py
"""
Conversation Repository for per-user-pair messaging.

Provides data access methods for conversations between two residents.
Follows the repository pattern with clean separation from business logic.
"""

from datetime import datetime, timezone
from typing import List, Optional, cast

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryConflictException
from ..models.conversation import Conversation, make_pair_key
from .base_repository import BaseRepository


class ConversationRepository(BaseRepository[Conversation]):
    """
    Repository for Conversation entity operations.

    Handles:
    - Finding or creating the single conversation for a user pair
    - Listing conversations for a user
    - Advancing last_message_at
    """

    def __init__(self, db: Session):
        super().__init__(db, Conversation)

    def find_by_pair(self, user_a_id: str, user_b_id: str) -> Optional[Conversation]:
        """
        Find the conversation between two users, in either order.

        Matches on the canonical pair key, so argument order does not matter.
        """
        result = (
            self.db.query(Conversation)
            .filter(Conversation.pair_key == make_pair_key(user_a_id, user_b_id))
            .first()
        )
        return cast(Optional[Conversation], result)

    def get_or_create(self, user_a_id: str, user_b_id: str) -> tuple[Conversation, bool]:
        """
        Get an existing conversation or create a new one.

        Safe under concurrent first contact: if another writer inserts the
        same pair between our lookup and insert, the unique pair key rejects
        ours and the winner is re-read.

        Returns:
            Tuple of (conversation, created) where created is True if new
        """
        existing = self.find_by_pair(user_a_id, user_b_id)
        if existing:
            return existing, False

        now = datetime.now(timezone.utc)
        try:
            conversation = self.create(
                user1_id=user_a_id,
                user2_id=user_b_id,
                pair_key=make_pair_key(user_a_id, user_b_id),
                created_at=now,
                last_message_at=now,
            )
        except RepositoryConflictException:
            winner = self.find_by_pair(user_a_id, user_b_id)
            if winner is None:
                raise
            self.logger.info(
                "Conversation created concurrently; returning existing row",
                extra={"conversation_id": winner.id},
            )
            return winner, False
        return conversation, True

    def find_for_user(self, user_id: str) -> List[Conversation]:
        """All conversations the user takes part in, most recently active first."""
        return cast(
            List[Conversation],
            self.db.query(Conversation)
            .filter(or_(Conversation.user1_id == user_id, Conversation.user2_id == user_id))
            .order_by(
                func.coalesce(Conversation.last_message_at, Conversation.created_at).desc(),
                Conversation.id.desc(),
            )
            .all(),
        )

    def advance_last_message_at(self, conversation_id: str, timestamp: datetime) -> int:
        """
        Move last_message_at forward to ``timestamp``.

        The predicate keeps the column non-decreasing when two sends race.
        Returns the number of rows changed (0 when already newer).
        """
        updated = (
            self.db.query(Conversation)
            .filter(
                Conversation.id == conversation_id,
                or_(
                    Conversation.last_message_at.is_(None),
                    Conversation.last_message_at < timestamp,
                ),
            )
            .update({Conversation.last_message_at: timestamp}, synchronize_session=False)
        )
        self.db.flush()
        return int(updated)
