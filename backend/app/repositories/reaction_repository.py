# backend/app/repositories/reaction_repository.py
"""Data access for message reactions (a set keyed by message, user and emoji)."""

from typing import List, Optional, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryConflictException
from ..models.message import MessageReaction
from .base_repository import BaseRepository


class ReactionRepository(BaseRepository[MessageReaction]):
    def __init__(self, db: Session):
        super().__init__(db, MessageReaction)

    def find(self, message_id: str, user_id: str, emoji: str) -> Optional[MessageReaction]:
        return self.find_one_by(message_id=message_id, user_id=user_id, emoji=emoji)

    def add(self, message_id: str, user_id: str, emoji: str) -> MessageReaction:
        """Insert the reaction unless it already exists; returns the stored row."""
        existing = self.find(message_id, user_id, emoji)
        if existing is not None:
            return existing
        try:
            return self.create(message_id=message_id, user_id=user_id, emoji=emoji)
        except RepositoryConflictException:
            winner = self.find(message_id, user_id, emoji)
            if winner is None:
                raise
            return winner

    def remove(self, message_id: str, user_id: str, emoji: str) -> int:
        deleted = (
            self.db.query(MessageReaction)
            .filter(
                MessageReaction.message_id == message_id,
                MessageReaction.user_id == user_id,
                MessageReaction.emoji == emoji,
            )
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return int(deleted)

    def list_for_message(self, message_id: str) -> List[MessageReaction]:
        return cast(
            List[MessageReaction],
            self.db.query(MessageReaction)
            .filter(MessageReaction.message_id == message_id)
            .order_by(MessageReaction.created_at.asc(), MessageReaction.id.asc())
            .all(),
        )
