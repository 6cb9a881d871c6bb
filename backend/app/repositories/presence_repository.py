# backend/app/repositories/presence_repository.py
"""Data access for user presence rows."""

from datetime import datetime, timezone
from typing import List, Optional, Tuple, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryConflictException
from ..models.presence import UserPresence
from ..models.user import User
from .base_repository import BaseRepository


class PresenceRepository(BaseRepository[UserPresence]):
    def __init__(self, db: Session):
        super().__init__(db, UserPresence)

    def upsert_status(
        self, user_id: str, status: str, seen_at: Optional[datetime] = None
    ) -> UserPresence:
        """Write status and last-seen for the user; the latest write wins."""
        seen_at = seen_at or datetime.now(timezone.utc)
        presence = self.get_by_id(user_id)
        if presence is not None:
            return self.update(presence, status=status, last_seen_at=seen_at)
        try:
            return self.create(user_id=user_id, status=status, last_seen_at=seen_at)
        except RepositoryConflictException:
            presence = self.get_by_id(user_id)
            if presence is None:
                raise
            return self.update(presence, status=status, last_seen_at=seen_at)

    def list_online(self, exclude_user_id: Optional[str] = None) -> List[Tuple[UserPresence, User]]:
        """Online presence rows joined with the user profile, most recently seen first."""
        query = (
            self.db.query(UserPresence, User)
            .join(User, User.id == UserPresence.user_id)
            .filter(UserPresence.status == "online")
        )
        if exclude_user_id:
            query = query.filter(UserPresence.user_id != exclude_user_id)
        return cast(
            List[Tuple[UserPresence, User]],
            query.order_by(UserPresence.last_seen_at.desc()).all(),
        )
