# backend/app/repositories/user_repository.py
"""User lookups needed by messaging and notification fan-out."""

from typing import Dict, List, Optional, Sequence, cast

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_ids(self, user_ids: Sequence[str]) -> Dict[str, User]:
        if not user_ids:
            return {}
        users = self.db.query(User).filter(User.id.in_(list(user_ids))).all()
        return {user.id: user for user in users}

    def list_broadcast_recipient_ids(self, exclude_user_id: Optional[str] = None) -> List[str]:
        """Ids of active, non-suspended users in stable order."""
        query = self.db.query(User.id).filter(
            User.is_active.is_(True),
            User.is_suspended.isnot(True),
        )
        if exclude_user_id:
            query = query.filter(User.id != exclude_user_id)
        return [row[0] for row in cast(List[tuple], query.order_by(User.id.asc()).all())]

    def list_all_ids(self) -> List[str]:
        return [row[0] for row in self.db.query(User.id).order_by(User.id.asc()).all()]
