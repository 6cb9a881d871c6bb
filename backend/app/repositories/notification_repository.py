# backend/app/repositories/notification_repository.py
"""
Notification repositories.

- NotificationRepository: the append-only in-app inbox
- NotificationPreferenceRepository: per (category, subcategory) toggles
- CategoryInterestRepository: interest rows used by targeted broadcasts
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryConflictException
from ..models.notification import Notification, NotificationPreference, UserCategoryInterest
from .base_repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Inbox rows. Never rewritten beyond read_at/dismissed_at."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Notification)

    def create_notification(
        self,
        user_id: str,
        type: str,
        category: str,
        priority: str,
        entity_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        return self.create(
            user_id=user_id,
            type=type,
            category=category,
            priority=priority,
            entity_id=entity_id,
            actor_id=actor_id,
            payload=payload,
        )

    def get_user_notifications(
        self, user_id: str, *, unread_only: bool = False, limit: int = 50
    ) -> List[Notification]:
        query = self.db.query(Notification).filter(
            Notification.user_id == user_id,
            Notification.dismissed_at.is_(None),
        )
        if unread_only:
            query = query.filter(Notification.read_at.is_(None))
        return cast(
            List[Notification],
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
            .all(),
        )

    def get_unread_count(self, user_id: str) -> int:
        return int(
            self.db.query(Notification)
            .filter(
                Notification.user_id == user_id,
                Notification.read_at.is_(None),
                Notification.dismissed_at.is_(None),
            )
            .count()
        )

    def get_for_user(self, user_id: str, notification_id: str) -> Optional[Notification]:
        return self.find_one_by(id=notification_id, user_id=user_id)

    def mark_all_as_read(self, user_id: str) -> int:
        updated = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.read_at.is_(None))
            .update({Notification.read_at: datetime.now(timezone.utc)}, synchronize_session=False)
        )
        self.db.flush()
        return int(updated)


class NotificationPreferenceRepository(BaseRepository[NotificationPreference]):
    def __init__(self, db: Session) -> None:
        super().__init__(db, NotificationPreference)

    def get_user_preferences(self, user_id: str) -> List[NotificationPreference]:
        return cast(
            List[NotificationPreference],
            self.db.query(NotificationPreference)
            .filter(NotificationPreference.user_id == user_id)
            .order_by(NotificationPreference.category, NotificationPreference.subcategory)
            .all(),
        )

    def get_preference(
        self, user_id: str, category: str, subcategory: str
    ) -> Optional[NotificationPreference]:
        return self.find_one_by(user_id=user_id, category=category, subcategory=subcategory)

    def upsert_preference(
        self,
        user_id: str,
        category: str,
        subcategory: str,
        values: Dict[str, Any],
    ) -> NotificationPreference:
        """
        Read-then-write upsert.

        A concurrent insert for the same key loses the unique-constraint race;
        the loser re-reads and applies its values so the final write wins.
        """
        preference = self.get_preference(user_id, category, subcategory)
        if preference is not None:
            return self.update(preference, **values)
        try:
            return self.create(
                user_id=user_id, category=category, subcategory=subcategory, **values
            )
        except RepositoryConflictException:
            preference = self.get_preference(user_id, category, subcategory)
            if preference is None:
                raise
            return self.update(preference, **values)

    def existing_keys(self, user_id: str) -> Set[Tuple[str, str]]:
        rows = (
            self.db.query(NotificationPreference.category, NotificationPreference.subcategory)
            .filter(NotificationPreference.user_id == user_id)
            .all()
        )
        return {(category, subcategory) for category, subcategory in rows}


class CategoryInterestRepository(BaseRepository[UserCategoryInterest]):
    def __init__(self, db: Session) -> None:
        super().__init__(db, UserCategoryInterest)

    def add(self, user_id: str, category_type: str, category_value: str) -> UserCategoryInterest:
        existing = self.find_one_by(
            user_id=user_id, category_type=category_type, category_value=category_value
        )
        if existing is not None:
            return existing
        try:
            return self.create(
                user_id=user_id, category_type=category_type, category_value=category_value
            )
        except RepositoryConflictException:
            winner = self.find_one_by(
                user_id=user_id, category_type=category_type, category_value=category_value
            )
            if winner is None:
                raise
            return winner

    def remove(self, user_id: str, category_type: str, category_value: str) -> int:
        deleted = (
            self.db.query(UserCategoryInterest)
            .filter(
                UserCategoryInterest.user_id == user_id,
                UserCategoryInterest.category_type == category_type,
                UserCategoryInterest.category_value == category_value,
            )
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return int(deleted)

    def list_for_user(
        self, user_id: str, category_type: Optional[str] = None
    ) -> List[UserCategoryInterest]:
        query = self.db.query(UserCategoryInterest).filter(UserCategoryInterest.user_id == user_id)
        if category_type:
            query = query.filter(UserCategoryInterest.category_type == category_type)
        return cast(
            List[UserCategoryInterest],
            query.order_by(UserCategoryInterest.created_at.asc()).all(),
        )

    def find_interested_user_ids(
        self,
        category_type: str,
        category_value: str,
        exclude_user_ids: Iterable[str] = (),
    ) -> List[str]:
        excluded = {user_id for user_id in exclude_user_ids if user_id}
        query = self.db.query(UserCategoryInterest.user_id).filter(
            UserCategoryInterest.category_type == category_type,
            UserCategoryInterest.category_value == category_value,
        )
        if excluded:
            query = query.filter(UserCategoryInterest.user_id.notin_(excluded))
        return [row[0] for row in query.order_by(UserCategoryInterest.user_id.asc()).all()]
