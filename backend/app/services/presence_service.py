# backend/app/services/presence_service.py
"""
Presence Service.

One row per user, written by the realtime transport on connect/disconnect.
There is no heartbeat expiry: a connection that dies without a close event
leaves the user ``online`` until the server notices the dead socket.
"""

from dataclasses import dataclass
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationException
from ..models.presence import PRESENCE_STATUSES, UserPresence
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.presence_repository import PresenceRepository
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class OnlineUser:
    presence: UserPresence
    user: User


class PresenceService(BaseService):
    def __init__(self, db: Session, presence_repository: Optional[PresenceRepository] = None):
        super().__init__(db)
        self.repository = presence_repository or RepositoryFactory.create_presence_repository(db)

    @BaseService.measure_operation("update_user_presence")
    def update_user_presence(self, user_id: str, status: str) -> UserPresence:
        normalized = (status or "").strip().lower()
        if normalized not in PRESENCE_STATUSES:
            raise ValidationException(
                f"Invalid presence status: {status!r}",
                code="invalid_presence_status",
                details={"allowed": list(PRESENCE_STATUSES)},
            )
        presence = self.repository.upsert_status(user_id, normalized)
        self.logger.debug("Presence updated", extra={"user_id": user_id, "status": normalized})
        return presence

    def mark_online(self, user_id: str) -> UserPresence:
        return self.update_user_presence(user_id, "online")

    def mark_offline(self, user_id: str) -> UserPresence:
        return self.update_user_presence(user_id, "offline")

    @BaseService.measure_operation("get_user_presence")
    def get_user_presence(self, user_id: str) -> Optional[UserPresence]:
        return self.repository.get_by_id(user_id)

    @BaseService.measure_operation("get_online_users")
    def get_online_users(self, exclude_user_id: Optional[str] = None) -> List[OnlineUser]:
        return [
            OnlineUser(presence=presence, user=user)
            for presence, user in self.repository.list_online(exclude_user_id)
        ]
