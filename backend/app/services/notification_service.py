# backend/app/services/notification_service.py
"""
Notification fan-out engine for SocietyHub.

``NotificationService.create_smart_notification`` is the single primitive:
look up the type's configuration, consult the recipient's preference, and
insert an inbox row only when enabled. Suppression and unknown types are
silent no-ops (logged), never errors.

Targeting modes built on the primitive:
- direct: the caller names the recipient (``create_smart_notification``,
  ``notify_message_received``)
- interest-targeted: ``notify_interested_users`` for types flagged
  ``requires_interest``
- all active users: ``NotificationBroadcaster.notify_all_users``, processed
  in fixed-size batches on worker threads, one session per recipient

Inbox reads and read/dismiss marks also live here.
"""

import asyncio
from contextlib import AbstractContextManager
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Callable, Dict, List, Optional, Set

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import DEFAULT_NOTIFICATION_LIMIT, MAX_QUERY_LIMIT
from ..core.exceptions import NotFoundException, ValidationException
from ..database import get_db_session
from ..models.conversation import Conversation
from ..models.message import Message
from ..models.notification import Notification
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..notifications.types import NotificationType, get_notification_config
from ..repositories.factory import RepositoryFactory
from ..repositories.notification_repository import (
    CategoryInterestRepository,
    NotificationRepository,
)
from .base import BaseService
from .notification_preference_service import NotificationPreferenceService

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_LENGTH = 100


class NotificationService(BaseService):
    """Preference-aware notification creation and the in-app inbox."""

    def __init__(
        self,
        db: Session,
        notification_repository: Optional[NotificationRepository] = None,
        preference_service: Optional[NotificationPreferenceService] = None,
        interest_repository: Optional[CategoryInterestRepository] = None,
    ) -> None:
        super().__init__(db)
        self.repository = (
            notification_repository or RepositoryFactory.create_notification_repository(db)
        )
        self.preference_service = preference_service or NotificationPreferenceService(db)
        self.interest_repository = (
            interest_repository or RepositoryFactory.create_category_interest_repository(db)
        )

    @BaseService.measure_operation("create_smart_notification")
    def create_smart_notification(
        self,
        user_id: str,
        type: str,
        entity_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
        category_value: Optional[str] = None,
    ) -> Optional[Notification]:
        """
        Create an inbox row for ``user_id`` if their preferences allow it.

        Returns the notification, or None when the type is unknown or the
        preference suppresses it.
        """
        type = str(type)
        config = get_notification_config(type)
        if config is None:
            self.logger.warning(f"Unknown notification type: {type}", extra={"user_id": user_id})
            prometheus_metrics.record_notification(type, "unknown")
            return None

        category = config.category.value
        if not self.preference_service.is_in_app_enabled(user_id, category, type):
            self.logger.debug(
                "Notification suppressed by preference",
                extra={
                    "user_id": user_id,
                    "type": type,
                    "category": category,
                    "category_value": category_value,
                },
            )
            prometheus_metrics.record_notification(type, "suppressed")
            return None

        notification = self.repository.create_notification(
            user_id=user_id,
            type=type,
            category=category,
            priority=config.priority.value,
            entity_id=entity_id,
            actor_id=actor_id,
            payload=payload or {},
        )
        prometheus_metrics.record_notification(type, "created")
        return notification

    @BaseService.measure_operation("notify_interested_users")
    def notify_interested_users(
        self,
        type: str,
        category_type: str,
        category_value: str,
        entity_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
        exclude_user_id: Optional[str] = None,
    ) -> int:
        """
        Notify every user registered for ``(category_type, category_value)``.

        Only valid for types flagged ``requires_interest``; anything else is a
        caller bug and is logged and ignored. Returns the number of rows created.
        """
        type = str(type)
        config = get_notification_config(type)
        if config is None or not config.requires_interest:
            self.logger.warning(f"Type {type} does not support interest-based notifications")
            return 0

        user_ids = self.interest_repository.find_interested_user_ids(
            category_type, category_value, exclude_user_ids=[exclude_user_id or ""]
        )
        merged_payload = {
            **(payload or {}),
            "categoryType": category_type,
            "categoryValue": category_value,
        }
        created = 0
        for user_id in user_ids:
            notification = self.create_smart_notification(
                user_id=user_id,
                type=type,
                entity_id=entity_id,
                actor_id=actor_id,
                payload=merged_payload,
                category_value=category_value,
            )
            if notification is not None:
                created += 1

        self.logger.info(
            "Interest notification fan-out complete",
            extra={
                "type": type,
                "category_type": category_type,
                "category_value": category_value,
                "matched": len(user_ids),
                "created": created,
            },
        )
        return created

    def notify_message_received(
        self, conversation: Conversation, message: Message
    ) -> Optional[Notification]:
        """Direct-mode notification to the participant who did not send ``message``."""
        recipient_id = conversation.get_other_user_id(message.sender_id)
        preview = (message.content or message.file_name or "")[:MESSAGE_PREVIEW_LENGTH]
        return self.create_smart_notification(
            user_id=recipient_id,
            type=NotificationType.MESSAGE_RECEIVED.value,
            entity_id=conversation.id,
            actor_id=message.sender_id,
            payload={
                "conversationId": conversation.id,
                "messageId": message.id,
                "preview": preview,
            },
        )

    # Inbox

    @BaseService.measure_operation("get_user_notifications")
    def get_user_notifications(
        self, user_id: str, *, unread_only: bool = False, limit: int = DEFAULT_NOTIFICATION_LIMIT
    ) -> List[Notification]:
        if limit < 1 or limit > MAX_QUERY_LIMIT:
            raise ValidationException(
                f"limit must be between 1 and {MAX_QUERY_LIMIT}", code="invalid_limit"
            )
        return self.repository.get_user_notifications(
            user_id, unread_only=unread_only, limit=limit
        )

    @BaseService.measure_operation("get_notification_unread_count")
    def get_unread_count(self, user_id: str) -> int:
        return self.repository.get_unread_count(user_id)

    def _get_owned(self, user_id: str, notification_id: str) -> Notification:
        notification = self.repository.get_for_user(user_id, notification_id)
        if notification is None:
            raise NotFoundException("Notification not found", code="notification_not_found")
        return notification

    @BaseService.measure_operation("mark_notification_read")
    def mark_as_read(self, user_id: str, notification_id: str) -> Notification:
        notification = self._get_owned(user_id, notification_id)
        if notification.read_at is None:
            self.repository.update(notification, read_at=datetime.now(timezone.utc))
        return notification

    @BaseService.measure_operation("mark_all_notifications_read")
    def mark_all_as_read(self, user_id: str) -> int:
        return self.repository.mark_all_as_read(user_id)

    @BaseService.measure_operation("dismiss_notification")
    def dismiss(self, user_id: str, notification_id: str) -> Notification:
        notification = self._get_owned(user_id, notification_id)
        if notification.dismissed_at is None:
            self.repository.update(notification, dismissed_at=datetime.now(timezone.utc))
        return notification


@dataclass
class BroadcastResult:
    """Outcome of an all-users broadcast."""

    notification_type: str
    recipients: int = 0
    created: int = 0
    suppressed: int = 0
    failed: int = 0
    batch_sizes: List[int] = field(default_factory=list)
    failed_user_ids: List[str] = field(default_factory=list)


SessionScope = Callable[[], AbstractContextManager[Session]]


class NotificationBroadcaster:
    """
    All-active-users broadcast.

    Recipients are processed in batches: every recipient in a batch is
    notified concurrently on a worker thread with its own session, and the
    next batch starts only after the whole batch has settled. A recipient
    whose write fails is logged and skipped; nothing is retried.
    """

    def __init__(
        self,
        batch_size: Optional[int] = None,
        session_scope: SessionScope = get_db_session,
    ) -> None:
        self.batch_size = batch_size or settings.notification_broadcast_batch_size
        self.session_scope = session_scope
        self.logger = logging.getLogger(self.__class__.__name__)

    def _load_recipient_ids(self, exclude_user_id: Optional[str]) -> List[str]:
        with self.session_scope() as session:
            return RepositoryFactory.create_user_repository(session).list_broadcast_recipient_ids(
                exclude_user_id
            )

    def _notify_one(
        self,
        user_id: str,
        type: str,
        entity_id: Optional[str],
        actor_id: Optional[str],
        payload: Optional[Dict[str, Any]],
    ) -> bool:
        with self.session_scope() as session:
            notification = NotificationService(session).create_smart_notification(
                user_id=user_id,
                type=type,
                entity_id=entity_id,
                actor_id=actor_id,
                payload=payload,
            )
            return notification is not None

    async def notify_all_users(
        self,
        type: str,
        entity_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
        exclude_user_id: Optional[str] = None,
    ) -> BroadcastResult:
        """
        Notify every active, non-suspended user except ``exclude_user_id``.

        Never raises: per-user failures are counted and logged, and any
        failure outside the batches is logged and ends the broadcast early.
        """
        type = str(type)
        result = BroadcastResult(notification_type=type)
        config = get_notification_config(type)
        if config is None or config.requires_interest:
            self.logger.warning(f"Type {type} cannot be broadcast to all users")
            return result

        try:
            user_ids = await asyncio.to_thread(self._load_recipient_ids, exclude_user_id)
            result.recipients = len(user_ids)

            for start in range(0, len(user_ids), self.batch_size):
                batch = user_ids[start : start + self.batch_size]
                outcomes = await asyncio.gather(
                    *(
                        asyncio.to_thread(
                            self._notify_one, user_id, type, entity_id, actor_id, payload
                        )
                        for user_id in batch
                    ),
                    return_exceptions=True,
                )
                result.batch_sizes.append(len(batch))
                prometheus_metrics.record_broadcast_batch()

                for user_id, outcome in zip(batch, outcomes):
                    if isinstance(outcome, BaseException):
                        result.failed += 1
                        result.failed_user_ids.append(user_id)
                        prometheus_metrics.record_notification(type, "failed")
                        self.logger.error(
                            f"Broadcast notification failed for user {user_id}: {outcome}",
                            extra={"user_id": user_id, "type": type},
                        )
                    elif outcome:
                        result.created += 1
                    else:
                        result.suppressed += 1
        except Exception:
            self.logger.exception("Broadcast aborted", extra={"type": type})

        self.logger.info(
            "Broadcast complete",
            extra={
                "type": type,
                "recipients": result.recipients,
                "created": result.created,
                "suppressed": result.suppressed,
                "failed": result.failed,
                "batches": len(result.batch_sizes),
            },
        )
        return result

    def spawn_notify_all_users(self, *args: Any, **kwargs: Any) -> "asyncio.Task[BroadcastResult]":
        """Start ``notify_all_users`` as a background task on the running loop."""
        return spawn_background(self.notify_all_users(*args, **kwargs), name="notify_all_users")


_background_tasks: Set["asyncio.Task[Any]"] = set()


def _on_background_done(task: "asyncio.Task[Any]") -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        logger.warning(f"Background task {task.get_name()} was cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Background task {task.get_name()} failed: {exc}", exc_info=exc)


def spawn_background(coro: Any, *, name: str) -> "asyncio.Task[Any]":
    """
    Run ``coro`` detached from the caller.

    The task is referenced until it finishes so it is not garbage collected,
    and its outcome is logged rather than propagated.
    """
    task = asyncio.create_task(coro, name=name)
    _background_tasks.add(task)
    task.add_done_callback(_on_background_done)
    return task
