# backend/app/routes/v1/notifications.py
"""Notification inbox and admin announcement routes - API v1."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, status

from ...api.dependencies.auth import get_current_user_id, require_admin
from ...api.dependencies.services import get_notification_broadcaster, get_notification_service
from ...core.constants import DEFAULT_NOTIFICATION_LIMIT, MAX_QUERY_LIMIT
from ...models.user import User
from ...notifications.types import NotificationType
from ...schemas.notifications import (
    AnnouncementAcceptedResponse,
    AnnouncementRequest,
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    NotificationUnreadCountResponse,
)
from ...services.notification_service import NotificationBroadcaster, NotificationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications-v1"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    limit: int = Query(DEFAULT_NOTIFICATION_LIMIT, ge=1, le=MAX_QUERY_LIMIT),
    unread_only: bool = Query(False, alias="unreadOnly"),
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationListResponse:
    """List notifications for the current user, newest first. Dismissed entries are hidden."""
    notifications = service.get_user_notifications(user_id, unread_only=unread_only, limit=limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(item) for item in notifications],
        total=len(notifications),
        unread_count=service.get_unread_count(user_id),
    )


@router.get("/unread-count", response_model=NotificationUnreadCountResponse)
def get_unread_count(
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationUnreadCountResponse:
    """Get unread notification count for the current user."""
    return NotificationUnreadCountResponse(unread_count=service.get_unread_count(user_id))


@router.post("/read-all", response_model=MarkAllReadResponse)
def mark_all_notifications_read(
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
) -> MarkAllReadResponse:
    """Mark all notifications as read."""
    return MarkAllReadResponse(updated=service.mark_all_as_read(user_id))


@router.post(
    "/announcements",
    response_model=AnnouncementAcceptedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def create_announcement(
    request: AnnouncementRequest,
    admin: User = Depends(require_admin),
    broadcaster: NotificationBroadcaster = Depends(get_notification_broadcaster),
) -> AnnouncementAcceptedResponse:
    """
    Broadcast an announcement to every active resident.

    Returns as soon as the broadcast is scheduled; delivery runs in the
    background and its failures are logged, never returned.
    """
    notification_type = NotificationType.ADMIN_ANNOUNCEMENT.value
    broadcaster.spawn_notify_all_users(
        notification_type,
        actor_id=admin.id,
        payload={"title": request.title, "message": request.message},
        exclude_user_id=admin.id,
    )
    logger.info("Announcement broadcast scheduled", extra={"user_id": admin.id})
    return AnnouncementAcceptedResponse(type=notification_type)


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_notification_read(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    """Mark a single notification as read."""
    return NotificationResponse.model_validate(service.mark_as_read(user_id, notification_id))


@router.post("/{notification_id}/dismiss", response_model=NotificationResponse)
def dismiss_notification(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    service: NotificationService = Depends(get_notification_service),
) -> NotificationResponse:
    return NotificationResponse.model_validate(service.dismiss(user_id, notification_id))
