# backend/app/schemas/notifications.py
"""Schemas for notification inbox endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from ._strict_base import StrictModel, StrictRequestModel


class NotificationResponse(StrictModel):
    """Notification inbox entry."""

    id: str
    type: str
    category: str
    priority: str
    entity_id: str | None = None
    actor_id: str | None = None
    payload: dict[str, Any] | None = None
    read_at: datetime | None = None
    dismissed_at: datetime | None = None
    created_at: datetime


class NotificationListResponse(StrictModel):
    """Newest-first notification list."""

    notifications: list[NotificationResponse]
    total: int
    unread_count: int


class NotificationUnreadCountResponse(StrictModel):
    """Unread notification count response."""

    unread_count: int = Field(..., ge=0)


class MarkAllReadResponse(StrictModel):
    success: bool = True
    updated: int = Field(..., ge=0)


class AnnouncementRequest(StrictRequestModel):
    """Admin announcement broadcast to every active resident."""

    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=5000)


class AnnouncementAcceptedResponse(StrictModel):
    """Broadcast accepted; delivery continues in the background."""

    status: str = "accepted"
    type: str
