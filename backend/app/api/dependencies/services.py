# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
bound to the request's session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ...services.conversation_service import ConversationService
from ...services.message_service import MessageService
from ...services.notification_preference_service import NotificationPreferenceService
from ...services.notification_service import NotificationBroadcaster, NotificationService
from ...services.presence_service import PresenceService
from .database import get_db


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    """Dependency for ConversationService."""
    return ConversationService(db)


def get_message_service(db: Session = Depends(get_db)) -> MessageService:
    return MessageService(db)


def get_presence_service(db: Session = Depends(get_db)) -> PresenceService:
    return PresenceService(db)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_notification_preference_service(
    db: Session = Depends(get_db),
) -> NotificationPreferenceService:
    return NotificationPreferenceService(db)


def get_notification_broadcaster() -> NotificationBroadcaster:
    """Broadcasts open their own sessions; nothing request-scoped is shared."""
    return NotificationBroadcaster()
