# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_user, get_current_user_id, require_admin
from .database import get_db
from .services import (
    get_conversation_service,
    get_message_service,
    get_notification_broadcaster,
    get_notification_preference_service,
    get_notification_service,
    get_presence_service,
)

__all__ = [
    # Auth
    "get_current_user_id",
    "get_current_user",
    "require_admin",
    # Database
    "get_db",
    # Services
    "get_conversation_service",
    "get_message_service",
    "get_presence_service",
    "get_notification_service",
    "get_notification_preference_service",
    "get_notification_broadcaster",
]
