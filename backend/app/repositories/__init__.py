# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for SocietyHub

Data access for the messaging and notification core, separated from
business logic. Repositories flush; services own commits.

Usage:
    from app.repositories import RepositoryFactory

    repo = RepositoryFactory.create_conversation_repository(db)
    conversation, created = repo.get_or_create(user_a_id, user_b_id)
"""

from .base_repository import BaseRepository
from .conversation_repository import ConversationRepository
from .factory import RepositoryFactory
from .message_repository import MessageRepository
from .notification_repository import (
    CategoryInterestRepository,
    NotificationPreferenceRepository,
    NotificationRepository,
)
from .presence_repository import PresenceRepository
from .reaction_repository import ReactionRepository
from .read_receipt_repository import ReadReceiptRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "CategoryInterestRepository",
    "ConversationRepository",
    "MessageRepository",
    "NotificationPreferenceRepository",
    "NotificationRepository",
    "PresenceRepository",
    "ReactionRepository",
    "ReadReceiptRepository",
    "RepositoryFactory",
    "UserRepository",
]
