# backend/app/repositories/factory.py
"""
Repository Factory for SocietyHub

Provides centralized creation of repository instances so services can
accept injected repositories in tests and build defaults otherwise.
"""

from sqlalchemy.orm import Session

from .conversation_repository import ConversationRepository
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


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_conversation_repository(db: Session) -> ConversationRepository:
        return ConversationRepository(db)

    @staticmethod
    def create_message_repository(db: Session) -> MessageRepository:
        return MessageRepository(db)

    @staticmethod
    def create_reaction_repository(db: Session) -> ReactionRepository:
        return ReactionRepository(db)

    @staticmethod
    def create_read_receipt_repository(db: Session) -> ReadReceiptRepository:
        return ReadReceiptRepository(db)

    @staticmethod
    def create_presence_repository(db: Session) -> PresenceRepository:
        return PresenceRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> UserRepository:
        return UserRepository(db)

    @staticmethod
    def create_notification_repository(db: Session) -> NotificationRepository:
        return NotificationRepository(db)

    @staticmethod
    def create_notification_preference_repository(db: Session) -> NotificationPreferenceRepository:
        return NotificationPreferenceRepository(db)

    @staticmethod
    def create_category_interest_repository(db: Session) -> CategoryInterestRepository:
        return CategoryInterestRepository(db)
